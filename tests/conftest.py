"""Shared fixtures for filesync tests."""

from datetime import datetime, timedelta, timezone

import pytest

BASE_TIME = datetime(2000, 1, 1, tzinfo=timezone.utc)


class Clock:
    """Deterministic clock: every call returns the next day."""

    def __init__(self):
        self.ticks = 0

    def __call__(self) -> datetime:
        value = BASE_TIME + timedelta(days=self.ticks)
        self.ticks += 1
        return value


@pytest.fixture
def clock():
    """Provide a shared deterministic clock."""
    return Clock()
