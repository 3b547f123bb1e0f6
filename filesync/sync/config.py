"""Loading sync pairs from JSON files."""

import json
import logging
from pathlib import Path
from typing import Union

from ..exceptions import ConfigError
from .pair import SyncPair

logger = logging.getLogger(__name__)


class SyncConfigError(ConfigError):
    """Raised when a sync pairs file cannot be used."""

    pass


def load_sync_pairs_from_json(path: Union[str, Path]) -> list[SyncPair]:
    """Load sync pairs from a JSON file.

    The file holds either a list of pair objects or an object with a
    ``pairs`` list::

        [
            {"source": "./docs", "destination": "s3://bucket/docs",
             "deleteExtraneous": true, "ignore": ["*.tmp"]}
        ]

    Args:
        path: JSON file path

    Returns:
        List of SyncPair objects

    Raises:
        SyncConfigError: If the file is missing, not valid JSON, or a pair
            is invalid
    """
    path = Path(path)
    if not path.exists():
        raise SyncConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SyncConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise SyncConfigError(f"Cannot read {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("pairs")
    if not isinstance(data, list):
        raise SyncConfigError(f"{path} must contain a list of sync pairs")

    pairs = []
    for index, item in enumerate(data):
        try:
            pairs.append(SyncPair.from_dict(item))
        except ConfigError as e:
            raise SyncConfigError(f"Sync pair #{index + 1} in {path}: {e}") from e

    logger.debug(f"Loaded {len(pairs)} sync pair(s) from {path}")
    return pairs
