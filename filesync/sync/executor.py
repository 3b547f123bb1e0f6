"""Sequential application of sync decisions."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..exceptions import SyncAbortedError
from ..sources.base import FileSource
from .comparator import SyncAction, SyncDecision
from .operations import SyncOperations

logger = logging.getLogger(__name__)


class ActionState(str, Enum):
    """Lifecycle of a single action."""

    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SyncProgressInfo:
    """Progress event emitted for every action state change."""

    decision: SyncDecision
    """Decision being applied"""

    state: ActionState
    """New state of the action"""

    index: int
    """Zero-based position of the action in the run"""

    total: int
    """Number of actions in the run"""

    bytes_transferred: int = 0
    """Bytes written by this action (copies that reached DONE)"""

    error: Optional[Exception] = None
    """Error for FAILED actions"""


ProgressCallback = Callable[[SyncProgressInfo], None]


class SyncExecutor:
    """Applies copy and delete decisions one at a time.

    The first failing action stops the run. Nothing is retried or rolled
    back; the caller gets the paths applied so far through
    :class:`~filesync.exceptions.SyncAbortedError` and can simply run the
    sync again.
    """

    def __init__(
        self,
        source: FileSource,
        destination: FileSource,
        preserve_mtime: bool = True,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """Initialize sync executor.

        Args:
            source: Backend to read from
            destination: Backend to write to / delete from
            preserve_mtime: Carry source modification times over to copies
            progress_callback: Optional function(SyncProgressInfo)
        """
        self.operations = SyncOperations(source, destination)
        self.preserve_mtime = preserve_mtime
        self.progress_callback = progress_callback

    def _emit(self, info: SyncProgressInfo) -> None:
        if self.progress_callback is not None:
            self.progress_callback(info)

    def execute(self, decisions: list[SyncDecision]) -> list[str]:
        """Apply decisions in order.

        SKIP decisions are ignored.

        Args:
            decisions: Decisions from the comparator

        Returns:
            Paths that were copied or deleted, in the order applied

        Raises:
            SyncAbortedError: On the first failing action
        """
        actions = [d for d in decisions if d.action != SyncAction.SKIP]
        total = len(actions)
        synced_paths: list[str] = []

        for index, decision in enumerate(actions):
            self._emit(SyncProgressInfo(decision, ActionState.PENDING, index, total))
            action_start = time.time()
            self._emit(SyncProgressInfo(decision, ActionState.IN_FLIGHT, index, total))
            try:
                bytes_transferred = self._apply(decision)
            except Exception as e:
                logger.debug(f"{decision.action.value} of {decision.path} failed: {e}")
                self._emit(
                    SyncProgressInfo(
                        decision, ActionState.FAILED, index, total, error=e
                    )
                )
                raise SyncAbortedError(decision.path, e, synced_paths) from e

            synced_paths.append(decision.path)
            logger.debug(
                f"{decision.action.value} of {decision.path} took "
                f"{time.time() - action_start:.2f}s"
            )
            self._emit(
                SyncProgressInfo(
                    decision,
                    ActionState.DONE,
                    index,
                    total,
                    bytes_transferred=bytes_transferred,
                )
            )

        return synced_paths

    def _apply(self, decision: SyncDecision) -> int:
        if decision.action == SyncAction.COPY:
            return self.operations.copy_file(
                decision.path,
                source_entry=decision.source_entry,
                preserve_mtime=self.preserve_mtime,
            )
        if decision.action == SyncAction.DELETE:
            self.operations.delete_file(decision.path)
            return 0
        raise ValueError(f"Cannot apply action {decision.action!r}")
