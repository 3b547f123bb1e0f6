"""CLI progress display for sync operations.

This module provides a Rich-based progress display fed by the progress
events of the sync executor.
"""

from typing import Optional

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .sync.comparator import SyncAction
from .sync.executor import ActionState, SyncProgressInfo
from .utils import format_size


class SyncProgressDisplay:
    """Rich-based progress display for sync operations.

    Shows one bar over all actions of the run, the path being applied and
    the number of bytes copied so far.
    """

    def __init__(self) -> None:
        """Initialize the progress display."""
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None
        self.bytes_copied = 0
        self.failed_path: Optional[str] = None
        self._active = False

    def _start(self) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("[cyan]{task.fields[transferred]}"),
            TimeElapsedColumn(),
            refresh_per_second=4,
        )
        self._progress.start()
        self._task = self._progress.add_task(
            "Preparing sync...",
            total=None,
            transferred="0 B",
        )

    def handle_event(self, info: SyncProgressInfo) -> None:
        """Handle a progress event from the executor.

        The bar is created on the first event, once the engine has finished
        its scanning spinner.

        Args:
            info: Progress information
        """
        if not self._active:
            return
        if self._progress is None:
            self._start()

        if info.state == ActionState.IN_FLIGHT:
            verb = "Copying" if info.decision.action == SyncAction.COPY else "Deleting"
            self._progress.update(
                self._task,
                total=info.total,
                description=f"{verb} {info.decision.path}",
            )

        elif info.state == ActionState.DONE:
            self.bytes_copied += info.bytes_transferred
            self._progress.update(
                self._task,
                advance=1,
                transferred=format_size(self.bytes_copied),
            )

        elif info.state == ActionState.FAILED:
            self.failed_path = info.decision.path
            self._progress.update(
                self._task,
                description=f"[red]Failed: {info.decision.path}",
            )

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - accept events until exit."""
        self._active = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        self._active = False
        if self._progress is not None:
            if self._task is not None and exc_type is None:
                self._progress.update(self._task, description="Sync complete")
            self._progress.stop()
            self._progress = None
            self._task = None


def run_sync_with_progress(
    engine,
    source,
    destination,
    delete_extraneous: bool,
    dry_run: bool,
    trust_mtime: bool,
    preserve_mtime: bool,
    show_progress: bool = True,
):
    """Run a sync with a Rich progress display.

    Args:
        engine: SyncEngine instance
        source: Source backend
        destination: Destination backend
        delete_extraneous: Delete destination files missing from the source
        dry_run: If True, only show what would be done
        trust_mtime: Allow the size + mtime fast path
        preserve_mtime: Carry source modification times over to copies
        show_progress: Show the progress bar while applying

    Returns:
        SyncReport for the run
    """
    # For dry-run, don't show progress bar (just text output)
    if dry_run or not show_progress:
        return engine.sync(
            source,
            destination,
            delete_extraneous=delete_extraneous,
            dry_run=dry_run,
            trust_mtime=trust_mtime,
            preserve_mtime=preserve_mtime,
        )

    with SyncProgressDisplay() as display:
        return engine.sync(
            source,
            destination,
            delete_extraneous=delete_extraneous,
            dry_run=dry_run,
            trust_mtime=trust_mtime,
            preserve_mtime=preserve_mtime,
            progress_callback=display.handle_event,
        )
