"""Core sync engine for executing one-way sync runs."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..exceptions import SyncAbortedError
from ..models import FileEntry
from ..output import OutputFormatter
from ..sources import open_source
from ..sources.base import FileSource
from .comparator import FileComparator, SyncAction, SyncDecision
from .executor import ProgressCallback, SyncExecutor
from .fingerprint import FingerprintPolicy
from .pair import SyncPair

logger = logging.getLogger(__name__)


class SyncRunState(str, Enum):
    """Lifecycle of one sync run."""

    IDLE = "idle"
    ENUMERATING = "enumerating"
    DIFFING = "diffing"
    APPLYING = "applying"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class SyncReport:
    """Outcome of a sync run."""

    synced_paths: list[str] = field(default_factory=list)
    """Paths copied or deleted, in the order applied"""

    copied: list[str] = field(default_factory=list)
    """Paths copied (planned paths for a dry run)"""

    deleted: list[str] = field(default_factory=list)
    """Paths deleted (planned paths for a dry run)"""

    skipped: list[str] = field(default_factory=list)
    """Paths considered unchanged"""

    dry_run: bool = False
    """True if nothing was applied"""

    def to_dict(self) -> dict:
        """Convert report to a statistics dictionary."""
        return {
            "copies": len(self.copied),
            "deletes": len(self.deleted),
            "skips": len(self.skipped),
            "synced": list(self.synced_paths),
            "dry_run": self.dry_run,
        }


class SyncEngine:
    """Core sync engine that orchestrates one-way file synchronization.

    A run goes through ENUMERATING (both listings), DIFFING (comparator),
    APPLYING (executor) and ends COMPLETED or ABORTED. Every run starts from
    fresh listings; nothing is cached between runs.
    """

    def __init__(self, output: Optional[OutputFormatter] = None):
        """Initialize sync engine.

        Args:
            output: Output formatter for displaying progress/status
        """
        self.output = output or OutputFormatter(quiet=True)
        self.state = SyncRunState.IDLE

    def _set_state(self, state: SyncRunState) -> None:
        logger.debug(f"Sync state: {self.state.value} -> {state.value}")
        self.state = state

    def _list(self, source: FileSource, progress: Optional[Progress]) -> list[FileEntry]:
        if progress is None:
            return source.list_files()
        task = progress.add_task(f"Scanning {source.describe()}...", total=None)
        entries = source.list_files()
        progress.update(
            task, description=f"Found {len(entries)} file(s) in {source.describe()}"
        )
        return entries

    def _enumerate(
        self, source: FileSource, destination: FileSource
    ) -> tuple[list[FileEntry], list[FileEntry]]:
        """List both sides; any failure aborts before diffing."""
        scan_start = time.time()
        if self.output.quiet or self.output.json_output:
            destination_entries = self._list(destination, None)
            source_entries = self._list(source, None)
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                transient=True,
            ) as progress:
                destination_entries = self._list(destination, progress)
                source_entries = self._list(source, progress)
        logger.debug(
            f"Enumeration took {time.time() - scan_start:.2f}s "
            f"({len(source_entries)} source, {len(destination_entries)} destination)"
        )
        return source_entries, destination_entries

    def plan(
        self,
        source: FileSource,
        destination: FileSource,
        delete_extraneous: bool = False,
        trust_mtime: bool = True,
    ) -> list[SyncDecision]:
        """Enumerate both sides and compute decisions without applying them.

        Args:
            source: Backend to read from
            destination: Backend to bring in line with the source
            delete_extraneous: Plan deletes for destination-only files
            trust_mtime: Allow the size + mtime fast path

        Returns:
            Decisions: copies (and skips) first, then deletes

        Raises:
            EnumerationError: If either listing fails
            HashError: If fingerprinting fails
        """
        try:
            self._set_state(SyncRunState.ENUMERATING)
            source_entries, destination_entries = self._enumerate(source, destination)

            self._set_state(SyncRunState.DIFFING)
            comparator = FileComparator(
                source,
                destination,
                delete_extraneous=delete_extraneous,
                policy=FingerprintPolicy(trust_mtime=trust_mtime),
            )
            return comparator.compare_files(source_entries, destination_entries)
        except Exception:
            self._set_state(SyncRunState.ABORTED)
            raise

    def sync(
        self,
        source: FileSource,
        destination: FileSource,
        delete_extraneous: bool = False,
        dry_run: bool = False,
        trust_mtime: bool = True,
        preserve_mtime: bool = True,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SyncReport:
        """Sync new and changed files from source to destination.

        Args:
            source: Backend to read from (never modified)
            destination: Backend to write to
            delete_extraneous: Delete destination files missing from the source
            dry_run: Only compute and display the plan
            trust_mtime: Allow the size + mtime fast path
            preserve_mtime: Carry source modification times over to copies
            progress_callback: Optional function(SyncProgressInfo)

        Returns:
            SyncReport for the run

        Raises:
            EnumerationError: If either listing fails (nothing applied)
            HashError: If fingerprinting fails (nothing applied)
            SyncAbortedError: If an action fails; carries the paths synced
                before the failure

        Examples:
            >>> engine = SyncEngine()
            >>> report = engine.sync(LocalFiles("./site"), s3_files, dry_run=True)
            >>> print(f"Would copy {len(report.copied)} files")
        """
        if not self.output.quiet:
            self.output.info(f"Syncing: {source.describe()} -> {destination.describe()}")
            if delete_extraneous:
                self.output.info("Extraneous destination files will be deleted")
            if dry_run:
                self.output.info("Dry run: No changes will be made")
            self.output.print("")

        decisions = self.plan(
            source,
            destination,
            delete_extraneous=delete_extraneous,
            trust_mtime=trust_mtime,
        )

        report = SyncReport(dry_run=dry_run)
        for decision in decisions:
            if decision.action == SyncAction.COPY:
                report.copied.append(decision.path)
            elif decision.action == SyncAction.DELETE:
                report.deleted.append(decision.path)
            else:
                report.skipped.append(decision.path)

        self._display_sync_plan(report, decisions)

        if dry_run:
            self._set_state(SyncRunState.COMPLETED)
            self._display_summary(report)
            return report

        self._set_state(SyncRunState.APPLYING)
        executor = SyncExecutor(
            source,
            destination,
            preserve_mtime=preserve_mtime,
            progress_callback=progress_callback,
        )
        try:
            report.synced_paths = executor.execute(decisions)
        except SyncAbortedError as e:
            self._set_state(SyncRunState.ABORTED)
            logger.debug(f"Sync aborted after {len(e.synced_paths)} action(s)")
            raise

        self._set_state(SyncRunState.COMPLETED)
        self._display_summary(report)
        return report

    def sync_pair(
        self,
        pair: SyncPair,
        dry_run: bool = False,
        preserve_mtime: bool = True,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SyncReport:
        """Sync a configured sync pair.

        Args:
            pair: Sync pair to synchronize
            dry_run: Only compute and display the plan
            preserve_mtime: Carry source modification times over to copies
            progress_callback: Optional function(SyncProgressInfo)

        Returns:
            SyncReport for the run
        """
        source = open_source(
            pair.source,
            ignore_patterns=pair.ignore,
            exclude_dot_files=pair.exclude_dot_files,
        )
        destination = open_source(
            pair.destination, missing_ok=True, use_ignore_files=False
        )
        return self.sync(
            source,
            destination,
            delete_extraneous=pair.delete_extraneous,
            dry_run=dry_run,
            trust_mtime=pair.trust_mtime,
            preserve_mtime=preserve_mtime,
            progress_callback=progress_callback,
        )

    def _display_sync_plan(
        self, report: SyncReport, decisions: list[SyncDecision]
    ) -> None:
        """Display sync plan to user."""
        if self.output.quiet:
            return

        self.output.info("Sync plan:")
        if report.copied:
            self.output.info(f"  → Copy: {len(report.copied)} file(s)")
        if report.deleted:
            self.output.info(f"  ✗ Delete: {len(report.deleted)} file(s)")
        if report.skipped:
            self.output.info(f"  = Unchanged: {len(report.skipped)} file(s)")

        if report.dry_run:
            for decision in decisions:
                if decision.action == SyncAction.SKIP:
                    continue
                self.output.info(
                    f"    {decision.action.value}: {decision.path} ({decision.reason})"
                )
        self.output.print("")

    def _display_summary(self, report: SyncReport) -> None:
        """Display sync summary."""
        if self.output.quiet:
            return

        if report.dry_run:
            self.output.success("Dry run complete!")
        else:
            self.output.success("Sync complete!")

        if report.copied or report.deleted:
            verb = "Would copy" if report.dry_run else "Copied"
            if report.copied:
                self.output.info(f"  {verb}: {len(report.copied)}")
            verb = "Would delete" if report.dry_run else "Deleted"
            if report.deleted:
                self.output.info(f"  {verb}: {len(report.deleted)}")
        else:
            self.output.info("No changes needed - everything is in sync!")


def sync_one_way(
    source: FileSource,
    destination: FileSource,
    delete_extraneous: bool = False,
    trust_mtime: bool = True,
    preserve_mtime: bool = True,
) -> list[str]:
    """Sync new and changed files from one source to another.

    Files missing from ``destination`` are copied, files whose content
    differs are re-copied, and with ``delete_extraneous`` destination files
    missing from ``source`` are deleted. ``source`` is never modified.

    Args:
        source: Backend to read from
        destination: Backend to bring in line with the source
        delete_extraneous: Mirror the source exactly
        trust_mtime: Treat equal size and mtime as unchanged without hashing
        preserve_mtime: Carry source modification times over to copies

    Returns:
        Paths copied or deleted, in the order applied

    Raises:
        EnumerationError: If either listing fails (nothing applied)
        SyncAbortedError: If an action fails; ``synced_paths`` lists what
            was applied before the failure. Re-running is always safe.

    Examples:
        >>> local = LocalFiles("./my_local_files")
        >>> s3 = S3Files(boto3.client("s3"), "my_bucket", "path/in/bucket")
        >>> sync_one_way(local, s3)
        ['my_changed_file.txt']
    """
    engine = SyncEngine()
    report = engine.sync(
        source,
        destination,
        delete_extraneous=delete_extraneous,
        trust_mtime=trust_mtime,
        preserve_mtime=preserve_mtime,
    )
    return report.synced_paths
