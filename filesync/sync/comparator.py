"""File comparison logic for sync operations."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import EnumerationError
from ..models import FileEntry
from ..sources.base import FileSource
from .fingerprint import FingerprintPolicy, HashCache

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Actions that can be taken during sync."""

    COPY = "copy"
    """Copy source file to destination"""

    DELETE = "delete"
    """Delete destination file that no longer exists on the source"""

    SKIP = "skip"
    """Skip file (no action needed)"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    path: str
    """Relative path of the file"""

    reason: str
    """Human-readable reason for this decision"""

    source_entry: Optional[FileEntry] = None
    """Source entry (if exists)"""

    destination_entry: Optional[FileEntry] = None
    """Destination entry (if exists)"""

    def to_dict(self) -> dict:
        """Convert decision to a JSON-serializable dictionary."""
        return {
            "action": self.action.value,
            "path": self.path,
            "reason": self.reason,
        }


def index_by_path(entries: list[FileEntry], side: str) -> dict[str, FileEntry]:
    """Map entries by path, preserving listing order.

    Raises:
        EnumerationError: If a path occurs twice in one listing
    """
    mapping: dict[str, FileEntry] = {}
    for entry in entries:
        if entry.path in mapping:
            raise EnumerationError(f"Duplicate path in {side} listing: {entry.path}")
        mapping[entry.path] = entry
    return mapping


class FileComparator:
    """Compares source and destination listings to determine sync actions."""

    def __init__(
        self,
        source: FileSource,
        destination: FileSource,
        delete_extraneous: bool = False,
        policy: Optional[FingerprintPolicy] = None,
    ):
        """Initialize file comparator.

        Args:
            source: Source backend (used for hashing source entries)
            destination: Destination backend (used for hashing its entries)
            delete_extraneous: Delete destination files missing from the source
            policy: Fingerprint policy (defaults to trusting size + mtime)
        """
        self.source = source
        self.destination = destination
        self.delete_extraneous = delete_extraneous
        self.policy = policy or FingerprintPolicy()

    def compare_files(
        self,
        source_entries: list[FileEntry],
        destination_entries: list[FileEntry],
    ) -> list[SyncDecision]:
        """Compare two listings and determine sync decisions.

        Copies (and skips) follow the source listing order; deletes follow
        the destination listing order and always come after every copy.

        Args:
            source_entries: Full listing of the source
            destination_entries: Full listing of the destination

        Returns:
            List of SyncDecision objects
        """
        source_map = index_by_path(source_entries, "source")
        destination_map = index_by_path(destination_entries, "destination")

        source_hashes = HashCache(self.source)
        destination_hashes = HashCache(self.destination)

        decisions: list[SyncDecision] = []
        for path, source_entry in source_map.items():
            destination_entry = destination_map.get(path)
            if destination_entry is None:
                decisions.append(
                    SyncDecision(
                        action=SyncAction.COPY,
                        path=path,
                        reason="New file",
                        source_entry=source_entry,
                    )
                )
                continue

            same, reason = self.policy.compare(
                source_entry, destination_entry, source_hashes, destination_hashes
            )
            decisions.append(
                SyncDecision(
                    action=SyncAction.SKIP if same else SyncAction.COPY,
                    path=path,
                    reason=reason,
                    source_entry=source_entry,
                    destination_entry=destination_entry,
                )
            )

        if self.delete_extraneous:
            for path, destination_entry in destination_map.items():
                if path not in source_map:
                    decisions.append(
                        SyncDecision(
                            action=SyncAction.DELETE,
                            path=path,
                            reason="File no longer exists on source",
                            destination_entry=destination_entry,
                        )
                    )

        logger.debug(
            "Compared %d source and %d destination entries (hashed %d + %d)",
            len(source_map),
            len(destination_map),
            len(source_hashes),
            len(destination_hashes),
        )
        return decisions

    @staticmethod
    def actions(decisions: list[SyncDecision]) -> list[SyncDecision]:
        """Return only the decisions that change the destination."""
        return [d for d in decisions if d.action != SyncAction.SKIP]
