"""Deciding whether two entries at the same path hold the same content."""

import logging
from dataclasses import dataclass

from ..models import FileEntry
from ..sources.base import FileSource
from ..utils import same_second

logger = logging.getLogger(__name__)


class HashCache:
    """Per-run memo of content hashes for one source, keyed by path.

    Entries stay immutable; hashes computed during a comparison are kept
    here instead of on the entry.
    """

    def __init__(self, source: FileSource):
        self.source = source
        self._hashes: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._hashes)

    def __contains__(self, path: str) -> bool:
        return path in self._hashes

    def get(self, entry: FileEntry) -> str:
        """Return the content hash of an entry, computing it at most once."""
        if entry.path not in self._hashes:
            if entry.content_hash:
                self._hashes[entry.path] = entry.content_hash
            else:
                logger.debug(f"Hashing {entry.path} on {self.source.describe()}")
                self._hashes[entry.path] = self.source.hash_file(entry)
        return self._hashes[entry.path]


@dataclass
class FingerprintPolicy:
    """Rules for comparing a source entry with a destination entry.

    1. Known sizes that differ mean different content (no hashing).
    2. If ``trust_mtime`` is set, equal sizes plus modification times in the
       same whole second mean same content. This can report a same-second,
       same-size edit as unchanged; disable ``trust_mtime`` to always hash.
    3. Otherwise the content hashes of both sides decide.
    """

    trust_mtime: bool = True
    """Accept equal size and modification time as proof of equal content"""

    def compare(
        self,
        source_entry: FileEntry,
        destination_entry: FileEntry,
        source_hashes: HashCache,
        destination_hashes: HashCache,
    ) -> tuple[bool, str]:
        """Compare two entries for the same path.

        Args:
            source_entry: Entry from the source listing
            destination_entry: Entry from the destination listing
            source_hashes: Hash memo for the source
            destination_hashes: Hash memo for the destination

        Returns:
            Tuple of (same content, human-readable reason)

        Raises:
            NotFoundError: If a file vanished before it could be hashed
            HashError: If hashing failed
        """
        sizes_known = source_entry.size is not None and destination_entry.size is not None
        if sizes_known and source_entry.size != destination_entry.size:
            return (
                False,
                f"Size changed ({destination_entry.size} -> {source_entry.size})",
            )

        if (
            self.trust_mtime
            and sizes_known
            and source_entry.modified is not None
            and destination_entry.modified is not None
            and same_second(source_entry.modified, destination_entry.modified)
        ):
            return True, "Same size and modification time"

        source_hash = source_hashes.get(source_entry)
        destination_hash = destination_hashes.get(destination_entry)
        if source_hash == destination_hash:
            return True, "Same content hash"
        return False, "Content hash differs"
