"""Data models for filesync."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class FileEntry:
    """A file at a relative path, as seen by one listing of a source.

    Entries are snapshots: the metadata is advisory and the file is always
    re-read when it is transferred.
    """

    path: str
    """Relative path using forward slashes"""

    size: Optional[int] = None
    """File size in bytes (None if the backend did not report it)"""

    modified: Optional[datetime] = None
    """Last modification time in UTC (None if unknown)"""

    content_hash: Optional[str] = None
    """Lowercase hex MD5 digest of the content, if already known"""

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("FileEntry path must not be empty")
        if self.size is not None and self.size < 0:
            raise ValueError(f"Negative size for {self.path}: {self.size}")

    def with_hash(self, content_hash: str) -> "FileEntry":
        """Return a copy of this entry carrying a content hash."""
        return replace(self, content_hash=content_hash)

    def to_dict(self) -> dict:
        """Convert entry to a JSON-serializable dictionary."""
        return {
            "path": self.path,
            "size": self.size,
            "modified": self.modified.isoformat() if self.modified else None,
            "content_hash": self.content_hash,
        }
