"""Capability protocol every storage backend implements."""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from ..models import FileEntry


@runtime_checkable
class FileSource(Protocol):
    """A rooted collection of files that can take part in a sync.

    Backends implement this structurally; there is no shared base class.
    All paths are relative to the backend's root and use forward slashes.
    """

    def describe(self) -> str:
        """Return a human-readable label for the root (for messages)."""
        ...

    def list_files(self) -> list[FileEntry]:
        """List every file under the root in a deterministic order.

        Raises:
            EnumerationError: If the root is missing or unreachable
        """
        ...

    def read_file(self, path: str) -> bytes:
        """Read the full content of one file.

        Raises:
            NotFoundError: If the file no longer exists
            ReadError: On I/O or network failure
        """
        ...

    def write_file(self, path: str, data: bytes) -> None:
        """Create or overwrite a file, creating parents as needed.

        Raises:
            WriteError: On failure
        """
        ...

    def delete_file(self, path: str) -> None:
        """Delete a file; deleting a missing file is not an error.

        Raises:
            WriteError: On failure
        """
        ...

    def hash_file(self, entry: FileEntry) -> str:
        """Return the MD5 hex digest of an entry's content.

        Uses ``entry.content_hash`` when present, otherwise reads the file.

        Raises:
            NotFoundError: If the file no longer exists
            HashError: If the content could not be read
        """
        ...

    def set_modified(self, path: str, modified: Optional[datetime]) -> bool:
        """Set the modification time of a file.

        Returns:
            True if the time was set, False if the backend cannot (or
            ``modified`` is None)

        Raises:
            WriteError: On failure
        """
        ...
