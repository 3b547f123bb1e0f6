"""In-memory backend, handy for tests and for embedding."""

from datetime import datetime
from typing import Callable, Optional

from ..exceptions import NotFoundError
from ..models import FileEntry
from ..utils import md5_bytes, normalize_path, to_utc


class MemoryFiles:
    """A file source that keeps every file in a dictionary."""

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        use_hashes: bool = False,
        name: str = "memory",
    ):
        """Initialize in-memory file source.

        Args:
            clock: Returns the modification time stamped on each write; if
                None, entries carry no modification time
            use_hashes: Store the MD5 of each file on its entry when written
            name: Label used by describe()
        """
        self.clock = clock
        self.use_hashes = use_hashes
        self.name = name
        self.files: dict[str, tuple[FileEntry, bytes]] = {}

    def __repr__(self) -> str:
        return f"MemoryFiles({self.name!r}, {len(self.files)} files)"

    def describe(self) -> str:
        return f"memory://{self.name}"

    def add_file(
        self,
        path: str,
        data: bytes,
        modified: Optional[datetime] = None,
    ) -> FileEntry:
        """Store a file with explicit metadata, bypassing the clock.

        Args:
            path: Relative path
            data: File content
            modified: Modification time to record

        Returns:
            The stored entry
        """
        path = normalize_path(path)
        entry = FileEntry(
            path=path,
            size=len(data),
            modified=to_utc(modified),
            content_hash=md5_bytes(data) if self.use_hashes else None,
        )
        # Re-insert so the most recent write lists last
        self.files.pop(path, None)
        self.files[path] = (entry, bytes(data))
        return entry

    def contents(self) -> dict[str, bytes]:
        """Return a path -> bytes snapshot of all files."""
        return {path: data for path, (_, data) in self.files.items()}

    def list_files(self) -> list[FileEntry]:
        return [entry for entry, _ in self.files.values()]

    def read_file(self, path: str) -> bytes:
        path = normalize_path(path)
        if path not in self.files:
            raise NotFoundError(path)
        return self.files[path][1]

    def write_file(self, path: str, data: bytes) -> None:
        modified = self.clock() if self.clock is not None else None
        self.add_file(path, data, modified=modified)

    def delete_file(self, path: str) -> None:
        self.files.pop(normalize_path(path), None)

    def hash_file(self, entry: FileEntry) -> str:
        if entry.content_hash:
            return entry.content_hash
        return md5_bytes(self.read_file(entry.path))

    def set_modified(self, path: str, modified: Optional[datetime]) -> bool:
        path = normalize_path(path)
        if modified is None or path not in self.files:
            return False
        entry, data = self.files[path]
        self.files[path] = (
            FileEntry(
                path=entry.path,
                size=entry.size,
                modified=to_utc(modified),
                content_hash=entry.content_hash,
            ),
            data,
        )
        return True
