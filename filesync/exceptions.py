"""Exception classes for filesync."""

from typing import Optional


class FileSyncError(Exception):
    """Base exception for all filesync errors."""

    pass


class EnumerationError(FileSyncError):
    """Listing the files of a source failed (root missing or unreachable)."""

    pass


class NotFoundError(FileSyncError):
    """A file disappeared between listing and transfer."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"File not found: {path}")


class ReadError(FileSyncError):
    """Reading a file failed (I/O or network)."""

    pass


class HashError(ReadError):
    """Computing the content fingerprint of a file failed."""

    pass


class WriteError(FileSyncError):
    """Writing, deleting or touching a file failed."""

    pass


class InvalidPathError(FileSyncError):
    """A path is not a clean relative path below the sync root."""

    pass


class ConfigError(FileSyncError):
    """Configuration or sync pair definition is invalid."""

    pass


class SyncAbortedError(FileSyncError):
    """A sync run stopped at the first failing action.

    Attributes:
        path: Path of the action that failed
        error: The underlying error
        synced_paths: Paths that were applied before the failure, in order
    """

    def __init__(self, path: str, error: Exception, synced_paths: list[str]):
        self.path = path
        self.error = error
        self.synced_paths = list(synced_paths)
        super().__init__(
            f"Sync aborted at '{path}' after {len(self.synced_paths)} "
            f"synced file(s): {error}"
        )
