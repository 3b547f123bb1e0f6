"""filesync - sync files between local directories and object storage."""

from .exceptions import (
    ConfigError,
    EnumerationError,
    FileSyncError,
    HashError,
    InvalidPathError,
    NotFoundError,
    ReadError,
    SyncAbortedError,
    WriteError,
)
from .models import FileEntry
from .sources import FileSource, LocalFiles, MemoryFiles, S3Files, open_source
from .sync import (
    FingerprintPolicy,
    SyncAction,
    SyncDecision,
    SyncEngine,
    SyncPair,
    SyncReport,
    sync_one_way,
)

__version__ = "0.2.0"

__all__ = [
    "__version__",
    "sync_one_way",
    "SyncEngine",
    "SyncReport",
    "SyncPair",
    "SyncAction",
    "SyncDecision",
    "FingerprintPolicy",
    "FileEntry",
    "FileSource",
    "LocalFiles",
    "MemoryFiles",
    "S3Files",
    "open_source",
    "FileSyncError",
    "EnumerationError",
    "NotFoundError",
    "ReadError",
    "HashError",
    "InvalidPathError",
    "WriteError",
    "SyncAbortedError",
    "ConfigError",
]
