"""Sync engine for filesync - diff and one-way reconciliation."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .config import SyncConfigError, load_sync_pairs_from_json
from .engine import SyncEngine, SyncReport, SyncRunState, sync_one_way
from .executor import ActionState, SyncExecutor, SyncProgressInfo
from .fingerprint import FingerprintPolicy, HashCache
from .operations import SyncOperations
from .pair import SyncPair

__all__ = [
    "SyncEngine",
    "SyncReport",
    "SyncRunState",
    "sync_one_way",
    "SyncPair",
    "SyncOperations",
    "SyncExecutor",
    "SyncProgressInfo",
    "ActionState",
    "SyncConfigError",
    "load_sync_pairs_from_json",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "FingerprintPolicy",
    "HashCache",
]
