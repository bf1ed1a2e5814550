"""Local-first journal store with synchronized-folder reconciliation.

Provides the ``Entry`` model and JSON codec, the ``EntryStore`` that
persists the collection atomically, the ``SyncReconciler`` that migrates
and watches the synchronized copy, and the ``Journal`` facade that wires
them from configuration.
"""

from .app import Journal
from .locations import StorageLayout, StorageLocation, StorageMode
from .models import (
    MOODS,
    EmptyReason,
    Entry,
    LoadResult,
    LoadStatus,
    Mood,
    TimestampFormat,
    decode_entries,
    encode_entries,
)
from .store import EntryStore
from .sync import ConflictPolicy, SyncReconciler, SyncState
from .watcher import ChangeEvent, ChangeKind, FileWatcher, Subscription

__all__ = [
    "MOODS",
    "ChangeEvent",
    "ChangeKind",
    "ConflictPolicy",
    "EmptyReason",
    "Entry",
    "EntryStore",
    "FileWatcher",
    "Journal",
    "LoadResult",
    "LoadStatus",
    "Mood",
    "StorageLayout",
    "StorageLocation",
    "StorageMode",
    "Subscription",
    "SyncReconciler",
    "SyncState",
    "TimestampFormat",
    "decode_entries",
    "encode_entries",
]
