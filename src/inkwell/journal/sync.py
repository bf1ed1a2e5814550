"""SyncReconciler — keeps the store pointed at, and in step with, the
synchronized copy of the journal.

Lifecycle::

    UNINITIALIZED --start()--> WATCHING    (synchronized container available)
    UNINITIALIZED --start()--> LOCAL_ONLY  (no container)
    WATCHING / LOCAL_ONLY --stop()--> STOPPED

``start()`` creates the synchronized ``Documents`` folder, runs the one-time
local-to-synchronized migration, loads the store and, when synchronized,
subscribes a ``FileWatcher`` to the document. Every gathered or updated
event reloads the store wholesale: whichever device wrote the file last
wins, and nothing is merged.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum

from loguru import logger

from inkwell.core.events import JOURNAL_MIGRATED, Event
from inkwell.core.settings import FlagStore
from inkwell.core.storage import FileSystem, LocalFileSystem, StorageError

from .locations import StorageLayout, StorageLocation
from .store import EntryStore
from .watcher import ChangeEvent, ChangeKind, FileWatcher, Subscription


class SyncState(StrEnum):
    UNINITIALIZED = "uninitialized"
    WATCHING = "watching"
    LOCAL_ONLY = "local_only"
    STOPPED = "stopped"


class ConflictPolicy(StrEnum):
    """How concurrent edits from two devices are reconciled.

    Only whole-document replacement exists today: the last full write that
    the sync provider propagates replaces the reader's view entirely.
    """

    LAST_WRITER_WINS = "last_writer_wins"


WatcherFactory = Callable[..., FileWatcher]


class SyncReconciler:
    """Migrates, watches and reloads one profile's journal document.

    Args:
        store: The store to reload on external changes.
        layout: Resolves local and synchronized paths for the profile.
        flags: Persistent flag store gating the one-time migration.
        migration_flag: Flag key for this profile.
        fs: File-system backend.
        policy: Conflict policy. Only ``LAST_WRITER_WINS`` is supported.
        watcher_factory: Builds the watcher for a path (injectable for tests).
    """

    def __init__(
        self,
        store: EntryStore,
        layout: StorageLayout,
        flags: FlagStore,
        migration_flag: str,
        fs: FileSystem | None = None,
        policy: ConflictPolicy = ConflictPolicy.LAST_WRITER_WINS,
        watcher_factory: WatcherFactory = FileWatcher,
    ) -> None:
        if policy is not ConflictPolicy.LAST_WRITER_WINS:
            raise ValueError(f"Unsupported conflict policy: {policy}")
        self.store = store
        self.layout = layout
        self.policy = policy
        self._flags = flags
        self._migration_flag = migration_flag
        self._fs = fs or LocalFileSystem()
        self._watcher_factory = watcher_factory
        self._watcher: FileWatcher | None = None
        self._subscription: Subscription | None = None
        self._state = SyncState.UNINITIALIZED
        self.reload_count = 0

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def watcher(self) -> FileWatcher | None:
        return self._watcher

    # -- Lifecycle ----------------------------------------------------------

    def start(self) -> SyncState:
        """Prepare folders, migrate once, load, and watch when synchronized."""
        if self._state in (SyncState.WATCHING, SyncState.LOCAL_ONLY):
            return self._state
        self._prepare_sync_folder()
        self.migrate_if_needed()
        self._activate(self.store.location)
        return self._state

    def relocate(self) -> StorageLocation:
        """Re-resolve the backing document (e.g. after sign-in to the sync service).

        If the location changed, the watch is torn down, migration gets
        another chance, the store is pointed at the new document and reloaded.
        """
        location = self.layout.resolve()
        if location == self.store.location and self._state is not SyncState.STOPPED:
            return location
        self._teardown_watch()
        self._prepare_sync_folder()
        self.migrate_if_needed()
        self.store.relocate(location)
        self._activate(location)
        return location

    def stop(self) -> None:
        self._teardown_watch()
        self._state = SyncState.STOPPED

    def __enter__(self) -> SyncReconciler:
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    def _activate(self, location: StorageLocation) -> None:
        self.store.load()
        if not location.synchronized:
            self._state = SyncState.LOCAL_ONLY
            logger.info(f"Journal is local-only at {location.path}")
            return
        self._watcher = self._watcher_factory(location.path, self._fs)
        self._subscription = self._watcher.subscribe(self._on_change)
        self._state = SyncState.WATCHING
        logger.info(f"Watching synchronized journal at {location.path}")

    def _teardown_watch(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None

    def _prepare_sync_folder(self) -> None:
        docs = self.layout.sync_documents_dir()
        if docs is None:
            return
        try:
            self._fs.create_directory(docs)
        except StorageError as e:
            logger.warning(f"Could not create synchronized folder {docs}: {e}")

    # -- Migration ----------------------------------------------------------

    def migrate_if_needed(self) -> bool:
        """Copy a local-only document into the synchronized folder, at most once.

        Returns True when bytes were copied. The flag is recorded whether or
        not anything was copied (or the copy failed), but only once a
        synchronized container has actually been seen.
        """
        if self._flags.get_bool(self._migration_flag):
            return False
        sync_path = self.layout.sync_path()
        if sync_path is None:
            return False

        local_path = self.layout.local_path()
        if not self._fs.exists(local_path):
            self._mark_migrated()
            return False

        copied = False
        try:
            self._fs.create_directory(sync_path.parent)
            if self._fs.exists(sync_path):
                logger.info(f"Synchronized journal already exists at {sync_path}; keeping it")
            else:
                self._fs.copy(local_path, sync_path)
                copied = True
                logger.info(f"Migrated journal {local_path} -> {sync_path}")
        except StorageError as e:
            logger.error(f"Migration of {local_path} to {sync_path} failed: {e}")
        self._mark_migrated()

        if copied:
            self.store.events.emit(
                Event(
                    name=JOURNAL_MIGRATED,
                    payload={"source": str(local_path), "destination": str(sync_path)},
                    source="sync",
                )
            )
        return copied

    def _mark_migrated(self) -> None:
        try:
            self._flags.set_bool(self._migration_flag, True)
        except StorageError as e:
            logger.error(f"Could not record migration flag {self._migration_flag}: {e}")

    # -- Change handling ----------------------------------------------------

    def poll(self) -> ChangeEvent | None:
        """Check the watched document once, on the caller's thread."""
        if self._watcher is None:
            return None
        return self._watcher.poll()

    def start_polling(self, interval: float = 2.0) -> None:
        """Check in a background thread; call ``process_pending()`` to apply."""
        if self._watcher is not None:
            self._watcher.start(interval)

    def process_pending(self) -> list[ChangeEvent]:
        """Apply changes queued by background polling on the caller's thread."""
        if self._watcher is None:
            return []
        return self._watcher.drain()

    def _on_change(self, event: ChangeEvent) -> None:
        if event.kind is ChangeKind.GATHERED and self._watcher is not None:
            watcher = self._watcher
            watcher.disable_updates()
            try:
                self._reload(event)
            finally:
                watcher.enable_updates()
        else:
            self._reload(event)

    def _reload(self, event: ChangeEvent) -> None:
        result = self.store.reload()
        self.reload_count += 1
        logger.info(f"Reloaded journal after {event.kind} ({result.status}, {len(self.store)} entries)")
