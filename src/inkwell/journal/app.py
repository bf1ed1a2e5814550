"""Journal — wires configuration, storage, flags, store and reconciler together.

Usage::

    from inkwell.core.config import Config
    from inkwell.journal import Journal

    with Journal.from_config(Config(config_file="~/.inkwell/config.yaml")) as journal:
        entry_id = journal.store.create("First entry", "Hello", "Happy")
        print(journal.store.diagnostics())
"""

from __future__ import annotations

from pathlib import Path

from inkwell.core.config import Config
from inkwell.core.events import EventBus
from inkwell.core.settings import FlagStore, YamlFlagStore
from inkwell.core.storage import FileSystem, LocalFileSystem

from .locations import StorageLayout
from .models import TimestampFormat
from .store import EntryStore
from .sync import SyncReconciler


class Journal:
    """A store plus the reconciler that keeps it in step with the synchronized copy."""

    def __init__(self, store: EntryStore, reconciler: SyncReconciler, events: EventBus):
        self.store = store
        self.reconciler = reconciler
        self.events = events

    @classmethod
    def from_config(
        cls,
        config: Config,
        profile: str | None = None,
        fs: FileSystem | None = None,
        flags: FlagStore | None = None,
    ) -> Journal:
        """Build a journal for *profile* (defaults to ``journal.profile``).

        The backing location is resolved here, once; use
        ``reconciler.relocate()`` to re-resolve it later.

        Raises:
            ConfigurationError: on an unknown profile or invalid settings.
        """
        settings = config.validated()
        selected = config.profile(profile)
        fs = fs or LocalFileSystem()
        events = EventBus()

        layout = StorageLayout(
            file_name=selected["file_name"],
            local_dir=settings.journal.documents_dir,
            sync_container=settings.journal.sync_container,
            fs=fs,
        )
        if flags is None:
            settings_file = settings.journal.settings_file or Path(config.get_data_dir()) / "settings.yaml"
            flags = YamlFlagStore(settings_file, fs=fs)

        store = EntryStore(
            layout.resolve(),
            fs=fs,
            events=events,
            timestamp_format=TimestampFormat(selected["timestamp_format"]),
        )
        reconciler = SyncReconciler(
            store,
            layout,
            flags,
            migration_flag=selected["migration_flag"],
            fs=fs,
        )
        return cls(store, reconciler, events)

    def open(self) -> Journal:
        """Migrate if needed, load, and start watching when synchronized."""
        self.reconciler.start()
        return self

    def close(self) -> None:
        self.reconciler.stop()

    def __enter__(self) -> Journal:
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()
