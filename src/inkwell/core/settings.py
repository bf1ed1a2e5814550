"""
User-scoped boolean flags (e.g. "migration done").

The reconciler receives a FlagStore at construction instead of reaching for
process-wide defaults, so tests can inject an in-memory store.

Expected YAML format::

    didMigrateLocalToICloudJournal: true
    didMigrateLocalToICloudJournal_mac: false
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml
from loguru import logger

from inkwell.core.storage import FileSystem, LocalFileSystem, StorageError
from inkwell.core.types import FlagMap, PathLike


@runtime_checkable
class FlagStore(Protocol):
    """Get/set named boolean flags."""

    def get_bool(self, key: str) -> bool:
        """Return the flag value, False when unset."""
        ...

    def set_bool(self, key: str, value: bool) -> None:
        """Persist the flag value."""
        ...


class MemoryFlagStore:
    """Flags held in a dict. Nothing survives the process."""

    def __init__(self, initial: FlagMap | None = None):
        self._flags: FlagMap = dict(initial or {})

    def get_bool(self, key: str) -> bool:
        return bool(self._flags.get(key, False))

    def set_bool(self, key: str, value: bool) -> None:
        self._flags[key] = bool(value)


class YamlFlagStore:
    """Flags stored in a YAML file, rewritten atomically on every change."""

    def __init__(self, path: PathLike, fs: FileSystem | None = None):
        self._path = Path(path).expanduser()
        self._fs = fs or LocalFileSystem()
        self._data: dict | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict:
        if self._data is None:
            if self._fs.exists(self._path):
                try:
                    loaded = yaml.safe_load(self._fs.read_bytes(self._path))
                    self._data = loaded if isinstance(loaded, dict) else {}
                except (StorageError, yaml.YAMLError) as e:
                    logger.warning(f"Could not load settings from {self._path}: {e}")
                    self._data = {}
            else:
                self._data = {}
        return self._data

    def get_bool(self, key: str) -> bool:
        return bool(self._load().get(key, False))

    def set_bool(self, key: str, value: bool) -> None:
        data = self._load()
        data[key] = bool(value)
        payload = yaml.safe_dump(data, default_flow_style=False, sort_keys=True)
        self._fs.atomic_write(self._path, payload.encode("utf-8"))

    def reload(self) -> None:
        """Force reload from disk on next access."""
        self._data = None
