"""Where the backing document lives.

A synchronized container (e.g. an iCloud Drive app folder) is "available"
when its root directory exists. Its ``Documents`` subfolder then holds the
document; otherwise the document sits in the local documents directory.
Both locations use the same file name, which is chosen per profile.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from inkwell.core.storage import FileSystem, LocalFileSystem

SYNC_DOCUMENTS_DIR = "Documents"


class StorageMode(StrEnum):
    SYNCHRONIZED = "synchronized"
    LOCAL_ONLY = "local_only"


@dataclass(frozen=True)
class StorageLocation:
    """A resolved backing-document path and the mode it was resolved in."""

    path: Path
    mode: StorageMode = StorageMode.LOCAL_ONLY

    @property
    def synchronized(self) -> bool:
        return self.mode is StorageMode.SYNCHRONIZED


class StorageLayout:
    """Resolves the backing document for one profile.

    Args:
        file_name: Profile-specific document name, e.g. ``journal_entries.json``.
        local_dir: Local-only documents directory.
        sync_container: Root of the synchronized container, or None when
            synchronization isn't configured.
        fs: File-system backend used for availability checks.
    """

    def __init__(
        self,
        file_name: str,
        local_dir: str | Path,
        sync_container: str | Path | None = None,
        fs: FileSystem | None = None,
    ):
        self.file_name = file_name
        self.local_dir = Path(local_dir).expanduser()
        self.sync_container = Path(sync_container).expanduser() if sync_container else None
        self._fs = fs or LocalFileSystem()

    def sync_available(self) -> bool:
        return self.sync_container is not None and self._fs.is_dir(self.sync_container)

    def sync_documents_dir(self) -> Path | None:
        if not self.sync_available():
            return None
        return self.sync_container / SYNC_DOCUMENTS_DIR

    def local_path(self) -> Path:
        return self.local_dir / self.file_name

    def sync_path(self) -> Path | None:
        docs = self.sync_documents_dir()
        return docs / self.file_name if docs is not None else None

    def resolve(self) -> StorageLocation:
        """Pick the synchronized path when the container is reachable, else local."""
        sync_path = self.sync_path()
        if sync_path is not None:
            return StorageLocation(sync_path, StorageMode.SYNCHRONIZED)
        return StorageLocation(self.local_path(), StorageMode.LOCAL_ONLY)
