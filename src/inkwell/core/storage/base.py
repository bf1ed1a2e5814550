"""
Abstract base class for file-system backends.

Provides the small synchronous interface the journal needs: whole-file
reads, atomic whole-file writes, directory creation, existence/size checks,
copies, and a cheap change signature used by the folder watcher.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from inkwell.core.exceptions import InkwellError
from inkwell.core.types import PathLike


@dataclass(frozen=True)
class FileSignature:
    """Snapshot of the attributes that change when a file is rewritten."""

    mtime_ns: int
    size: int


class FileSystem(ABC):
    """Abstract base class for file-system backends."""

    def __init__(self, **config):
        self.config = config

    @abstractmethod
    def read_bytes(self, path: PathLike) -> bytes:
        """Read a whole file. Raises StorageKeyError if it does not exist."""

    @abstractmethod
    def atomic_write(self, path: PathLike, data: bytes) -> None:
        """Replace the file at *path* with *data* so readers never see a partial write."""

    @abstractmethod
    def create_directory(self, path: PathLike) -> None:
        """Create a directory (and parents). No-op if it already exists."""

    @abstractmethod
    def exists(self, path: PathLike) -> bool:
        """Check whether a file exists."""

    @abstractmethod
    def is_dir(self, path: PathLike) -> bool:
        """Check whether a directory exists."""

    @abstractmethod
    def size(self, path: PathLike) -> int:
        """Return the size of a file in bytes. Raises StorageKeyError if absent."""

    @abstractmethod
    def signature(self, path: PathLike) -> FileSignature | None:
        """Return the file's change signature, or None if it does not exist."""

    def copy(self, source: PathLike, dest: PathLike) -> None:
        """Copy a file's bytes to *dest* (atomic on the destination side)."""
        self.atomic_write(dest, self.read_bytes(source))

    @staticmethod
    def _as_path(path: PathLike) -> Path:
        return Path(path).expanduser()


class StorageError(InkwellError):
    """Base exception for storage errors."""


class StorageKeyError(StorageError, KeyError):
    """Raised when a file doesn't exist."""


class StoragePermissionError(StorageError):
    """Raised when a storage operation is not permitted."""


class StorageQuotaError(StorageError):
    """Raised when the disk is full."""
