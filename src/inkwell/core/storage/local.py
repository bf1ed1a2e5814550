"""
Local filesystem backend.

Writes go through a temp file in the destination directory followed by
``os.replace`` so a crash mid-write can't leave a truncated document.
"""

import errno
import os
import tempfile

from loguru import logger

from inkwell.core.types import PathLike

from .base import (
    FileSignature,
    FileSystem,
    StorageError,
    StorageKeyError,
    StoragePermissionError,
    StorageQuotaError,
)


class LocalFileSystem(FileSystem):
    """Local filesystem backend."""

    def __init__(self, fsync: bool = True, **config):
        super().__init__(**config)
        self.fsync = fsync

    def read_bytes(self, path: PathLike) -> bytes:
        p = self._as_path(path)
        try:
            return p.read_bytes()
        except FileNotFoundError as e:
            raise StorageKeyError(f"File not found: {p}") from e
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read {p}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read {p}: {e}") from e

    def atomic_write(self, path: PathLike, data: bytes) -> None:
        p = self._as_path(path)
        self.create_directory(p.parent)
        try:
            fd, tmp = tempfile.mkstemp(dir=str(p.parent), prefix=f".{p.name}.", suffix=".tmp")
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot write to {p}: {e}") from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                if self.fsync:
                    f.flush()
                    os.fsync(f.fileno())
            os.replace(tmp, p)  # atomic on POSIX
        except BaseException as e:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            if isinstance(e, PermissionError):
                raise StoragePermissionError(f"Cannot write to {p}: {e}") from e
            if isinstance(e, OSError) and e.errno == errno.ENOSPC:
                raise StorageQuotaError(f"No space left writing {p}") from e
            if isinstance(e, OSError):
                raise StorageError(f"Cannot write to {p}: {e}") from e
            raise
        logger.debug(f"Wrote {len(data)} bytes to {p}")

    def create_directory(self, path: PathLike) -> None:
        p = self._as_path(path)
        try:
            p.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot create directory {p}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot create directory {p}: {e}") from e

    def exists(self, path: PathLike) -> bool:
        return self._as_path(path).is_file()

    def is_dir(self, path: PathLike) -> bool:
        return self._as_path(path).is_dir()

    def size(self, path: PathLike) -> int:
        p = self._as_path(path)
        try:
            return p.stat().st_size
        except FileNotFoundError as e:
            raise StorageKeyError(f"File not found: {p}") from e
        except OSError as e:
            raise StorageError(f"Cannot stat {p}: {e}") from e

    def signature(self, path: PathLike) -> FileSignature | None:
        try:
            stat = self._as_path(path).stat()
        except OSError:
            return None
        return FileSignature(mtime_ns=stat.st_mtime_ns, size=stat.st_size)
