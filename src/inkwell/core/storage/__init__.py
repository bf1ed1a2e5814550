"""
File-system backends for inkwell.

Provides a small synchronous interface with atomic whole-file writes and a
local filesystem implementation.
"""

from .base import (
    FileSignature,
    FileSystem,
    StorageError,
    StorageKeyError,
    StoragePermissionError,
    StorageQuotaError,
)
from .local import LocalFileSystem

__all__ = [
    "FileSignature",
    "FileSystem",
    "LocalFileSystem",
    "StorageError",
    "StorageKeyError",
    "StoragePermissionError",
    "StorageQuotaError",
]
