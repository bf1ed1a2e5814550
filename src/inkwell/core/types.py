"""Shared type aliases used across inkwell."""

from pathlib import Path

PathLike = str | Path

# profile name -> {"file_name": ..., "migration_flag": ...}
ProfileSpec = dict[str, str]

# Persisted boolean settings, e.g. one-time migration flags
FlagMap = dict[str, bool]
