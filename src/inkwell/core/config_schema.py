"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed, validated ``InkwellConfig``
instance.  Existing dict-based access continues to work unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


def _expand(v: Any) -> Any:
    if isinstance(v, str):
        return Path(v).expanduser() if v else None
    if isinstance(v, Path):
        return v.expanduser()
    return v


class PathsConfig(BaseModel):
    """Directories owned by the application."""

    data_dir: Path
    log_dir: Path | None = None

    @field_validator("data_dir", "log_dir", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        return _expand(v)


class ProfileConfig(BaseModel):
    """Backing file name, migration flag and timestamp encoding for one platform build."""

    file_name: str
    migration_flag: str = ""
    timestamp_format: Literal["iso", "reference"] = "iso"

    @field_validator("file_name")
    @classmethod
    def _plain_file_name(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v:
            raise ValueError(f"file_name must be a bare file name, got {v!r}")
        return v


class JournalConfig(BaseModel):
    """Where the journal lives and how often the synchronized copy is checked."""

    profile: str = "ios"
    documents_dir: Path = Path("~/Documents").expanduser()
    sync_container: Path | None = None
    settings_file: Path | None = None
    watch_interval: float = 2.0

    @field_validator("documents_dir", "sync_container", "settings_file", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        return _expand(v)

    @field_validator("watch_interval")
    @classmethod
    def _positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("watch_interval must be positive")
        return v


class LoggingConfig(BaseModel):
    """loguru sink settings."""

    level: str = "WARNING"
    file: str = ""


class InkwellConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.inkwell").expanduser())
    journal: JournalConfig = JournalConfig()
    profiles: dict[str, ProfileConfig] = {}
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _profile_declared(self) -> InkwellConfig:
        if self.profiles and self.journal.profile not in self.profiles:
            raise ValueError(
                f"journal profile {self.journal.profile!r} not found in profiles: {sorted(self.profiles)}"
            )
        return self
