"""
Hierarchical configuration management.

Loads configuration from multiple sources with this precedence (highest wins):
    1. Environment variables (PREFIX_SECTION__KEY)
    2. Config file (YAML or JSON)
    3. Built-in defaults

Usage:
    config = Config(config_file="~/.inkwell/config.yaml")

    config.get("journal.profile")          # dot-notation access
    config.profile()                       # {"file_name": ..., "migration_flag": ...}
    config.validated().journal.sync_container
"""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any

import yaml

from inkwell.core.exceptions import ConfigurationError
from inkwell.core.types import ProfileSpec

if TYPE_CHECKING:
    from inkwell.core.config_schema import InkwellConfig

_DEFAULT_ENV_PREFIX = "INKWELL_"
_DEFAULT_DATA_DIR_NAME = ".inkwell"

# One file name and one migration flag per platform build, so the builds
# never share a synchronized document.
DEFAULT_PROFILES: dict[str, ProfileSpec] = {
    "ios": {
        "file_name": "journal_entries.json",
        "migration_flag": "didMigrateLocalToICloudJournal",
    },
    "mac": {
        "file_name": "journal_entries_mac.json",
        "migration_flag": "didMigrateLocalToICloudJournal_mac",
    },
}


class Config:
    """
    Central configuration manager.

    Loads and merges configuration from defaults, a config file, and
    environment variables. Env vars use double-underscore to denote nesting:
    INKWELL_JOURNAL__PROFILE=mac -> config["journal"]["profile"] = "mac"
    """

    def __init__(
        self,
        config_file: str | None = None,
        env_prefix: str = _DEFAULT_ENV_PREFIX,
        data_dir: str | None = None,
        defaults: dict[str, Any] | None = None,
    ):
        """
        Args:
            config_file: Path to YAML or JSON configuration file.
            env_prefix: Prefix for environment variable overrides.
            data_dir: Base directory for app data. Defaults to ~/.inkwell.
            defaults: Additional default values to merge (consumer-specific).
        """
        self.config_file = os.path.expanduser(config_file) if config_file else None
        self.env_prefix = env_prefix or ""
        self._data_dir = data_dir or os.path.join("~", _DEFAULT_DATA_DIR_NAME)
        self._extra_defaults = defaults or {}
        self.config_data: dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from all sources."""
        self.config_data = self._get_default_config()

        if self._extra_defaults:
            self._update_dict(self.config_data, self._extra_defaults)

        if self.config_file and os.path.exists(self.config_file):
            file_config = self._load_file(self.config_file)
            self._update_dict(self.config_data, file_config)

        # Env vars override everything
        self._load_from_env()

    def _get_default_config(self) -> dict[str, Any]:
        data_dir = os.path.expanduser(self._data_dir)
        return {
            "paths": {
                "data_dir": data_dir,
                "log_dir": os.path.join(data_dir, "logs"),
            },
            "journal": {
                "profile": "ios",
                "documents_dir": os.path.join("~", "Documents"),
                "sync_container": "",
                "settings_file": "",
                "watch_interval": 2.0,
            },
            "profiles": json.loads(json.dumps(DEFAULT_PROFILES)),
            "logging": {
                "level": "WARNING",
                "file": "",
            },
        }

    @staticmethod
    def _load_file(path: str) -> dict[str, Any]:
        """Load a YAML or JSON config file."""
        ext = os.path.splitext(path)[1].lower()
        try:
            with open(path) as f:
                if ext in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or {}
                elif ext == ".json":
                    data = json.load(f)
                else:
                    return {}
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data

    def _update_dict(self, target: dict, source: dict) -> None:
        """Recursively merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _load_from_env(self) -> None:
        """Override config values from environment variables."""
        if not self.env_prefix:
            return
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(self.env_prefix):
                continue
            config_key = env_key[len(self.env_prefix) :].lower()
            key_parts = config_key.split("__")

            current = self.config_data
            for part in key_parts[:-1]:
                if part not in current or not isinstance(current[part], dict):
                    current[part] = {}
                current = current[part]
            current[key_parts[-1]] = env_value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a config value by dot-notation path.

        Args:
            key_path: e.g. "journal.profile", "profiles.mac.file_name"
            default: Returned when key is not found.
        """
        parts = key_path.split(".")
        current = self.config_data
        for part in parts:
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key_path: str, value: Any) -> None:
        """Set a config value by dot-notation path, creating intermediate dicts."""
        parts = key_path.split(".")
        current = self.config_data
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def get_data_dir(self) -> str:
        """Return the resolved data directory path."""
        return os.path.expanduser(self.get("paths.data_dir", self._data_dir))

    def profile(self, name: str | None = None) -> ProfileSpec:
        """Return the file name, migration flag and timestamp format for a profile.

        Raises:
            ConfigurationError: if the profile isn't declared.
        """
        name = name or self.get("journal.profile", "ios")
        profile = self.get(f"profiles.{name}")
        if not isinstance(profile, dict) or not profile.get("file_name"):
            known = sorted(self.get("profiles", {}) or {})
            raise ConfigurationError(f"Unknown journal profile {name!r}. Known profiles: {', '.join(known)}")
        return {
            "file_name": str(profile["file_name"]),
            "migration_flag": str(profile.get("migration_flag") or f"didMigrateLocalToSync_{name}"),
            "timestamp_format": str(profile.get("timestamp_format") or "iso"),
        }

    def validated(self) -> InkwellConfig:
        """Return a typed, validated view of the merged configuration."""
        from pydantic import ValidationError

        from inkwell.core.config_schema import InkwellConfig

        try:
            return InkwellConfig.model_validate(self.config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def ensure_directories(self) -> None:
        """Create all configured directories if they don't exist."""
        for path_value in self.config_data.get("paths", {}).values():
            if isinstance(path_value, str):
                expanded = os.path.expanduser(path_value)
                os.makedirs(expanded, exist_ok=True)


# Module-level singleton
_config_instance: Config | None = None


def get_config(
    config_file: str | None = None,
    env_prefix: str = _DEFAULT_ENV_PREFIX,
    data_dir: str | None = None,
) -> Config:
    """Get or create the global Config singleton."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_file=config_file, env_prefix=env_prefix, data_dir=data_dir)
    return _config_instance


def reset_config() -> None:
    """Reset the global Config singleton (useful for testing)."""
    global _config_instance
    _config_instance = None
