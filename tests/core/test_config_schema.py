"""Tests for inkwell.core.config_schema and Config.validated()."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from inkwell.core.config import Config
from inkwell.core.config_schema import InkwellConfig
from inkwell.core.exceptions import ConfigurationError


@pytest.mark.smoke
class TestConfigSchema:
    def test_valid_config_roundtrip(self):
        data = {
            "paths": {"data_dir": "/tmp/test-data"},
            "journal": {
                "profile": "mac",
                "documents_dir": "/tmp/docs",
                "sync_container": "/tmp/cloud",
                "watch_interval": "0.5",
            },
            "profiles": {"mac": {"file_name": "journal_entries_mac.json"}},
            "logging": {"level": "INFO"},
        }
        cfg = InkwellConfig.model_validate(data)
        assert cfg.paths.data_dir == Path("/tmp/test-data")
        assert cfg.journal.sync_container == Path("/tmp/cloud")
        assert cfg.journal.watch_interval == 0.5
        assert cfg.profiles["mac"].file_name == "journal_entries_mac.json"
        assert cfg.logging.level == "INFO"

    def test_defaults_populate(self):
        cfg = InkwellConfig()
        assert cfg.journal.profile == "ios"
        assert cfg.journal.sync_container is None
        assert cfg.paths.data_dir.is_absolute()

    def test_empty_sync_container_means_none(self):
        cfg = InkwellConfig.model_validate({"journal": {"sync_container": ""}})
        assert cfg.journal.sync_container is None

    def test_path_expansion(self):
        cfg = InkwellConfig.model_validate({"journal": {"documents_dir": "~/Documents"}})
        assert "~" not in str(cfg.journal.documents_dir)

    def test_non_positive_interval_rejected(self):
        with pytest.raises(ValidationError, match="watch_interval"):
            InkwellConfig.model_validate({"journal": {"watch_interval": 0}})

    def test_file_name_must_be_bare(self):
        with pytest.raises(ValidationError, match="bare file name"):
            InkwellConfig.model_validate({"profiles": {"ios": {"file_name": "sub/dir.json"}}})

    def test_timestamp_format_choices(self):
        cfg = InkwellConfig.model_validate(
            {"profiles": {"ios": {"file_name": "a.json", "timestamp_format": "reference"}}}
        )
        assert cfg.profiles["ios"].timestamp_format == "reference"
        default = InkwellConfig.model_validate({"profiles": {"ios": {"file_name": "a.json"}}})
        assert default.profiles["ios"].timestamp_format == "iso"
        with pytest.raises(ValidationError, match="timestamp_format"):
            InkwellConfig.model_validate({"profiles": {"ios": {"file_name": "a.json", "timestamp_format": "epoch"}}})

    def test_profile_cross_validation_fails(self):
        with pytest.raises(ValidationError, match="journal profile"):
            InkwellConfig.model_validate(
                {"journal": {"profile": "watch"}, "profiles": {"ios": {"file_name": "a.json"}}}
            )

    def test_extra_keys_allowed_at_root(self):
        cfg = InkwellConfig.model_validate({"custom_section": {"key": "value"}})
        assert cfg.model_extra["custom_section"] == {"key": "value"}

    def test_config_validated_integration(self, tmp_config_file, tmp_dir):
        config = Config(config_file=tmp_config_file, data_dir=tmp_dir)
        validated = config.validated()
        assert isinstance(validated, InkwellConfig)
        assert validated.journal.documents_dir == Path(tmp_dir) / "Documents"
        assert validated.journal.settings_file == Path(os.path.join(tmp_dir, "data", "settings.yaml"))

    def test_validated_wraps_errors(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.set("journal.profile", "watch")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            config.validated()
