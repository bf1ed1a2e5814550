"""Shared test fixtures for inkwell."""

import os
import tempfile

import pytest

from inkwell.core.config import reset_config


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep INKWELL_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("INKWELL_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config with local and synchronized folders under tmp_dir."""
    import yaml

    config_data = {
        "paths": {"data_dir": os.path.join(tmp_dir, "data")},
        "journal": {
            "profile": "ios",
            "documents_dir": os.path.join(tmp_dir, "Documents"),
            "sync_container": "",
            "settings_file": os.path.join(tmp_dir, "data", "settings.yaml"),
        },
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path
