"""Shared setup logic for CLI commands."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path

import click

from inkwell.core.exceptions import ConfigurationError

INKWELL_DIR = Path.home() / ".inkwell"
CONFIG_PATH = INKWELL_DIR / "config.yaml"


def load_config(config_file: str | None = None):
    """Load config from *config_file*, or ~/.inkwell/config.yaml when present."""
    from inkwell.core.config import Config

    path = config_file or (str(CONFIG_PATH) if CONFIG_PATH.exists() else None)
    try:
        return Config(config_file=path, data_dir=str(INKWELL_DIR))
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


@contextmanager
def open_journal(ctx: click.Context):
    """Open the journal for the selected profile and close it afterwards."""
    from inkwell.journal import Journal

    try:
        journal = Journal.from_config(ctx.obj["config"], profile=ctx.obj.get("profile"))
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    with journal:
        yield journal


def read_image(path: Path | None) -> bytes | None:
    if path is None:
        return None
    return path.read_bytes()
