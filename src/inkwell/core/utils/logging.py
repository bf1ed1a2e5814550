"""
Logging configuration using loguru.

Library code only ever calls ``from loguru import logger``; the CLI (or any
other front-end) decides where messages go by calling ``setup_logging`` or
``setup_logging_from_config`` once at startup.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from inkwell.core.config import Config

_CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Route journal diagnostics to stderr and, optionally, a rotating file.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to log file. If None, only logs to stderr.
        rotation: Log file rotation size.
        retention: How long to keep rotated logs.
    """
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT)

    if log_file:
        logger.add(log_file, level=level, format=_FILE_FORMAT, rotation=rotation, retention=retention)


def setup_logging_from_config(config: Config, verbose: bool = False) -> None:
    """Apply the ``logging`` section of *config*. ``verbose`` forces DEBUG."""
    level = "DEBUG" if verbose else str(config.get("logging.level", "WARNING"))
    log_file = config.get("logging.file", "") or None
    setup_logging(level=level, log_file=log_file)
