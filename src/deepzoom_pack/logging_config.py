"""Logging setup for command-line runs."""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "deepzoom_pack"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: str | int) -> int:
    """Translate a level name such as ``"info"`` into a logging constant."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}'.")
    return resolved


def configure_logging(level: str | int = logging.WARNING) -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Calling this repeatedly replaces the previous handler instead of stacking
    duplicates.

    Parameters
    ----------
    level : str | int, default=logging.WARNING
        Level name or constant applied to the package logger and its handler.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    log_level = resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False

    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("pyvips").setLevel(logging.WARNING)
    return logger
