"""Logging configuration for the bridge."""

import logging
import sys
from typing import TextIO

LOGGER_NAME = "responses-bridge"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _coerce_level(level: str | int) -> int:
    """Turn ``"debug"``/``"INFO"``/``10`` into a level number; unknown → INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """(Re)configure the bridge logger with a single console handler.

    Safe to call repeatedly, e.g. once at import and again after the config
    file's ``logging.level`` is known.
    """
    resolved = _coerce_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    # Records still reach the root logger (pytest caplog, host applications)
    logger.propagate = True

    return logger


# Global logger instance
logger = setup_logging()
