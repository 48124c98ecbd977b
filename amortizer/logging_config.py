"""Logging configuration for the amortizer command-line interface.

The engine itself never logs; only the CLI does. All loggers live under the
``amortizer`` namespace and write to stderr so that tables and exported data
on stdout stay clean.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "amortizer"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Union[int, str] = logging.WARNING, stream: Optional[object] = None) -> logging.Logger:
    """Configure the ``amortizer`` logger and return it.

    Calling this again replaces the handler installed by the previous call
    instead of adding a second one.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_amortizer_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_DATE_FORMAT))
    handler._amortizer_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the ``amortizer`` namespace."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
