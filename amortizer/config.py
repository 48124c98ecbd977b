"""Runtime settings for the command-line interface.

Settings come from environment variables so the CLI can be tuned without
extra flags:

``AMORTIZER_LOG_LEVEL``
    Logging level name (``DEBUG``, ``INFO``, ...). Defaults to ``WARNING``.
``AMORTIZER_MAX_ROWS``
    Number of schedule rows printed to the terminal. Defaults to 120.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import InvalidInputError

ENV_LOG_LEVEL = "AMORTIZER_LOG_LEVEL"
ENV_MAX_ROWS = "AMORTIZER_MAX_ROWS"

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_MAX_ROWS = 120


@dataclass(frozen=True)
class Settings:
    log_level: str = DEFAULT_LOG_LEVEL
    max_rows: int = DEFAULT_MAX_ROWS


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``environ`` (``os.environ`` by default)."""
    env = os.environ if environ is None else environ

    log_level = env.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise InvalidInputError(ENV_LOG_LEVEL, log_level, "unknown logging level")

    raw_rows = env.get(ENV_MAX_ROWS, "").strip()
    if not raw_rows:
        max_rows = DEFAULT_MAX_ROWS
    else:
        try:
            max_rows = int(raw_rows)
        except ValueError as exc:
            raise InvalidInputError(ENV_MAX_ROWS, raw_rows, "must be an integer") from exc
        if max_rows < 1:
            raise InvalidInputError(ENV_MAX_ROWS, raw_rows, "must be at least 1")

    return Settings(log_level=log_level, max_rows=max_rows)
