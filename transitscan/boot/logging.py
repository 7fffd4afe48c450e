"""Logging setup for the ``transitscan`` command line.

The CLI prints its results as JSON on stdout, so every log record is routed
to a single stderr handler on the root logger.  Levels come from the
``--log-level`` option or the ``LOG_LEVEL`` environment variable and accept
standard names, numbers, or the CLI aliases in :data:`LEVEL_ALIASES`.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Final, TextIO

__all__ = ["LEVEL_ALIASES", "configure_logging", "resolve_level"]

LOG_LEVEL_ENV: Final = "LOG_LEVEL"

LEVEL_ALIASES: Final[dict[str, int]] = {
    "quiet": logging.ERROR,
    "silent": logging.CRITICAL,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"
_HANDLER_NAME = "transitscan.stderr"


def resolve_level(value: str | int | None, default: int = logging.WARNING) -> int:
    """Map ``value`` to a numeric level; unknown or empty input gives ``default``."""

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    candidate = value.strip().lower()
    if not candidate:
        return default
    if candidate.isdigit():
        return int(candidate)
    if candidate in LEVEL_ALIASES:
        return LEVEL_ALIASES[candidate]
    resolved = logging.getLevelName(candidate.upper())
    return resolved if isinstance(resolved, int) else default


def configure_logging(
    *,
    level: str | int | None = None,
    default: int = logging.WARNING,
    stream: TextIO | None = None,
) -> int:
    """Install the stderr handler on the root logger and return its level.

    ``level`` wins over ``LOG_LEVEL``.  Calling again replaces the handler
    installed by a previous call and leaves foreign handlers alone.
    """

    raw = level if level is not None else os.environ.get(LOG_LEVEL_ENV)
    effective = resolve_level(raw, default)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(effective)
    return effective
