"""Logging for ``ims_interchange``: library modules log, entrypoints configure.

Every module obtains its logger through :func:`get_logger` using a dotted name
under ``"ims_interchange"`` (``ims_interchange.ingest``,
``ims_interchange.export.general_ledger`` and so on). Until an entrypoint
calls :func:`configure_logging`, the package logger carries only a
``NullHandler``, so importing the library never prints anything.

What gets logged:

- WARNING: source rows excluded by a classifier (with row number and
  reason), references whose account body cannot be check-digited, amounts
  replaced by the all-nines sentinel in a fixed-width field.
- INFO: per-batch and per-export row counts, files written.
- DEBUG: rows skipped because the source flagged them.

The level comes from the ``level`` argument, else ``IMS_INTERCHANGE_LOG_LEVEL``,
else ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "ims_interchange"
_LEVEL_ENV_VAR = "IMS_INTERCHANGE_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or the environment) into a numeric logging level.

    Unrecognised names fall back to ``INFO`` rather than failing the run.
    """

    if level is None or (isinstance(level, str) and not level.strip()):
        level = os.getenv(_LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Send package logs to ``stream`` (``sys.stderr`` by default).

    Idempotent: a second call only adjusts the level, so the CLI callback and
    a host application can both call it without duplicating output.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    resolved = resolve_level(level)

    if _handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        _handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
        logger.addHandler(_handler)
        # Records are emitted once, here, not again by the root logger.
        logger.propagate = False

    _handler.setLevel(resolved)
    logger.setLevel(resolved)


def reset_logging() -> None:
    """Undo :func:`configure_logging` (used between CLI invocations in tests)."""

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger ``name``, keeping the package silent until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "reset_logging", "resolve_level", "get_logger"]
