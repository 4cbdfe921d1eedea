"""Logging for the ``statement_ledger`` package.

Library modules fetch loggers through :func:`get_logger` and never attach
handlers; the package logger stays silent behind a ``NullHandler`` until an
entrypoint calls :func:`configure_logging`.

The CLI writes JSON to stdout, so the one ``StreamHandler`` goes to stderr and
the package logger does not propagate to the root logger. The level comes
from the ``--log-level`` option, else ``STATEMENT_LEDGER_LOG_LEVEL``, else
``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "statement_ledger"
LOG_LEVEL_ENV = "STATEMENT_LEDGER_LOG_LEVEL"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Numeric level for ``level``; unknown names fall back to ``INFO``."""

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
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
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach the stderr handler on first call; every call re-applies the level.

    Parameters
    ----------
    level:
        ``int`` or level name such as ``"DEBUG"``. ``None`` reads
        ``STATEMENT_LEDGER_LOG_LEVEL`` and falls back to ``INFO``.
    stream:
        Handler output on first call (``sys.stderr`` when omitted).
    """

    global _handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None:
        for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
            logger.removeHandler(h)
        _handler = logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False

    resolved = resolve_level(level)
    _handler.setLevel(resolved)
    logger.setLevel(resolved)
    return logger


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["PACKAGE_LOGGER", "LOG_LEVEL_ENV", "resolve_level", "configure_logging", "get_logger"]
