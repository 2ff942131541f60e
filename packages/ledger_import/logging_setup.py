"""Centralized logging configuration for the ``ledger_import`` package.

Importing a ledger is a one-shot batch job, so the package logs progress
summaries (accounts parsed, postings merged) at INFO and per-block detail at
DEBUG. Failures are raised as :class:`~ledger_import.errors.LedgerImportError`
and never only logged.

- ``configure_logging(...)``: attach one ``StreamHandler`` to the package root
  logger (``"ledger_import"``). Called by the CLI root callback; repeated calls
  are no-ops until ``reset_logging()``.
- ``get_logger(name)``: what library modules call with ``__name__``. Until an
  entrypoint configures logging, the package root carries a ``NullHandler`` so
  library use stays silent.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "ledger_import"
LOG_LEVEL_ENV_VAR = "LEDGER_IMPORT_LOG_LEVEL"
DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def parse_level(level: int | str | None) -> int:
    """Resolve a level given as a number, a numeric string or a level name.

    ``None`` falls back to ``LEDGER_IMPORT_LOG_LEVEL`` and then to INFO.

    Raises
    ------
    ValueError
        For a name that is not a standard logging level.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelNamesMapping().get(name)
    if resolved is None:
        raise ValueError(f"unknown log level: {level!r}")
    return resolved


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Install the package handler once and return it.

    Parameters
    ----------
    level:
        Level for both the package logger and its handler; see
        :func:`parse_level`.
    fmt:
        Format string, defaulting to :data:`DEFAULT_FORMAT`.
    stream:
        Destination, defaulting to ``sys.stderr`` at call time so stdout stays
        free for ``show --json``.
    """

    global _handler
    if _handler is not None:
        return _handler

    resolved = parse_level(level)
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    for h in [h for h in pkg_logger.handlers if isinstance(h, logging.NullHandler)]:
        pkg_logger.removeHandler(h)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolved)
    # Records stop at the package root; the host's root logger never sees them twice.
    pkg_logger.propagate = False

    _handler = handler
    return handler


def reset_logging() -> None:
    """Undo :func:`configure_logging` (used between CLI invocations in tests)."""

    global _handler
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        pkg_logger.removeHandler(_handler)
        _handler = None
    pkg_logger.setLevel(logging.NOTSET)
    pkg_logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "DEFAULT_FORMAT",
    "LOG_LEVEL_ENV_VAR",
    "PACKAGE_LOGGER",
    "configure_logging",
    "get_logger",
    "parse_level",
    "reset_logging",
]
