"""Central logging configuration for the ``wallet`` package.

``configure_logging`` is called once by the Streamlit entrypoint.  Library
modules only call ``get_logger("wallet.<module>")`` and never attach handlers
of their own.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

from wallet.config import LOG_LEVEL

_PKG_LOGGER_NAME = "wallet"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = LOG_LEVEL
    level = str(level).strip().upper()
    if level.isdigit():
        return int(level)
    numeric = getattr(logging, level, None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Attach a single ``StreamHandler`` to the package logger, once.

    ``level`` defaults to ``WALLET_SAVER_LOG_LEVEL`` (or INFO).
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s"))
    logger.setLevel(_parse_level(level))
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger, silencing the package root until it is configured."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
