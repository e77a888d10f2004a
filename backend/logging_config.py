"""Logging setup shared by the ``rimio`` CLI commands.

Exporter modules log through ``logging.getLogger(__name__)``, so their records
live under the ``backend``, ``core`` and ``rendering`` package loggers. A host
that embeds the exporter configures logging itself and never calls this.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable

LOG_LEVEL_ENV = "RIMIO_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGERS = ("backend", "core", "rendering")
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# Logged per request at INFO; with one POST per second that drowns everything
CHATTY_LOGGERS = ("httpx", "httpcore")


def resolve_level(level: str | None = None) -> int:
    """Numeric level from *level*, then ``RIMIO_LOG_LEVEL``, then INFO.

    Unknown names fall back to INFO rather than failing the CLI.
    """
    raw = level if level is not None else os.getenv(LOG_LEVEL_ENV)
    resolved = logging.getLevelName((raw or "INFO").strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    *,
    level: str | None = None,
    format: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
    include_uvicorn: bool = False,
    quiet: Iterable[str] = CHATTY_LOGGERS,
) -> logging.Logger:
    """Configure root logging and align the exporter's package loggers.

    Args:
        level: Explicit level name; see ``resolve_level`` for the fallbacks.
        format: Log format string.
        datefmt: Date format string.
        include_uvicorn: Align uvicorn's loggers too (``receive`` command).
        quiet: Loggers held at WARNING or above regardless of *level*.

    Returns:
        The ``rimio.backend`` logger.
    """
    numeric = resolve_level(level)
    logging.basicConfig(level=numeric, format=format, datefmt=datefmt)

    names = list(PACKAGE_LOGGERS)
    if include_uvicorn:
        names.extend(UVICORN_LOGGERS)
    for name in names:
        logging.getLogger(name).setLevel(numeric)

    for name in quiet:
        logging.getLogger(name).setLevel(max(logging.WARNING, numeric))

    app_logger = logging.getLogger("rimio.backend")
    app_logger.setLevel(numeric)
    app_logger.debug("Logging configured at %s", logging.getLevelName(numeric))
    return app_logger
