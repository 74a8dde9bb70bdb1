"""
Application-wide logging configuration.

One stdout handler on the root logger; verbosity comes from LOG_LEVEL.
Driver loggers (SQLAlchemy, aiosqlite, asyncpg) stay at WARNING unless the
app itself runs at DEBUG.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "asyncpg")

_HANDLER_NAME = "llm_log_api"


def configure_logging(level: str = "INFO") -> int:
    """
    Configure root logging for the application.

    Only the handler installed by a previous call is replaced, so handlers
    added by the host (test runners, process managers) are left alone.

    Returns:
        The numeric level applied to the root logger.
    """
    log_level = logging.getLevelName((level or "INFO").upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    driver_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(driver_level)

    return log_level
