"""
Logging configuration helpers.
It centralizes process-wide logging so every layer of the service writes the same line format.
Modules obtain their loggers with `logging.getLogger(__name__)` and never configure handlers themselves.
"""

from __future__ import annotations

import logging

from customer_service.common.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# SQLAlchemy echoes every statement at INFO; only let it through when debugging.
_NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")

_LOGGING_CONFIGURED = False


def configure_logging(level: int | None = None) -> None:
    """Configure process-wide logging once, from settings unless a level is given."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    root_level = level if level is not None else get_settings().log_level_number
    logging.basicConfig(level=root_level, format=LOG_FORMAT)
    noisy_level = root_level if root_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
    _LOGGING_CONFIGURED = True
