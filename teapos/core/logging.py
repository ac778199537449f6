"""Logging configuration."""
import logging
import sys
from typing import Optional

from teapos.core.config import settings

# Chatty libraries that only matter when something is broken
QUIET_LOGGERS = ("httpx", "sqlalchemy.engine", "aiosqlite", "asyncpg")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging.

    ``level`` defaults to ``settings.log_level``; service modules log with
    bracketed prefixes such as ``[CART]`` or ``[CHECKOUT]`` so one store's
    log can be grepped per concern.
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
