# roomchat/core/logging.py

import logging
import sys

from roomchat.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Third-party loggers that only get WARNING and above
QUIET_LOGGERS = ("redis", "asyncio", "uvicorn.access")


def setup_logging(level: str | None = None) -> None:
    """
    Configure logging for the relay.

    The "roomchat" logger gets its own stdout handler at ``level`` (default:
    settings.LOG_LEVEL), so chat events show up whether or not Uvicorn has
    already configured the root logger.
    """
    level_name = (level or settings.LOG_LEVEL).upper()

    app_logger = logging.getLogger("roomchat")
    app_logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app_logger.addHandler(handler)
        app_logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for a roomchat module, e.g. ``get_logger(__name__)``."""
    return logging.getLogger(name)
