"""
Litterbugs - Logging Configuration
Entry points (the map script, a host app) call setup_logging() once;
library modules only ever use logging.getLogger(__name__).
"""

import logging
import sys
from typing import Optional
from functools import lru_cache

from litterbugs.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

# Request-level chatter from the gateways' HTTP and SQL layers
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Send Litterbugs logs to stdout.

    Args:
        level: Log level name; defaults to LOG_LEVEL from settings
        format_string: Overrides LOG_FORMAT

    Returns:
        The "litterbugs" package logger
    """
    log_level = getattr(logging, (level or settings.log_level).upper())

    logging.basicConfig(
        level=log_level,
        format=format_string or LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logger = logging.getLogger("litterbugs")
    logger.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


@lru_cache()
def get_logger(name: str = "litterbugs") -> logging.Logger:
    """Logger for a Litterbugs component (cached per name)."""
    return logging.getLogger(name)
