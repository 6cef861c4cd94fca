"""
Logging configuration for the package.
"""

import logging
import sys
from typing import Optional

from gitwebhook.core.config import settings


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a stdout handler to the ``gitwebhook`` logger.

    Embedding processes that configure logging themselves do not need this.
    """
    logger = logging.getLogger("gitwebhook")
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

    return logger
