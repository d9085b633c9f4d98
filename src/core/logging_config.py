"""Logging setup for the application."""

import logging
from typing import Optional

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the process.

    Args:
        level: Optional level name overriding LOG_LEVEL.
    """
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
    # SQL echo is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
