"""Logging configuration"""

import logging
from typing import Optional

from gtfs_od.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger from settings.LOG_LEVEL (or an explicit level)."""
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
    logging.getLogger(__name__).debug(f"Logging configured at {level_name}")
