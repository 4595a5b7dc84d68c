"""
Logging configuration.
"""

import sys
from typing import Optional

from loguru import logger


LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} [{level}] {name}: {message}"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Replace loguru's default sink with a stderr sink at the given level,
    plus a rotating file sink when log_file is set.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    if log_file:
        logger.add(log_file, level=level, format=LOG_FORMAT,
                   rotation="10 MB", retention=5, encoding="utf-8")
