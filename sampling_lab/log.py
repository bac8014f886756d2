"""
Logging helpers for the sampling lab.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .config import get_config

_FORMAT = "[%(levelname)s] %(name)s %(asctime)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    # explicit argument > SAMPLING_LAB_LOG_LEVEL > runtime config
    log_level = level or os.environ.get("SAMPLING_LAB_LOG_LEVEL", get_config().log_level)
    logging.basicConfig(level=log_level.upper(), format=_FORMAT)
    logging.getLogger("sampling_lab").setLevel(log_level.upper())


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        configure_logging()
    return logger
