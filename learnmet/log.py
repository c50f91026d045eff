"""Logging helpers for LearnMet."""

import logging
import sys
from typing import Optional

from .config import get_settings

LOGGER_NAMESPACE = "learnmet"


def setup_logging(level: Optional[int | str] = None) -> None:
    """
    Attach a stdout handler to the ``learnmet`` logger once, at application start.

    Without an explicit ``level`` the configured ``LEARNMET_LOG_LEVEL`` applies.
    """
    if level is None:
        level = get_settings().log_level.upper()

    fmt = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))

    logger = logging.getLogger(LOGGER_NAMESPACE)
    if not logger.handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under ``learnmet``."""
    if name == LOGGER_NAMESPACE or name.startswith(f"{LOGGER_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
