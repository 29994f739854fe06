# pyden_site/core/logging.py
from __future__ import annotations
import logging

from .config import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER = "pyden_site"


def setup_logging() -> logging.Logger:
    level = getattr(logging, get_settings().log_level.upper(), logging.INFO)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # Avoid duplicate console handlers on reload
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        ch.setLevel(level)
        logger.addHandler(ch)

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger(ROOT_LOGGER)
    return base.getChild(name) if name else base
