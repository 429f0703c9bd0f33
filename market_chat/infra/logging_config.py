"""Logging setup for the market_chat package."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from market_chat.config import get_settings

ROOT_LOGGER_NAME = "market_chat"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class LoggingConfig:
    """Attach a stream handler to the package logger at the configured level."""

    def __init__(self, level: Optional[str] = None) -> None:
        settings = get_settings()
        self.level = (level or settings.log_level or "INFO").upper()
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        logger.setLevel(self.level)
        if not any(getattr(h, "_market_chat", False) for h in logger.handlers):
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            handler._market_chat = True  # type: ignore[attr-defined]
            logger.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or a named child of it."""
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
