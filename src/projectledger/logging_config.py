"""Logging setup for projectledger."""

__all__ = ["LOG_FORMAT", "configure_logging", "reset_logging"]

import logging
import os
import sys
from typing import Optional, Union

from projectledger.config import LOG_LEVEL_ENV

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ROOT_LOGGER = "projectledger"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Union[str, int, None] = None) -> logging.Logger:
    """Attach a single stream handler to the projectledger logger.

    Safe to call repeatedly; later calls only change the level.

    Args:
        level: Level name or number. If None, reads PROJECTLEDGER_LOG_LEVEL,
            defaulting to WARNING.

    Returns:
        The configured package logger
    """
    global _handler

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level '{level}'")
        level = resolved

    logger = logging.getLogger(ROOT_LOGGER)
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
    elif _handler.stream is not sys.stderr:
        _handler.setStream(sys.stderr)
    logger.setLevel(level)
    return logger


def reset_logging() -> None:
    """Remove the handler installed by configure_logging."""
    global _handler

    logger = logging.getLogger(ROOT_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.setLevel(logging.NOTSET)
