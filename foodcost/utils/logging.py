"""
Logging utilities for the Food Cost backend.

Provides standardized logger configuration.

Acceptable logging:
- High-level events (e.g., "Invoice confirmed", "Dashboard computed")
- Non-sensitive metadata (e.g., vendor names, item counts, window selectors)

Never log raw invoice images or full OCR payloads.
"""

import logging
from typing import Optional

from foodcost.config import settings


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to LOG_LEVEL from settings)

    Returns:
        Configured logger instance

    Usage:
        >>> from foodcost.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
