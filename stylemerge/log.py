"""Loguru sink configuration for the command line."""

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def configure_logging(verbose: bool = False) -> None:
    """Route engine logs to stderr; debug output only when *verbose*."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format=LOG_FORMAT,
    )
