"""
voxline.logging - Centralized logging configuration.

Provides a simple logging setup with optional verbose mode for debugging.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("voxline")


def configure_logging(verbose: bool = False, server: bool = False) -> None:
    """Configure logging for the voxline package.

    Args:
        verbose: If True, enable DEBUG level logging
        server: If True and not verbose, log at INFO so request handling is visible;
            otherwise WARNING level
    """
    if verbose:
        level = logging.DEBUG
    elif server:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )
    logger.setLevel(level)
