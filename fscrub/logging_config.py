"""Logging configuration for fscrub.

Configures the "fscrub" logger tree from arguments or environment:
- FSCRUB_DEBUG: Enable debug logging (default: false)
- FSCRUB_LOG_FILE: Also log to this file (default: stderr only)
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

LOGGER_NAME = "fscrub"
LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    debug: bool | None = None,
    log_file: str | None = None,
) -> logging.Logger:
    """Configure logging for fscrub.

    Args:
        debug: Enable debug level. Defaults to FSCRUB_DEBUG env var.
        log_file: Log file path. Defaults to FSCRUB_LOG_FILE env var.
            When set, stderr only shows warnings and above.

    Returns:
        Root logger for fscrub
    """
    if debug is None:
        debug = os.environ.get("FSCRUB_DEBUG", "").lower() in ("true", "1", "yes")
    if log_file is None:
        log_file = os.environ.get("FSCRUB_LOG_FILE") or None

    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.WARNING if log_file else level)
    logger.addHandler(stderr_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
        logger.info("logging_to_file path=%s", log_path)

    return logger


def get_logger(component: str) -> logging.Logger:
    """Get a logger for a specific component (e.g. "cli", "watcher")."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}")
