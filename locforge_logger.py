# -*- coding: utf-8 -*-
"""
LocForge Central Logging Module

Provides the standard logging configuration for the whole toolkit.
Log files are kept under ~/.locforge/logs/.

Handlers are only configured on the root 'locforge' logger.
Child loggers propagate to root and do not add handlers themselves.
"""

import logging
from pathlib import Path
from datetime import datetime

# Log directory
LOG_DIR = Path.home() / ".locforge" / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Daily log file
LOG_FILE = LOG_DIR / f"locforge_{datetime.now().strftime('%Y%m%d')}.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_root_configured = False


def _configure_root_logger():
    """Configure the root 'locforge' logger with handlers (once only)."""
    global _root_configured
    if _root_configured:
        return

    root_logger = logging.getLogger("locforge")
    root_logger.setLevel(logging.DEBUG)

    # Prevent propagation to Python's root logger to avoid duplicates
    root_logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    file_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    _root_configured = True


def set_console_level(level: int) -> None:
    """Change the console handler level (used by the CLI --verbose flag)."""
    _configure_root_logger()
    for handler in logging.getLogger("locforge").handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)


# Main application logger - configure root on module load
_configure_root_logger()
logger = logging.getLogger("locforge")


def get_logger(name: str) -> logging.Logger:
    """
    Return a child logger for a module.

    Child loggers do NOT add handlers - they propagate to the root 'locforge' logger.
    This prevents duplicate log lines.

    Args:
        name: Module name

    Returns:
        Logger named locforge.{name}
    """
    _configure_root_logger()
    return logging.getLogger(f"locforge.{name}")
