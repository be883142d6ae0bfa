"""Logging configuration for the paycheck planner.

Sets up logging to both file (with date-based naming) and console.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from . import config

LOGGER_NAME = "paycheck_planner"


def setup_logging(level: Optional[str] = None, log_dir: Optional[Path] = None) -> logging.Logger:
    """Set up application logging with file and console handlers.

    Streamlit re-executes the app script on every interaction, so existing
    handlers are cleared first to avoid duplicated lines.

    Args:
        level: Log level name. Defaults to ``config.LOG_LEVEL``.
        log_dir: Directory for the dated log file. Defaults to ``config.LOG_DIR``.

    Returns:
        Configured logger instance.
    """
    level = (level or config.LOG_LEVEL).upper()
    log_dir = log_dir or config.LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_formatter = logging.Formatter("%(levelname)s - %(message)s")

    log_file_path = log_dir / f"planner-{date.today().isoformat()}.log"
    file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(detailed_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger(LOGGER_NAME)
