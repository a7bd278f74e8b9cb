"""
Logging configuration
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from tasq.config.settings import settings
from tasq.config.constants import LOG_FORMAT, LOG_DATE_FORMAT


def setup_logger(name: str = "tasq", log_dir: Optional[str] = None) -> logging.Logger:
    """
    Setup and configure logger

    Args:
        name: Logger name
        log_dir: Directory for the log file (optional, console only if omitted)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Remove existing handlers
    logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # File handler
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path / "tasq.log")
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    return logger


# Global logger instance
logger = setup_logger(log_dir=settings.LOG_DIR)
