"""Logging configuration for zpool-influxdb."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from zpool_influxdb.config import Settings, get_settings


def setup_logging(settings: Optional[Settings] = None, log_file: Optional[Path] = None) -> None:
    """Configure logging for the exporter.

    Log records always go to stderr: stdout carries the line protocol stream.
    """
    settings = settings or get_settings()
    log_file = log_file or settings.log_file
    level = getattr(logging, settings.log_level)

    # Handle permission errors gracefully (e.g., in test environments)
    use_file_logging = False
    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            use_file_logging = True
        except PermissionError:
            use_file_logging = False

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler with rotation
    if use_file_logging and log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except (PermissionError, OSError) as e:
            import warnings

            warnings.warn(
                f"Could not set up file logging to {log_file}: {e}. "
                "Continuing with console logging only.",
                UserWarning,
            )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
