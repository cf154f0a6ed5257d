"""Unified logging configuration for the Planet backend.

Provides consistent logging with both console and file output.
Log files are written under the workspace logs directory with rotation support.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from planet.settings import settings

# Default log format
LOG_FORMAT = "[%(asctime)s.%(msecs)03d][%(levelname)s][%(filename)s:%(lineno)d]: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "planet"


def _ensure_root_logger_configured():
    """
    Ensure the planet parent logger is configured with console handler.
    This is called automatically on module import.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)

    has_formatted_handler = any(
        isinstance(h, logging.StreamHandler)
        and h.formatter
        and "%(asctime)s" in (h.formatter._fmt if hasattr(h.formatter, "_fmt") else "")
        for h in root_logger.handlers
    )

    if not has_formatted_handler:
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root_logger.addHandler(console_handler)

        if settings.debug:
            root_logger.setLevel(logging.DEBUG)
        else:
            root_logger.setLevel(logging.INFO)

        # Propagate so pytest's caplog sees records; the root logger has no handlers by default
        root_logger.propagate = True


def setup_logging(log_name: str = "planet") -> logging.Logger:
    """
    Setup logging configuration with console and file output.

    Log file path pattern: {workspace}/logs/{log_name}.log
    File output is skipped under the test environment.

    Args:
        log_name: The name of the log file (without .log extension).
                 Default: "planet"

    Returns:
        Configured logger instance
    """
    _ensure_root_logger_configured()

    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{log_name}")
    if settings.is_test():
        return logger

    log_dir = _get_logs_root()
    if log_dir:
        log_file_path = os.path.join(log_dir, f"{log_name}.log")

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        if not any(isinstance(h, RotatingFileHandler) and h.baseFilename == log_file_path for h in root_logger.handlers):
            file_handler = RotatingFileHandler(
                log_file_path,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
            root_logger.addHandler(file_handler)
            root_logger.info(f"Log file handler added: {log_file_path}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Logger instance
    """
    _ensure_root_logger_configured()

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def _get_logs_root() -> Path | None:
    """
    Get the logs root directory, creating it if needed.

    Returns None if the directory cannot be created.
    """
    logs_root = settings.get_logs_root()
    try:
        logs_root.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None
    return logs_root


# Configure planet parent logger on module import
_ensure_root_logger_configured()
