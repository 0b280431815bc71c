"""
Logger module - Logging configuration and utilities

This module provides logging configuration with support for:
- Console and rotating file logging
- Configuration from .env / environment variables
- A single package-level logger hierarchy ("task_orchestrator.*")
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from task_orchestrator.config.env_config import EnvConfig

PACKAGE_LOGGER = "task_orchestrator"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Flag to track if the package logger has been configured
_logging_initialized = False


def configure_logging(
    log_level: str = "INFO",
    log_folder: Optional[str] = None,
    enable_console: bool = True,
    enable_file: bool = False,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure the package logger explicitly.

    Replaces any handlers installed by a previous call.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_folder: Folder for log files (default: ./logs)
        enable_console: Log to stdout
        enable_file: Log to a rotating file in log_folder
        max_bytes: Max file size before rotation (default: 10MB)
        backup_count: Number of rotated files to keep

    Returns:
        The configured package logger
    """
    global _logging_initialized
    _logging_initialized = True

    root = logging.getLogger(PACKAGE_LOGGER)
    level = getattr(logging, log_level.upper(), logging.INFO)
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level)
        console.setFormatter(formatter)
        root.addHandler(console)

    if enable_file:
        folder = Path(log_folder or "./logs")
        folder.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            folder / "task_orchestrator.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if not root.handlers:
        root.addHandler(logging.NullHandler())

    return root


def set_log_level(log_level: str) -> logging.Logger:
    """
    Change the level of the package logger and its handlers.

    Handlers, formatters and files are left as configured.
    """
    _ensure_logging_initialized()

    root = logging.getLogger(PACKAGE_LOGGER)
    level = getattr(logging, log_level.upper(), logging.INFO)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)
    return root


def _ensure_logging_initialized() -> None:
    """Configure the package logger from the environment on first use."""
    if _logging_initialized:
        return

    EnvConfig.load_env_file()
    configure_logging(
        log_level=EnvConfig.get("ORCHESTRATOR_LOG_LEVEL", "INFO"),
        log_folder=EnvConfig.get("ORCHESTRATOR_LOG_FOLDER", "./logs"),
        enable_console=EnvConfig.get_bool("ORCHESTRATOR_ENABLE_CONSOLE_LOGGING", True),
        enable_file=EnvConfig.get_bool("ORCHESTRATOR_ENABLE_FILE_LOGGING", False),
        max_bytes=EnvConfig.get_int("ORCHESTRATOR_LOG_MAX_BYTES", 10 * 1024 * 1024),
        backup_count=EnvConfig.get_int("ORCHESTRATOR_LOG_BACKUP_COUNT", 5),
    )


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger inside the package hierarchy with .env configuration.

    Args:
        name: Logger name (typically __name__)
        level: Optional logging level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Logger that propagates to the configured package logger
    """
    _ensure_logging_initialized()

    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"

    logger = logging.getLogger(name)
    if level:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger
