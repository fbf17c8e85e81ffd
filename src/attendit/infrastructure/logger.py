"""
Logger Module

Provides a centralized logging system that outputs to both console and file.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

# Application log file path (relative to project root)
_LOG_FILE_NAME = "attendit.log"

_log_file_override: Optional[Path] = None


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent.parent


def configure_log_file(log_file: Optional[str]) -> None:
    """
    Set the default log file for loggers created after this call.

    Args:
        log_file: Path to the log file, or None/"" to restore the default
    """
    global _log_file_override
    _log_file_override = Path(log_file) if log_file else None


def get_logger(name: str, log_file: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger with console and file handlers.

    Args:
        name: Logger name (typically component name like "ReportService")
        log_file: Optional custom log file path. If None, uses the configured
            or default attendit.log

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(f"attendit.{name}")

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler - INFO level and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler - DEBUG level and above
    if log_file:
        log_path = Path(log_file)
    else:
        log_path = _log_file_override or _get_project_root() / _LOG_FILE_NAME
    try:
        file_handler = logging.FileHandler(
            log_path,
            mode="a",
            encoding="utf-8",
            delay=True
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        # If file logging fails, just log to console
        logger.warning(f"Unable to open log file {log_path}: {e}")

    return logger
