"""
Logging configuration for rkunpack.

Provides colored console output and optional file logging with rotation.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BOLD = "\033[1m"
    DIM = "\033[2m"


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.DIM + Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    # Container signatures stand out in the region listing
    KEYWORDS = {
        "RKFW": Colors.MAGENTA + Colors.BOLD,
        "RKAF": Colors.BLUE + Colors.BOLD,
        "unknown": Colors.YELLOW,
    }

    def __init__(self, fmt: str = None, datefmt: str = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        # Work on a copy so file handlers see the plain record
        record = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"
        record.name = f"{Colors.CYAN}{record.name}{Colors.RESET}"

        msg = record.getMessage()
        for keyword, kcolor in self.KEYWORDS.items():
            if keyword in msg:
                msg = msg.replace(keyword, f"{kcolor}{keyword}{Colors.RESET}")
        record.msg = msg
        record.args = None

        return super().format(record)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Configure logging for rkunpack.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; console only when omitted
        max_bytes: Max size per log file before rotation
        backup_count: Number of backup files to keep
        use_colors: Enable colored console output

    Returns:
        Configured package logger
    """
    logger = logging.getLogger("rkunpack")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_format = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    console_handler.setFormatter(ColoredFormatter(console_format, use_colors=use_colors))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count)
        file_handler.setLevel(logging.DEBUG)
        file_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
        file_handler.setFormatter(logging.Formatter(file_format))
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialized - Level: {level}, File: {log_file or '-'}")

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """Get a logger instance for a module."""
    if name:
        if name.startswith("rkunpack."):
            return logging.getLogger(name)
        return logging.getLogger(f"rkunpack.{name}")
    return logging.getLogger("rkunpack")


class ProgressLogger:
    """Context manager for logging progress of long operations."""

    def __init__(self, logger: logging.Logger, operation: str, total: int = None):
        self.logger = logger
        self.operation = operation
        self.total = total
        self.current = 0
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = datetime.now() - self.start_time
        if exc_type:
            self.logger.error(f"Failed: {self.operation} after {elapsed}")
        else:
            self.logger.debug(f"Completed: {self.operation} in {elapsed}")
        return False

    def update(self, current: int = None, message: str = None):
        """Update progress."""
        if current is not None:
            self.current = current
        else:
            self.current += 1

        if self.total:
            pct = (self.current / self.total) * 100
            progress_msg = f"{self.operation}: {self.current}/{self.total} ({pct:.1f}%)"
        else:
            progress_msg = f"{self.operation}: {self.current} items processed"

        if message:
            progress_msg += f" - {message}"

        self.logger.debug(progress_msg)
