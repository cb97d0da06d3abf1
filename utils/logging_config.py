"""
Logging configuration for the subtitle sync application.

Every module logs through ``get_logger(__name__)``; the command line calls
``setup_logging`` once to attach a stderr handler (colored on terminals)
and, optionally, a plain-text log file.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO
from .constants import DEFAULT_LOG_FORMAT, DEFAULT_LOG_DATE_FORMAT


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for terminal output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Color a copy; a file handler may format the same record afterwards
        colored = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(colored.levelname, self.RESET)
        colored.levelname = f"{color}{colored.levelname}{self.RESET}"
        return super().format(colored)


def _console_formatter(stream: TextIO, use_colors: bool) -> logging.Formatter:
    if use_colors and stream.isatty():
        return ColoredFormatter(DEFAULT_LOG_FORMAT, datefmt=DEFAULT_LOG_DATE_FORMAT)
    return logging.Formatter(DEFAULT_LOG_FORMAT, datefmt=DEFAULT_LOG_DATE_FORMAT)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    use_colors: bool = True,
    logger_name: str = ""
) -> logging.Logger:
    """
    Install console (and optional file) handlers on a logger.

    Module loggers are named after their packages (``core.*``,
    ``playback.*``, ...), so the root logger is configured by default.
    Handlers from an earlier call are replaced.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO)
        log_file: Optional path to log file; always written without colors
        use_colors: Color level names when stderr is a terminal
        logger_name: Name of the logger to configure (root by default)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logging(logging.DEBUG, Path("subsync.log"))
        >>> logger.info("Sync started")
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(_console_formatter(sys.stderr, use_colors))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT,
                                                    datefmt=DEFAULT_LOG_DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "subsync") -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name, normally the calling module's ``__name__``

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
