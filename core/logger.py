"""Process-wide logging setup.

``setup_logger`` attaches handlers to the root logger once at start-up;
modules then log through ``get_logger(__name__)``.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3


class ColoredFormatter(logging.Formatter):
    """Prefix the level name with an ANSI colour for terminals."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # File handlers receive the same record object
        colored = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno)
        if color:
            colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def parse_level(level: Union[int, str]) -> int:
    """Translate a level name such as ``"debug"`` into a logging constant."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _console_handler(colored: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    formatter_cls = ColoredFormatter if colored and sys.stdout.isatty() else logging.Formatter
    handler.setFormatter(formatter_cls(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_file: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8',
    )
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logger(
    name: Optional[str] = None,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    colored: bool = True
) -> logging.Logger:
    """Configure and return a logger instance.

    Args:
        name: Logger name, ``None`` configures the root logger so that every
            ``get_logger(__name__)`` logger inherits the handlers
        level: Logging level or level name
        log_file: Optional path of a size-rotated log file
        colored: Colour level names when stdout is a terminal

    Returns:
        Configured logger instance
    """
    level = parse_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    logger.addHandler(_console_handler(colored))
    if log_file:
        logger.addHandler(_file_handler(log_file))

    # Werkzeug logs every request at INFO
    logging.getLogger('werkzeug').setLevel(max(level, logging.WARNING))

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name."""
    return logging.getLogger(name)
