"""
==========================================
Centralized logging for the query builder.
==========================================

Provides consistent logging setup for applications that embed the builder:
- Console and optional file output
- Log level and file defaults taken from core.config
- Colored console output with level markers
- Module-specific loggers

Library modules only ever call logging.getLogger(__name__); nothing is
configured on import. Applications call setup_logging() once at startup.
Rendered SQL and bound parameters are logged at DEBUG by the builders, so
setting LOG_LEVEL=DEBUG is enough to trace every statement.

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> # Setup logging at application start
    >>> setup_logging(log_level='DEBUG', log_file='queries.log')
    >>>
    >>> # Get module logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Builder ready")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import config

CONSOLE_FORMAT = '%(marker)s %(asctime)s - %(name)s - %(levelname)s - %(message)s'
PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter adding ANSI colors and a level marker for console output.

    The record is copied before decoration so that other handlers sharing
    the same record (e.g. a file handler) still see the plain level name.

    Attributes:
        COLORS: Dict mapping log levels to ANSI color codes
        MARKERS: Dict mapping log levels to short markers
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    MARKERS = {
        'DEBUG': '[sql]',
        'INFO': '[..]',
        'WARNING': '[!!]',
        'ERROR': '[xx]',
        'CRITICAL': '[##]'
    }

    def format(self, record):
        """Format a copy of the record with color and marker.

        Args:
            record: LogRecord instance to format

        Returns:
            Formatted log message string
        """
        decorated = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        decorated.marker = self.MARKERS.get(levelname, '')
        if levelname in self.COLORS:
            decorated.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        return super().format(decorated)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__ of calling module)
        level: Optional logging level override (DEBUG/INFO/WARNING/ERROR/CRITICAL)

    Returns:
        Logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> debug_logger = get_logger('sql.select', level='DEBUG')
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: Optional[bool] = None
) -> None:
    """Configure the root logger with console and/or file handlers.

    Arguments left as None fall back to core.config (LOG_LEVEL, LOG_FILE,
    LOG_COLORS). Existing root handlers are replaced, so calling this twice
    does not duplicate output.

    Args:
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name (e.g., 'queries.log')
        log_dir: Optional log directory path (defaults to 'logs/')
        console_output: If True, output to console (stdout)
        use_colors: If True, use colored output for console

    Example:
        >>> setup_logging(log_level='DEBUG', log_file='queries.log', log_dir='var/log')
    """
    log_level = (log_level or config.logging.level).upper()
    log_file = log_file if log_file is not None else config.logging.log_file
    use_colors = config.logging.use_colors if use_colors is None else use_colors
    level = getattr(logging, log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        if use_colors:
            console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        else:
            console_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir) if log_dir else Path('logs')
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)


def get_module_logger(module_name: str) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        module_name: Name of the module (typically use __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(module_name)
