"""
==============================================
Core infrastructure package for the query builder.
==============================================

This package provides configuration management, logging setup and the
exception hierarchy shared by every other package.

Modules:
    config: Configuration management from environment variables
    logger: Centralized logging configuration and utilities
    exceptions: Error kinds raised by builders and executors

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Connecting to {config.db_host}")
"""

__version__ = "0.1.0"
__all__ = [
    'get_logger', 'setup_logging', 'get_module_logger', 'config', 'Config',
    'QueryBuilderError', 'MissingTableError', 'MissingValuesError',
    'ReadOnlyTargetError', 'InvalidColumnError', 'AmbiguousColumnError',
    'InvalidArgumentError', 'EmptyOperandListError', 'InvalidRangeError',
    'ExecutorError', 'PrepareError', 'ExecuteError'
]

from core.config import Config, config
from core.exceptions import (
    AmbiguousColumnError,
    EmptyOperandListError,
    ExecuteError,
    ExecutorError,
    InvalidArgumentError,
    InvalidColumnError,
    InvalidRangeError,
    MissingTableError,
    MissingValuesError,
    PrepareError,
    QueryBuilderError,
    ReadOnlyTargetError,
)
from core.logger import get_logger, get_module_logger, setup_logging
