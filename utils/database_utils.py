"""
==================================================
Database connectivity utilities.
==================================================

Connection helpers used to build the default SQLAlchemy executor, plus a
PostgreSQL availability probe.

Every helper falls back to core.config when an argument is omitted, so a
configured ``.env`` file is enough to get a working engine. Connection
pooling is left at SQLAlchemy's defaults.

Example:
    >>> from utils.database_utils import (
    ...     check_database_available,
    ...     create_sqlalchemy_engine,
    ...     get_connection_string
    ... )
    >>>
    >>> if check_database_available('localhost', 5432, 'postgres', 'password'):
    ...     engine = create_sqlalchemy_engine()
    >>>
    >>> engine = create_sqlalchemy_engine('sqlite://')
"""

import logging
from typing import Optional

import psycopg2
from psycopg2 import OperationalError
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError

from core.config import config
from core.exceptions import ExecutorError

logger = logging.getLogger(__name__)


class DatabaseConnectionError(ExecutorError):
    """Exception raised when an engine cannot be created."""
    pass


def get_connection_string(url: Optional[str] = None) -> str:
    """
    Resolve the SQLAlchemy connection string.

    Args:
        url: Explicit connection URL; wins over configuration

    Returns:
        Connection string (DATABASE_URL or one built from POSTGRES_* settings)

    Example:
        >>> get_connection_string('sqlite:///app.db')
        'sqlite:///app.db'
    """
    return url if url else config.get_connection_string()


def create_sqlalchemy_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine.

    Args:
        url: Connection URL (defaults to config)
        echo: Enable SQLAlchemy statement logging

    Returns:
        SQLAlchemy Engine

    Raises:
        DatabaseConnectionError: If the URL cannot be parsed or its driver is unavailable

    Example:
        >>> engine = create_sqlalchemy_engine('sqlite://')
        >>> with engine.connect() as conn:
        ...     conn.exec_driver_sql('SELECT 1').scalar()
        1
    """
    connection_string = get_connection_string(url)
    try:
        return create_engine(connection_string, echo=echo)
    except (ArgumentError, ImportError) as e:
        logger.error(f"Failed to create engine: {e}")
        raise DatabaseConnectionError(f"Failed to create engine: {e}") from e


def check_database_available(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    timeout: int = 5
) -> bool:
    """
    Check if a PostgreSQL server accepts connections.

    Args:
        host: Database hostname (defaults to config)
        port: Database port (defaults to config)
        user: Database user (defaults to config)
        password: Database password (defaults to config)
        database: Database name (defaults to config.db_name)
        timeout: Connection timeout in seconds

    Returns:
        True if the server is available, False otherwise

    Example:
        >>> if check_database_available():
        ...     print("PostgreSQL is ready")
    """
    host = host or config.db_host
    port = port or config.db_port
    user = user or config.db_user
    password = password or config.db_password
    database = database or config.db_name

    try:
        conn = psycopg2.connect(
            host=host,
            port=port,
            user=user,
            password=password,
            database=database,
            connect_timeout=timeout
        )
        conn.close()
        return True
    except OperationalError as e:
        logger.debug(f"Database not available: {e}")
        return False
