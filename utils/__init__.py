"""
==========================
Utility Functions Package.
==========================

Connection helpers shared by the Database facade and by applications that
build their own executors.

Modules:
    database_utils: Engine creation and PostgreSQL availability checks
"""

__version__ = "0.1.0"
__all__ = [
    'DatabaseConnectionError',
    'check_database_available',
    'get_connection_string',
    'create_sqlalchemy_engine',
]

from .database_utils import (
    DatabaseConnectionError,
    check_database_available,
    create_sqlalchemy_engine,
    get_connection_string,
)
