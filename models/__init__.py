"""
========================================
Schema models for the query builder.
========================================

Typed descriptors the builders consume: columns, tables, views and the
schema registry used for name-based lookups.

Modules:
    column: Column handle and ColumnKind
    table: Table / View descriptors, ColumnCollection and Schema

Example:
    >>> from models import Column, ColumnKind, Table, View
    >>>
    >>> users = Table(
    ...     'users',
    ...     Column('id', ColumnKind.INT, auto_increment=True),
    ...     Column('name'),
    ... )
    >>> active_users = View('active_users', Column('id', ColumnKind.INT))
    >>> users.can_write(), active_users.can_write()
    (True, False)
"""

__version__ = "0.1.0"
__all__ = [
    'Column',
    'ColumnKind',
    'ColumnCollection',
    'Schema',
    'Table',
    'TableKind',
    'View',
]

from .column import Column, ColumnKind
from .table import ColumnCollection, Schema, Table, TableKind, View
