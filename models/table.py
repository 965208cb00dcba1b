"""
===========================================================
Table, view and schema descriptors
===========================================================

A Table maps a logical table name to its ordered set of columns and declares
whether it accepts writes. Views are the same descriptor tagged as VIEW:
never writable, and optionally updatable. Write capability is answered by
two checks only, can_write() and can_update(), so builders never branch on
the concrete descriptor type.

Tables can be declared inline or by subclassing:

    >>> users = Table(
    ...     'users',
    ...     Column('id', ColumnKind.INT, auto_increment=True, primary_key=True),
    ...     Column('name'),
    ...     Column('email'),
    ... )
    >>> users.c.email.full_name
    'users.email'
    >>>
    >>> class ActiveUsers(View):
    ...     def __init__(self):
    ...         super().__init__('active_users', Column('id', ColumnKind.INT), Column('name'))

A Schema is a registry of descriptors keyed by name, used by the
string-based QueryBuilder to look tables up by name.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Dict, Iterator, List, Union

from core.exceptions import InvalidArgumentError, InvalidColumnError, MissingTableError
from models.column import Column


class TableKind(str, Enum):
    """Descriptor variant."""

    TABLE = 'TABLE'
    VIEW = 'VIEW'


class ColumnCollection(Mapping):
    """Ordered, read-only mapping of column name to Column.

    Columns are reachable by key (``c['email']``) or by attribute
    (``c.email``). Key access always works, including for names that clash
    with Mapping methods such as ``items``.
    """

    __slots__ = ('_columns', '_table_name')

    def __init__(self, table_name: str, columns: Dict[str, Column]):
        self._table_name = table_name
        self._columns = dict(columns)

    def __getitem__(self, name: str) -> Column:
        try:
            return self._columns[name]
        except KeyError:
            raise InvalidColumnError(
                f"Column '{name}' does not exist in table '{self._table_name}'"
            ) from None

    def __getattr__(self, name: str) -> Column:
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self._columns[name]
        except KeyError:
            raise AttributeError(
                f"Table '{self._table_name}' has no column '{name}'"
            ) from None

    def __contains__(self, name) -> bool:
        return name in self._columns

    def get(self, name: str, default=None):
        return self._columns.get(name, default)

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __repr__(self) -> str:
        return f"<ColumnCollection {self._table_name}: {', '.join(self._columns)}>"


class Table:
    """Descriptor of a relational table.

    Attributes:
        name: Table name as it appears in SQL
        kind: TableKind.TABLE or TableKind.VIEW
        writable: Accepts INSERT/UPDATE/DELETE
        updatable: View-only flag allowing UPDATE on a non-writable view
        columns: Ordered ColumnCollection (also available as ``c``)
    """

    def __init__(
        self,
        name: str,
        *columns: Column,
        writable: bool = True,
        kind: TableKind = TableKind.TABLE,
        updatable: bool = False
    ):
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError(f"Table name must be a non-empty string, got {name!r}")

        self.name = name
        self.kind = TableKind(kind)
        self.writable = bool(writable)
        # Only views carry an independent updatable flag
        self.updatable = bool(updatable) if self.kind is TableKind.VIEW else self.writable

        bound: Dict[str, Column] = {}
        for column in columns:
            if not isinstance(column, Column):
                raise InvalidArgumentError(
                    f"Table '{name}' expects Column objects, got {type(column).__name__}"
                )
            if column.table_name is None:
                column = column.bind(name)
            elif column.table_name != name:
                raise InvalidColumnError(
                    f"Column '{column.full_name}' cannot be declared on table '{name}'"
                )
            if column.name in bound:
                raise InvalidArgumentError(
                    f"Duplicate column '{column.name}' in table '{name}'"
                )
            bound[column.name] = column

        self.columns = ColumnCollection(name, bound)

    @property
    def c(self) -> ColumnCollection:
        """Shorthand for ``columns``."""
        return self.columns

    @property
    def is_view(self) -> bool:
        return self.kind is TableKind.VIEW

    def can_write(self) -> bool:
        """Whether INSERT and DELETE may target this descriptor."""
        return self.writable

    def can_update(self) -> bool:
        """Whether UPDATE may target this descriptor.

        True for writable tables, and for views explicitly marked updatable.
        """
        return self.writable or (self.is_view and self.updatable)

    def column(self, name: str) -> Column:
        """Look a column up by name.

        Raises:
            InvalidColumnError: If the table has no such column
        """
        return self.columns[name]

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def column_names(self) -> List[str]:
        return list(self.columns)

    def __repr__(self) -> str:
        flags = 'rw' if self.writable else ('ru' if self.can_update() else 'ro')
        return f"<{self.kind.value.title()} {self.name} ({flags}) [{', '.join(self.columns)}]>"


class View(Table):
    """Read-only table variant; pass ``updatable=True`` for updatable views."""

    def __init__(self, name: str, *columns: Column, updatable: bool = False):
        super().__init__(
            name,
            *columns,
            writable=False,
            kind=TableKind.VIEW,
            updatable=updatable
        )


class Schema:
    """Registry of table and view descriptors keyed by name.

    Example:
        >>> schema = Schema(users, posts)
        >>> schema.get('users') is users
        True
        >>> 'posts' in schema
        True
    """

    def __init__(self, *tables: Table):
        self._tables: Dict[str, Table] = {}
        for table in tables:
            self.add(table)

    def add(self, table: Table) -> Table:
        """Register a descriptor.

        Raises:
            InvalidArgumentError: If the object is not a Table or the name is taken
        """
        if not isinstance(table, Table):
            raise InvalidArgumentError(f"Schema expects Table objects, got {type(table).__name__}")
        if table.name in self._tables:
            raise InvalidArgumentError(f"Table '{table.name}' is already registered")
        self._tables[table.name] = table
        return table

    def get(self, name: str) -> Table:
        """Return the descriptor registered under name.

        Raises:
            MissingTableError: If no such table or view is registered
        """
        try:
            return self._tables[name]
        except KeyError:
            raise MissingTableError(f"Table '{name}' is not registered in schema") from None

    def tables(self) -> List[Table]:
        return [t for t in self._tables.values() if t.kind is TableKind.TABLE]

    def views(self) -> List[Table]:
        return [t for t in self._tables.values() if t.kind is TableKind.VIEW]

    def __contains__(self, item: Union[str, Table]) -> bool:
        if isinstance(item, Table):
            return self._tables.get(item.name) is item
        return item in self._tables

    def __iter__(self) -> Iterator[Table]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)
