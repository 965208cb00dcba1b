"""
===========================================
Data Manipulation Language (DML) builders.
===========================================

Fluent builders for the three write statements. Each one validates its
target up front (read-only targets are rejected before any SQL exists),
renders named placeholders only, and hands execution to the bound Executor.

Builders:
- InsertQuery: ``INSERT INTO <t> (<a>, <b>) VALUES (:a, :b)``
- UpdateQuery: ``UPDATE <t> SET a = :set_a, b = :set_b [WHERE ...]``
- DeleteQuery: ``DELETE FROM <t> [WHERE ...]``

Placeholder policy:
    INSERT binds each value under its column name; column names are unique
    per statement so these can never collide. UPDATE prefixes SET
    placeholders with ``set_`` and renders the WHERE condition into its own
    sink (``param_0``, ``param_1``, ...), so the two families are disjoint.

An UPDATE or DELETE without a WHERE clause is legal and touches every row.
Callers that need a guard must add it themselves.

Usage:
    from sql.conditions import eq
    from sql.dml import DeleteQuery, InsertQuery, UpdateQuery

    InsertQuery(executor).into(users).set(users.c.name, 'Ann').execute()

    updated = (
        UpdateQuery(executor)
        .table(users)
        .set({users.c.name: 'Ann B.', 'email': 'ann@example.com'})
        .where(eq(users.c.id, 7))
        .execute()
    )

    deleted = DeleteQuery(executor).from_(users).where(eq(users.c.id, 7)).execute()
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Tuple, Union

from core.exceptions import (
    InvalidArgumentError,
    InvalidColumnError,
    MissingTableError,
    MissingValuesError,
    ReadOnlyTargetError,
)
from models.column import Column
from models.table import Table
from sql.conditions import Condition, require_condition
from sql.executor import Executor, Identity, run_statement
from sql.params import ParameterSink
from sql.select import require_table

logger = logging.getLogger(__name__)

ColumnKey = Union[Column, str]

SET_PREFIX = 'set_'

_MISSING = object()


def resolve_column_name(table: Optional[Table], key: Any) -> str:
    """Normalize a Column or name key to a plain column name.

    When the target table is known the key must belong to it.

    Raises:
        InvalidArgumentError: If key is neither a Column nor a string
        InvalidColumnError: If key does not belong to the target table
    """
    if isinstance(key, Column):
        if table is not None and key.table_name not in (None, table.name):
            raise InvalidColumnError(
                f"Column '{key.full_name}' does not belong to table '{table.name}'"
            )
        name = key.name
    elif isinstance(key, str):
        name = key
    else:
        raise InvalidArgumentError(
            f"Value keys must be Column objects or column names, got {type(key).__name__}"
        )

    if table is not None and not table.has_column(name):
        raise InvalidColumnError(f"Column '{name}' does not exist in table '{table.name}'")
    return name


def column_owner(key: ColumnKey) -> Optional[str]:
    """Owning table name of a Column key; None for name keys."""
    return key.table_name if isinstance(key, Column) else None


def _normalize_values(
    table: Optional[Table], values: Any
) -> Tuple[Dict[str, Any], Dict[str, Optional[str]]]:
    """Split a mapping into name-keyed values and the owner of each key."""
    if not isinstance(values, Mapping):
        raise InvalidArgumentError(
            f"Expected a mapping of column to value, got {type(values).__name__}"
        )
    normalized: Dict[str, Any] = {}
    owners: Dict[str, Optional[str]] = {}
    for key, value in values.items():
        name = resolve_column_name(table, key)
        normalized[name] = value
        owners[name] = column_owner(key)
    return normalized, owners


def _check_pending(table: Table, values: Dict[str, Any], owners: Dict[str, Optional[str]]) -> None:
    """Validate values staged before the target table was known."""
    for name in values:
        owner = owners.get(name)
        if owner is not None and owner != table.name:
            raise InvalidColumnError(
                f"Column '{owner}.{name}' does not belong to table '{table.name}'"
            )
        if not table.has_column(name):
            raise InvalidColumnError(f"Column '{name}' does not exist in table '{table.name}'")


class InsertQuery:
    """Fluent INSERT builder.

    Example:
        >>> query = InsertQuery().into(users).set(users.c.id, 1).set(users.c.name, 'a')
        >>> query.to_sql()
        ('INSERT INTO users (id, name) VALUES (:id, :name)', {'id': 1, 'name': 'a'})
    """

    def __init__(self, executor: Optional[Executor] = None):
        self.executor = executor
        self._table: Optional[Table] = None
        self._values: Dict[str, Any] = {}
        self._owners: Dict[str, Optional[str]] = {}

    def into(self, table: Table) -> 'InsertQuery':
        """Set the target table.

        Raises:
            ReadOnlyTargetError: If the table does not accept writes
        """
        require_table(table)
        if not table.can_write():
            raise ReadOnlyTargetError(f"Cannot insert into read-only {table.kind.value.lower()} '{table.name}'")
        _check_pending(table, self._values, self._owners)
        self._table = table
        return self

    def set(self, column: ColumnKey, value: Any) -> 'InsertQuery':
        """Add or overwrite one column value."""
        name = resolve_column_name(self._table, column)
        self._values[name] = value
        self._owners[name] = column_owner(column)
        return self

    def values(self, values: Mapping) -> 'InsertQuery':
        """Replace every pending value with the given mapping.

        Keys may be Column objects or column names; nothing from earlier
        set()/values() calls survives.
        """
        self._values, self._owners = _normalize_values(self._table, values)
        return self

    def clear_values(self) -> 'InsertQuery':
        self._values = {}
        self._owners = {}
        return self

    def get_values(self) -> Dict[str, Any]:
        """Copy of the pending column-name to value mapping."""
        return dict(self._values)

    def to_sql(self) -> Tuple[str, Dict[str, Any]]:
        """Render the statement.

        Raises:
            MissingTableError: If into() was never called
            MissingValuesError: If no values are pending
        """
        if self._table is None:
            raise MissingTableError("INSERT target is required. Use .into(table) first.")
        if not self._values:
            raise MissingValuesError(f"INSERT into '{self._table.name}' has no values")

        columns = ', '.join(self._values)
        placeholders = ', '.join(f":{name}" for name in self._values)
        sql = f"INSERT INTO {self._table.name} ({columns}) VALUES ({placeholders})"
        return sql, dict(self._values)

    def execute(self) -> bool:
        """Run the INSERT; returns True once the executor accepted it."""
        sql, params = self.to_sql()
        run_statement(self.executor, sql, params)
        return True

    def execute_and_get_id(self) -> Optional[Identity]:
        """Run the INSERT and return the identity generated for the new row."""
        self.execute()
        return self.executor.last_insert_identity()

    def __repr__(self) -> str:
        target = self._table.name if self._table is not None else '?'
        return f"<InsertQuery into={target} values={list(self._values)}>"


class UpdateQuery:
    """Fluent UPDATE builder.

    ``set()`` merges into the pending SET map, last write per column wins.
    """

    def __init__(self, executor: Optional[Executor] = None):
        self.executor = executor
        self._table: Optional[Table] = None
        self._values: Dict[str, Any] = {}
        self._owners: Dict[str, Optional[str]] = {}
        self._where: Optional[Condition] = None

    def table(self, table: Table) -> 'UpdateQuery':
        """Set the target table.

        Raises:
            ReadOnlyTargetError: Unless the table is writable or an updatable view
        """
        require_table(table)
        if not table.can_update():
            raise ReadOnlyTargetError(f"Cannot update read-only {table.kind.value.lower()} '{table.name}'")
        _check_pending(table, self._values, self._owners)
        self._table = table
        return self

    def set(self, column_or_values: Union[ColumnKey, Mapping], value: Any = _MISSING) -> 'UpdateQuery':
        """Merge SET values.

        Accepts either ``set(column, value)`` or ``set({column: value, ...})``.

        Raises:
            InvalidArgumentError: If the arguments match neither form
        """
        if isinstance(column_or_values, Mapping):
            if value is not _MISSING:
                raise InvalidArgumentError("set() takes either a mapping or a (column, value) pair, not both")
            values, owners = _normalize_values(self._table, column_or_values)
            self._values.update(values)
            self._owners.update(owners)
        elif isinstance(column_or_values, (Column, str)):
            if value is _MISSING:
                raise InvalidArgumentError(f"set({column_or_values!s}) is missing its value")
            name = resolve_column_name(self._table, column_or_values)
            self._values[name] = value
            self._owners[name] = column_owner(column_or_values)
        else:
            raise InvalidArgumentError(
                f"set() expects a Column, a column name or a mapping, got {type(column_or_values).__name__}"
            )
        return self

    def where(self, condition: Condition) -> 'UpdateQuery':
        """Set the WHERE condition, replacing any previous one."""
        require_condition(condition)
        self._where = condition
        return self

    def get_values(self) -> Dict[str, Any]:
        return dict(self._values)

    def to_sql(self) -> Tuple[str, Dict[str, Any]]:
        """Render the statement.

        Raises:
            MissingTableError: If table() was never called
            MissingValuesError: If no SET values are pending
        """
        if self._table is None:
            raise MissingTableError("UPDATE target is required. Use .table(table) first.")
        if not self._values:
            raise MissingValuesError(f"UPDATE of '{self._table.name}' has no SET values")

        params = ParameterSink()
        assignments = []
        for name, value in self._values.items():
            placeholder = params.add(f"{SET_PREFIX}{name}", value)
            assignments.append(f"{name} = :{placeholder}")

        sql = f"UPDATE {self._table.name} SET {', '.join(assignments)}"
        if self._where is not None:
            where_params = ParameterSink()
            sql += f" WHERE {self._where.render(where_params)}"
            params.merge(where_params)
        return sql, params.as_dict()

    def execute(self) -> int:
        """Run the UPDATE and return the number of affected rows."""
        sql, params = self.to_sql()
        if self._where is None:
            logger.warning(f"UPDATE on '{self._table.name}' has no WHERE clause; every row is affected")
        return run_statement(self.executor, sql, params).rowcount

    def __repr__(self) -> str:
        target = self._table.name if self._table is not None else '?'
        return f"<UpdateQuery table={target} set={list(self._values)}>"


class DeleteQuery:
    """Fluent DELETE builder."""

    def __init__(self, executor: Optional[Executor] = None):
        self.executor = executor
        self._table: Optional[Table] = None
        self._where: Optional[Condition] = None

    def from_(self, table: Table) -> 'DeleteQuery':
        """Set the target table.

        Raises:
            ReadOnlyTargetError: If the table does not accept writes
        """
        require_table(table)
        if not table.can_write():
            raise ReadOnlyTargetError(f"Cannot delete from read-only {table.kind.value.lower()} '{table.name}'")
        self._table = table
        return self

    def where(self, condition: Condition) -> 'DeleteQuery':
        require_condition(condition)
        self._where = condition
        return self

    def to_sql(self) -> Tuple[str, Dict[str, Any]]:
        if self._table is None:
            raise MissingTableError("DELETE target is required. Use .from_(table) first.")

        params = ParameterSink()
        sql = f"DELETE FROM {self._table.name}"
        if self._where is not None:
            sql += f" WHERE {self._where.render(params)}"
        return sql, params.as_dict()

    def execute(self) -> int:
        """Run the DELETE and return the number of affected rows."""
        sql, params = self.to_sql()
        if self._where is None:
            logger.warning(f"DELETE from '{self._table.name}' has no WHERE clause; every row is removed")
        return run_statement(self.executor, sql, params).rowcount

    def __repr__(self) -> str:
        target = self._table.name if self._table is not None else '?'
        return f"<DeleteQuery from={target}>"
