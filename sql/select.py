"""
============================
SELECT query builder.
============================

SelectQuery assembles a SELECT statement from typed columns, a target table,
joins, a single WHERE condition, ordering and pagination. Clauses are always
rendered in the same order:

    SELECT <columns | *> FROM <table> [<kind> JOIN <t> ON <cond>]*
    [WHERE <cond>] [ORDER BY <col> <dir>, ...] [LIMIT n] [OFFSET n]

Join conditions and the WHERE condition render into one shared parameter
sink, so join parameters always come first and no two placeholders of a
query ever collide.

Usage:
    from sql.conditions import eq, gt
    from sql.select import SelectQuery

    query = (
        SelectQuery(executor)
        .select(users.c.name, posts.c.title)
        .from_(users)
        .left_join(posts, eq(posts.c.user_id, users.c.id))
        .where(gt(users.c.id, 10))
        .order_by(users.c.name, 'desc')
        .limit(20)
    )
    sql, params = query.to_sql()
    rows = query.fetch_all()
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

import pandas as pd

from core.exceptions import InvalidArgumentError, MissingTableError
from models.column import Column
from models.table import Table
from sql.conditions import Condition, require_column, require_condition
from sql.executor import Executor, StatementResult, run_statement
from sql.params import ParameterSink

logger = logging.getLogger(__name__)

T = TypeVar('T')

SORT_DIRECTIONS = ('ASC', 'DESC')


class JoinKind(str, Enum):
    INNER = 'INNER'
    LEFT = 'LEFT'
    RIGHT = 'RIGHT'


@dataclass(frozen=True)
class Join:
    """One JOIN clause: target table, ON condition and join kind."""

    table: Table
    condition: Condition
    kind: JoinKind = JoinKind.INNER

    def render(self, params: ParameterSink) -> str:
        return f"{self.kind.value} JOIN {self.table.name} ON {self.condition.render(params)}"


def normalize_direction(direction: str) -> str:
    """Validate a sort direction and return it uppercased.

    Raises:
        InvalidArgumentError: If direction is not ASC or DESC (any case)
    """
    normalized = direction.strip().upper() if isinstance(direction, str) else None
    if normalized not in SORT_DIRECTIONS:
        raise InvalidArgumentError(
            f"Sort direction must be ASC or DESC, got {direction!r}"
        )
    return normalized


def require_non_negative(name: str, value: Any) -> int:
    """Validate a LIMIT / OFFSET value.

    Raises:
        InvalidArgumentError: If value is not a non-negative integer
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def require_table(table: Any) -> Table:
    if not isinstance(table, Table):
        raise InvalidArgumentError(f"Expected a Table, got {type(table).__name__}")
    return table


class SelectQuery:
    """Fluent SELECT builder.

    Every mutating method returns the builder itself. Rendering is
    idempotent: calling to_sql() repeatedly yields identical output.

    Attributes:
        executor: Executor used by the fetch methods; may be None for
            render-only use
    """

    def __init__(self, executor: Optional[Executor] = None):
        self.executor = executor
        self._columns: List[Column] = []
        self._table: Optional[Table] = None
        self._joins: List[Join] = []
        self._where: Optional[Condition] = None
        self._order_by: List[Tuple[Column, str]] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    # ----------------------------
    # Clause assembly
    # ----------------------------

    def select(self, *columns: Column) -> 'SelectQuery':
        """Replace the projection list; no columns means ``*``."""
        for column in columns:
            require_column(column)
        self._columns = list(columns)
        return self

    def from_(self, table: Table) -> 'SelectQuery':
        """Set the table to select from (required before rendering)."""
        self._table = require_table(table)
        return self

    def join(self, table: Table, condition: Condition, kind: str = 'INNER') -> 'SelectQuery':
        """Append a join of the given kind (INNER, LEFT or RIGHT)."""
        require_table(table)
        require_condition(condition)
        try:
            join_kind = JoinKind(kind.upper() if isinstance(kind, str) else kind)
        except ValueError:
            raise InvalidArgumentError(
                f"Join kind must be one of INNER, LEFT, RIGHT, got {kind!r}"
            ) from None
        self._joins.append(Join(table, condition, join_kind))
        return self

    def inner_join(self, table: Table, condition: Condition) -> 'SelectQuery':
        return self.join(table, condition, JoinKind.INNER)

    def left_join(self, table: Table, condition: Condition) -> 'SelectQuery':
        return self.join(table, condition, JoinKind.LEFT)

    def right_join(self, table: Table, condition: Condition) -> 'SelectQuery':
        return self.join(table, condition, JoinKind.RIGHT)

    def where(self, condition: Condition) -> 'SelectQuery':
        """Set the WHERE condition, replacing any previous one.

        Combine predicates with and_() / or_() rather than calling twice.
        """
        require_condition(condition)
        self._where = condition
        return self

    def order_by(self, column: Column, direction: str = 'ASC') -> 'SelectQuery':
        """Append an ORDER BY term; direction is case-insensitive ASC/DESC."""
        require_column(column)
        self._order_by.append((column, normalize_direction(direction)))
        return self

    def limit(self, limit: int) -> 'SelectQuery':
        self._limit = require_non_negative('limit', limit)
        return self

    def offset(self, offset: int) -> 'SelectQuery':
        self._offset = require_non_negative('offset', offset)
        return self

    # ----------------------------
    # Introspection
    # ----------------------------

    @property
    def table(self) -> Optional[Table]:
        return self._table

    @property
    def columns(self) -> Tuple[Column, ...]:
        return tuple(self._columns)

    @property
    def joins(self) -> Tuple[Join, ...]:
        return tuple(self._joins)

    @property
    def where_condition(self) -> Optional[Condition]:
        return self._where

    @property
    def limit_value(self) -> Optional[int]:
        return self._limit

    @property
    def offset_value(self) -> Optional[int]:
        return self._offset

    # ----------------------------
    # Rendering
    # ----------------------------

    def _render_source(self, params: ParameterSink) -> List[str]:
        """FROM, JOIN and WHERE clauses, shared by to_sql() and count()."""
        if self._table is None:
            raise MissingTableError("FROM table is required. Use .from_(table) first.")

        parts = [f"FROM {self._table.name}"]
        for join in self._joins:
            parts.append(join.render(params))
        if self._where is not None:
            parts.append(f"WHERE {self._where.render(params)}")
        return parts

    def to_sql(self, limit_override: Optional[int] = None) -> Tuple[str, Dict[str, Any]]:
        """Render the statement.

        Args:
            limit_override: LIMIT used for this render only; the stored
                limit is left untouched

        Returns:
            Tuple of (sql, params)

        Raises:
            MissingTableError: If from_() was never called
        """
        params = ParameterSink()
        projection = ', '.join(column.full_name for column in self._columns) or '*'
        parts = [f"SELECT {projection}"]
        parts.extend(self._render_source(params))

        if self._order_by:
            terms = ', '.join(f"{column.full_name} {direction}" for column, direction in self._order_by)
            parts.append(f"ORDER BY {terms}")

        limit = self._limit if limit_override is None else limit_override
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if self._offset is not None:
            parts.append(f"OFFSET {self._offset}")

        return ' '.join(parts), params.as_dict()

    # ----------------------------
    # Execution
    # ----------------------------

    def execute(self) -> StatementResult:
        sql, params = self.to_sql()
        return run_statement(self.executor, sql, params)

    def fetch_all(self) -> List[Dict[str, Any]]:
        """Run the query and return every row as a dict."""
        return self.execute().rows

    def fetch_one(self) -> Optional[Dict[str, Any]]:
        """Run the query with a transient ``LIMIT 1`` and return the first row.

        A stored limit of 0 is honoured; otherwise LIMIT 1 is applied for
        this call only.
        """
        limit = 1 if self._limit is None else min(self._limit, 1)
        sql, params = self.to_sql(limit_override=limit)
        return run_statement(self.executor, sql, params).first()

    def fetch_all_as(self, factory: Callable[..., T]) -> List[T]:
        """Run the query and build one object per row via ``factory(**row)``."""
        return [factory(**row) for row in self.fetch_all()]

    def fetch_one_as(self, factory: Callable[..., T]) -> Optional[T]:
        row = self.fetch_one()
        return factory(**row) if row is not None else None

    def fetch_dataframe(self) -> pd.DataFrame:
        """Run the query and return the rows as a pandas DataFrame.

        An empty result keeps the projected column names as headers.
        """
        rows = self.fetch_all()
        if rows:
            return pd.DataFrame.from_records(rows)
        return pd.DataFrame(columns=[column.name for column in self._columns])

    def count(self) -> int:
        """Count matching rows, ignoring projection, ordering and pagination."""
        params = ParameterSink()
        sql = ' '.join(['SELECT COUNT(*) AS row_count'] + self._render_source(params))
        row = run_statement(self.executor, sql, params.as_dict()).first()
        return int(row['row_count']) if row else 0

    def __repr__(self) -> str:
        target = self._table.name if self._table is not None else '?'
        return f"<SelectQuery from={target} joins={len(self._joins)}>"
