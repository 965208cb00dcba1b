"""
============================
String-based query builder.
============================

QueryBuilder is the lower-level SELECT builder for callers that work with
raw column-name strings instead of typed Column handles, typically when the
table descriptor is looked up by name in a Schema registry.

Column validation rules:
- Identifiers containing ``(``, ``)`` or `` AS `` are raw SQL expressions
  and are passed through unvalidated
- ``<table>.<col>`` qualified with the builder's own table must name an
  existing column of that table
- ``<other>.<col>`` qualified with any other (joined) table is accepted
  as written
- A bare ``<col>`` must exist in the builder's table while no joins are
  present; once a join is added every bare name is ambiguous and rejected

WHERE values are always bound through named placeholders derived from the
column name (``users.email`` -> ``:users_email``, then ``:users_email_1``,
``:users_email_2`` on reuse). Operators come from a fixed whitelist.

Usage:
    from sql.query_builder import QueryBuilder

    rows = (
        QueryBuilder(executor, 'users', schema)
        .select(['users.name', 'posts.title'])
        .left_join('posts', 'posts.user_id', '=', 'users.id')
        .where('users.email', 'LIKE', '%@example.com')
        .order_by('users.name')
        .limit(10)
        .get()
    )
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from core.exceptions import (
    AmbiguousColumnError,
    EmptyOperandListError,
    InvalidArgumentError,
    InvalidColumnError,
)
from models.table import Schema, Table
from sql.executor import Executor, run_statement
from sql.select import JoinKind, normalize_direction, require_non_negative

logger = logging.getLogger(__name__)

ALLOWED_OPERATORS = ('=', '!=', '<>', '<', '<=', '>', '>=', 'LIKE', 'NOT LIKE')

RAW_EXPRESSION_MARKERS = ('(', ')', ' AS ')

_NON_WORD = re.compile(r'\W')


def is_raw_expression(identifier: str) -> bool:
    """True for identifiers treated as raw SQL (functions, aliases)."""
    return any(marker in identifier for marker in RAW_EXPRESSION_MARKERS)


def normalize_operator(operator: str) -> str:
    """Validate a comparison operator against the whitelist.

    Raises:
        InvalidArgumentError: If the operator is not allowed
    """
    normalized = ' '.join(operator.upper().split()) if isinstance(operator, str) else None
    if normalized not in ALLOWED_OPERATORS:
        raise InvalidArgumentError(
            f"Operator {operator!r} is not allowed. Expected one of: {', '.join(ALLOWED_OPERATORS)}"
        )
    return normalized


class QueryBuilder:
    """Fluent SELECT builder over raw column names.

    Attributes:
        executor: Executor used by get(), first() and count()
        table: Active Table descriptor
        schema: Optional Schema used to resolve table names

    Example:
        >>> qb = QueryBuilder(None, users).where('email', '=', 'a@b.c').limit(5)
        >>> qb.to_sql()
        ('SELECT * FROM users WHERE email = :email LIMIT 5', {'email': 'a@b.c'})
    """

    def __init__(
        self,
        executor: Optional[Executor],
        table: Union[Table, str],
        schema: Optional[Schema] = None
    ):
        self.executor = executor
        self.schema = schema
        self.table = self._resolve_table(table)
        self._columns: List[str] = []
        self._wheres: List[str] = []
        self._where_columns: List[str] = []
        self._orders: List[str] = []
        self._order_columns: List[str] = []
        self._joins: List[str] = []
        self._join_tables: Dict[str, Table] = {}
        self._bindings: Dict[str, Any] = {}
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    def _resolve_table(self, table: Union[Table, str]) -> Table:
        if isinstance(table, Table):
            return table
        if isinstance(table, str):
            if self.schema is None:
                raise InvalidArgumentError(
                    f"Cannot resolve table '{table}' by name without a Schema"
                )
            return self.schema.get(table)
        raise InvalidArgumentError(
            f"Expected a Table or a table name, got {type(table).__name__}"
        )

    # ----------------------------
    # Validation
    # ----------------------------

    def _validate_column(self, column: Any, joins_present: Optional[bool] = None) -> str:
        if not isinstance(column, str) or not column.strip():
            raise InvalidArgumentError(f"Column reference must be a non-empty string, got {column!r}")

        if is_raw_expression(column):
            return column
        if joins_present is None:
            joins_present = bool(self._joins)

        if '.' in column:
            table_name, name = column.split('.', 1)
            if table_name == self.table.name and name != '*' and not self.table.has_column(name):
                raise InvalidColumnError(
                    f"Column '{column}' does not exist in table '{self.table.name}'"
                )
            return column

        if column == '*':
            return column
        if joins_present:
            raise AmbiguousColumnError(
                f"Column '{column}' must be prefixed with a table name when joins are present"
            )
        if not self.table.has_column(column):
            raise InvalidColumnError(
                f"Column '{column}' does not exist in table '{self.table.name}'"
            )
        return column

    def _placeholder(self, base: str) -> str:
        base = _NON_WORD.sub('_', base)
        placeholder = base
        counter = 1
        while placeholder in self._bindings:
            placeholder = f"{base}_{counter}"
            counter += 1
        return placeholder

    # ----------------------------
    # Clause assembly
    # ----------------------------

    def select(self, columns: Optional[Sequence[str]] = None) -> 'QueryBuilder':
        """Replace the projection list; None or empty means ``*``."""
        if isinstance(columns, str):
            raise InvalidArgumentError("select() expects a list of column names, not a single string")
        columns = list(columns or [])
        for column in columns:
            self._validate_column(column)
        self._columns = columns
        return self

    def where(self, column: str, operator: str, value: Any) -> 'QueryBuilder':
        """Add ``column <operator> :placeholder``; repeated calls are ANDed."""
        self._validate_column(column)
        operator = normalize_operator(operator)
        placeholder = self._placeholder(column)
        self._bindings[placeholder] = value
        self._wheres.append(f"{column} {operator} :{placeholder}")
        self._where_columns.append(column)
        return self

    def where_in(self, column: str, values: Iterable[Any]) -> 'QueryBuilder':
        """Add ``column IN (...)`` with one placeholder per value.

        Raises:
            EmptyOperandListError: If values is empty
        """
        self._validate_column(column)
        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            raise InvalidArgumentError(f"IN expects a collection of values, got {type(values).__name__}")
        values = list(values)
        if not values:
            raise EmptyOperandListError(f"IN on {column} requires at least one value")

        placeholders = []
        for index, value in enumerate(values):
            placeholder = self._placeholder(f"{column}_{index}")
            self._bindings[placeholder] = value
            placeholders.append(f":{placeholder}")
        self._wheres.append(f"{column} IN ({', '.join(placeholders)})")
        self._where_columns.append(column)
        return self

    def order_by(self, column: str, direction: str = 'ASC') -> 'QueryBuilder':
        self._validate_column(column)
        self._orders.append(f"{column} {normalize_direction(direction)}")
        self._order_columns.append(column)
        return self

    def join(
        self,
        table: Union[Table, str],
        left: str,
        operator: str,
        right: str,
        kind: str = 'INNER'
    ) -> 'QueryBuilder':
        """Append ``<kind> JOIN <table> ON <left> <operator> <right>``.

        Both sides must be table-qualified, as a join makes bare names ambiguous.

        Raises:
            AmbiguousColumnError: If a bare name was used by select(), where(),
                where_in() or order_by() before this join
        """
        join_table = self._resolve_table(table)
        try:
            join_kind = JoinKind(kind.upper() if isinstance(kind, str) else kind)
        except ValueError:
            raise InvalidArgumentError(
                f"Join kind must be one of INNER, LEFT, RIGHT, got {kind!r}"
            ) from None
        operator = normalize_operator(operator)
        self._validate_column(left, joins_present=True)
        self._validate_column(right, joins_present=True)
        for column in self._columns + self._where_columns + self._order_columns:
            self._validate_column(column, joins_present=True)

        self._join_tables[join_table.name] = join_table
        self._joins.append(f"{join_kind.value} JOIN {join_table.name} ON {left} {operator} {right}")
        return self

    def left_join(self, table: Union[Table, str], left: str, operator: str, right: str) -> 'QueryBuilder':
        return self.join(table, left, operator, right, JoinKind.LEFT)

    def right_join(self, table: Union[Table, str], left: str, operator: str, right: str) -> 'QueryBuilder':
        return self.join(table, left, operator, right, JoinKind.RIGHT)

    def limit(self, count: int) -> 'QueryBuilder':
        self._limit = require_non_negative('limit', count)
        return self

    def offset(self, count: int) -> 'QueryBuilder':
        self._offset = require_non_negative('offset', count)
        return self

    # ----------------------------
    # Rendering
    # ----------------------------

    @property
    def bindings(self) -> Dict[str, Any]:
        return dict(self._bindings)

    @property
    def joined_tables(self) -> Tuple[Table, ...]:
        return tuple(self._join_tables.values())

    def _source_sql(self) -> str:
        sql = f"FROM {self.table.name}"
        if self._joins:
            sql += ' ' + ' '.join(self._joins)
        if self._wheres:
            sql += ' WHERE ' + ' AND '.join(self._wheres)
        return sql

    def to_sql(self, limit_override: Optional[int] = None) -> Tuple[str, Dict[str, Any]]:
        """Render the SELECT as (sql, params) without executing it."""
        columns = ', '.join(self._columns) or '*'
        sql = f"SELECT {columns} {self._source_sql()}"
        if self._orders:
            sql += ' ORDER BY ' + ', '.join(self._orders)

        limit = self._limit if limit_override is None else limit_override
        if limit is not None:
            sql += f" LIMIT {limit}"
        if self._offset is not None:
            sql += f" OFFSET {self._offset}"
        return sql, dict(self._bindings)

    # ----------------------------
    # Execution
    # ----------------------------

    def get(self) -> List[Dict[str, Any]]:
        """Run the query and return every row as a dict."""
        sql, params = self.to_sql()
        return run_statement(self.executor, sql, params).rows

    def first(self) -> Optional[Dict[str, Any]]:
        """Run the query with a transient ``LIMIT 1``; the stored limit is kept."""
        limit = 1 if self._limit is None else min(self._limit, 1)
        sql, params = self.to_sql(limit_override=limit)
        return run_statement(self.executor, sql, params).first()

    def count(self) -> int:
        """Count rows matching the joins and WHERE conditions."""
        sql = f"SELECT COUNT(*) AS row_count {self._source_sql()}"
        row = run_statement(self.executor, sql, dict(self._bindings)).first()
        return int(row['row_count']) if row else 0

    def __repr__(self) -> str:
        return f"<QueryBuilder table={self.table.name} joins={len(self._joins)} wheres={len(self._wheres)}>"
