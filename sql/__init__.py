"""
====================================================
SQL construction and execution package.
====================================================

Typed builders that render parameterized SQL and run it through an
Executor. No literal value is ever interpolated into SQL text.

The package follows a clear organization:
    - params.py: Parameter sink shared by one render pass
    - conditions.py: Condition tree and helper constructors (eq, in_, and_, ...)
    - select.py: SELECT builder with joins, ordering and pagination
    - dml.py: INSERT / UPDATE / DELETE builders
    - query_builder.py: String-based SELECT builder with column validation
    - executor.py: Executor protocol and the SQLAlchemy implementation
    - database.py: Database facade handing out bound builders

Example:
    >>> from sql import Database, and_, eq, gt
    >>>
    >>> db = Database.connect('sqlite://')
    >>> rows = (
    ...     db.select(users.c.id, users.c.name)
    ...     .from_(users)
    ...     .where(and_(gt(users.c.id, 10), eq(users.c.active, True)))
    ...     .order_by(users.c.name)
    ...     .fetch_all()
    ... )
"""

__version__ = "0.1.0"
__all__ = [
    # Conditions
    'Condition', 'eq', 'ne', 'gt', 'gte', 'lt', 'lte', 'like', 'in_', 'not_in',
    'is_null', 'is_not_null', 'between', 'not_', 'and_', 'or_',
    # Builders
    'SelectQuery', 'Join', 'JoinKind', 'InsertQuery', 'UpdateQuery', 'DeleteQuery',
    'QueryBuilder',
    # Execution
    'Executor', 'SQLAlchemyExecutor', 'StatementResult', 'Database', 'ParameterSink'
]

from .conditions import (
    Condition,
    and_,
    between,
    eq,
    gt,
    gte,
    in_,
    is_not_null,
    is_null,
    like,
    lt,
    lte,
    ne,
    not_,
    not_in,
    or_,
)
from .database import Database
from .dml import DeleteQuery, InsertQuery, UpdateQuery
from .executor import Executor, SQLAlchemyExecutor, StatementResult
from .params import ParameterSink
from .query_builder import QueryBuilder
from .select import Join, JoinKind, SelectQuery
