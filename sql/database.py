"""
========================================
Database facade.
========================================

Database is the entry point most applications use: it owns an Executor and
hands out builders already bound to it, and passes transaction control
straight through to the executor.

Example:
    >>> from sql.conditions import eq
    >>> from sql.database import Database
    >>>
    >>> db = Database.connect('sqlite:///app.db')
    >>> with db.transaction():
    ...     user_id = db.insert().into(users).set(users.c.name, 'Ann').execute_and_get_id()
    ...     db.update().table(users).set(users.c.email, 'ann@example.com').where(
    ...         eq(users.c.id, user_id)
    ...     ).execute()
    >>> db.select(users.c.name).from_(users).fetch_all()
    [{'name': 'Ann'}]
    >>> db.close()
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Union

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import ExecuteError
from models.column import Column
from models.table import Schema, Table
from sql.dml import DeleteQuery, InsertQuery, UpdateQuery
from sql.executor import Executor, SQLAlchemyExecutor, StatementResult, run_statement
from sql.query_builder import QueryBuilder
from sql.select import SelectQuery
from utils.database_utils import create_sqlalchemy_engine

logger = logging.getLogger(__name__)


class Database:
    """Builder factory and transaction front-end over one Executor.

    Attributes:
        executor: Executor every builder is bound to
        schema: Optional Schema used by query() to resolve table names
    """

    def __init__(self, executor: Executor, schema: Optional[Schema] = None, engine: Optional[Engine] = None):
        self.executor = executor
        self.schema = schema
        self._engine = engine

    @classmethod
    def connect(cls, url: Optional[str] = None, schema: Optional[Schema] = None, echo: bool = False) -> 'Database':
        """
        Open a connection and wrap it in a SQLAlchemyExecutor.

        Args:
            url: SQLAlchemy connection URL (defaults to config)
            schema: Optional Schema registry for query()
            echo: Enable SQLAlchemy statement logging

        Returns:
            Connected Database; call close() when done

        Raises:
            ExecuteError: If the connection cannot be opened
        """
        engine = create_sqlalchemy_engine(url, echo=echo)
        try:
            connection = engine.connect()
        except SQLAlchemyError as e:
            engine.dispose()
            logger.error(f"Failed to connect: {e}")
            raise ExecuteError(f"Failed to connect: {e}") from e
        logger.info(f"Connected to {engine.url.render_as_string(hide_password=True)}")
        return cls(SQLAlchemyExecutor(connection), schema=schema, engine=engine)

    # ----------------------------
    # Builders
    # ----------------------------

    def select(self, *columns: Column) -> SelectQuery:
        return SelectQuery(self.executor).select(*columns)

    def insert(self) -> InsertQuery:
        return InsertQuery(self.executor)

    def update(self) -> UpdateQuery:
        return UpdateQuery(self.executor)

    def delete(self) -> DeleteQuery:
        return DeleteQuery(self.executor)

    def query(self, table: Union[Table, str]) -> QueryBuilder:
        """String-based builder for table, resolved through schema when a name is given."""
        return QueryBuilder(self.executor, table, self.schema)

    # ----------------------------
    # Transactions
    # ----------------------------

    def begin_transaction(self) -> bool:
        return self.executor.begin_transaction()

    def commit(self) -> bool:
        return self.executor.commit()

    def rollback(self) -> bool:
        return self.executor.rollback()

    def in_transaction(self) -> bool:
        return self.executor.in_transaction()

    @contextmanager
    def transaction(self) -> Iterator['Database']:
        """Run a block inside a transaction.

        Commits when the block finishes, rolls back and re-raises on error.
        """
        self.begin_transaction()
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        self.commit()

    # ----------------------------
    # Raw statements
    # ----------------------------

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> StatementResult:
        """Run raw SQL with named ``:placeholders``."""
        return run_statement(self.executor, sql, params or {})

    def close(self) -> None:
        """Close the executor's connection and dispose of an owned engine."""
        close = getattr(self.executor, 'close', None)
        if close is not None:
            close()
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> 'Database':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Database executor={type(self.executor).__name__}>"
