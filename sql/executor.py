"""
==============================================
Statement execution layer.
==============================================

The builders never talk to a database driver directly. They render SQL with
named ``:placeholders`` plus a parameter mapping and hand both to an
Executor, the protocol defined here. Any object providing these methods can
be used, which keeps the builders testable with simple fakes.

SQLAlchemyExecutor is the production implementation. It runs statements on
a SQLAlchemy Connection through ``sqlalchemy.text()``, which binds named
placeholders natively. Outside an explicit transaction every statement is
committed immediately. Driver failures are wrapped into PrepareError /
ExecuteError (the original exception is kept as ``__cause__``) and are never
retried.

Example:
    >>> from sqlalchemy import create_engine
    >>> from sql.executor import SQLAlchemyExecutor
    >>>
    >>> engine = create_engine('sqlite://')
    >>> executor = SQLAlchemyExecutor(engine.connect())
    >>> stmt = executor.prepare('SELECT :a + :b AS total')
    >>> executor.execute(stmt, {'a': 1, 'b': 2}).rows
    [{'total': 3}]
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union, runtime_checkable

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import ExecuteError, ExecutorError, PrepareError

logger = logging.getLogger(__name__)

Identity = Union[int, str]


@dataclass
class StatementResult:
    """Outcome of one executed statement.

    Attributes:
        rows: Result rows as string-keyed records, in column order
        rowcount: Rows returned (queries) or affected (DML)
        last_insert_id: Identity generated by the statement, if any
    """

    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0
    last_insert_id: Optional[Identity] = None

    def first(self) -> Optional[Dict[str, Any]]:
        """First row, or None for an empty result."""
        return self.rows[0] if self.rows else None


@runtime_checkable
class Executor(Protocol):
    """Database access capability consumed by every builder."""

    def prepare(self, sql: str) -> Any:
        """Prepare SQL text containing named ``:placeholders``.

        Raises:
            PrepareError: If the statement cannot be prepared
        """
        ...

    def execute(self, statement: Any, parameters: Mapping[str, Any]) -> StatementResult:
        """Execute a prepared statement with its bound parameters.

        Raises:
            ExecuteError: If the database rejects the statement
        """
        ...

    def last_insert_identity(self) -> Optional[Identity]:
        """Identity generated by the most recent INSERT."""
        ...

    def begin_transaction(self) -> bool:
        ...

    def commit(self) -> bool:
        ...

    def rollback(self) -> bool:
        ...

    def in_transaction(self) -> bool:
        ...


def run_statement(
    executor: Optional[Executor],
    sql: str,
    params: Mapping[str, Any]
) -> StatementResult:
    """Prepare and execute one rendered statement.

    Args:
        executor: Executor bound to the builder
        sql: Rendered SQL text
        params: Placeholder name to value mapping

    Returns:
        StatementResult from the executor

    Raises:
        ExecutorError: If the builder has no executor
        PrepareError / ExecuteError: Propagated unchanged from the executor
    """
    if executor is None:
        raise ExecutorError(
            "No executor is bound to this query; use to_sql() to render without executing"
        )
    logger.debug(f"SQL: {sql}")
    logger.debug(f"Parameters: {dict(params)!r}")
    statement = executor.prepare(sql)
    return executor.execute(statement, params)


class SQLAlchemyExecutor:
    """Executor backed by a SQLAlchemy Connection.

    Attributes:
        connection: Open SQLAlchemy Connection used for every statement

    Example:
        >>> executor = SQLAlchemyExecutor(engine.connect())
        >>> executor.begin_transaction()
        True
        >>> executor.execute(executor.prepare('DELETE FROM users'), {}).rowcount
        3
        >>> executor.rollback()
        True
    """

    def __init__(self, connection: Connection):
        """Wrap an open connection.

        Args:
            connection: SQLAlchemy Connection; ownership stays with the caller
                until close() is called
        """
        self.connection = connection
        self._transaction = None
        self._last_insert_id: Optional[Identity] = None

    def prepare(self, sql: str):
        """Wrap SQL text into a TextClause with named bind parameters."""
        try:
            return text(sql)
        except SQLAlchemyError as e:
            logger.error(f"Failed to prepare statement: {e}")
            raise PrepareError(f"Failed to prepare statement: {e}") from e

    def execute(self, statement, parameters: Mapping[str, Any]) -> StatementResult:
        """Execute a prepared statement.

        Rows are materialized before returning. Outside an explicit
        transaction the statement is committed (or rolled back on failure)
        immediately.

        Raises:
            ExecuteError: If the driver reports an error
        """
        try:
            result = self.connection.execute(statement, dict(parameters))

            if result.returns_rows:
                rows = [dict(row._mapping) for row in result]
                outcome = StatementResult(rows=rows, rowcount=len(rows))
            else:
                outcome = StatementResult(
                    rowcount=result.rowcount,
                    last_insert_id=self._read_lastrowid(result)
                )

            if self._transaction is None:
                self.connection.commit()

        except SQLAlchemyError as e:
            if self._transaction is None and self.connection.in_transaction():
                self.connection.rollback()
            logger.error(f"Statement failed: {e}")
            raise ExecuteError(f"Failed to execute statement: {e}") from e

        if outcome.last_insert_id is not None:
            self._last_insert_id = outcome.last_insert_id
        return outcome

    @staticmethod
    def _read_lastrowid(result) -> Optional[Identity]:
        try:
            lastrowid = result.lastrowid
        except SQLAlchemyError as e:
            logger.debug(f"Driver does not expose lastrowid: {e}")
            return None
        return lastrowid or None

    def last_insert_identity(self) -> Optional[Identity]:
        """Identity generated by the most recent INSERT on this connection."""
        return self._last_insert_id

    def begin_transaction(self) -> bool:
        """Open an explicit transaction.

        A handle the driver already deactivated is rolled back and replaced.

        Raises:
            ExecuteError: If a transaction is already active or begin fails
        """
        if self.in_transaction():
            raise ExecuteError("A transaction is already active")
        try:
            if self._transaction is not None:
                stale, self._transaction = self._transaction, None
                logger.debug("Discarding inactive transaction")
                stale.rollback()
            if self.connection.in_transaction():
                self.connection.commit()
            self._transaction = self.connection.begin()
        except SQLAlchemyError as e:
            logger.error(f"Failed to begin transaction: {e}")
            raise ExecuteError(f"Failed to begin transaction: {e}") from e
        logger.debug("Transaction started")
        return True

    def commit(self) -> bool:
        """Commit the active transaction.

        Raises:
            ExecuteError: If no transaction is active or the commit fails
        """
        transaction = self._take_transaction('commit')
        try:
            transaction.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed: {e}")
            raise ExecuteError(f"Commit failed: {e}") from e
        logger.debug("Transaction committed")
        return True

    def rollback(self) -> bool:
        """Roll back the active transaction.

        Raises:
            ExecuteError: If no transaction is active or the rollback fails
        """
        transaction = self._take_transaction('roll back')
        try:
            transaction.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Rollback failed: {e}")
            raise ExecuteError(f"Rollback failed: {e}") from e
        logger.debug("Transaction rolled back")
        return True

    def _take_transaction(self, action: str):
        if self._transaction is None:
            raise ExecuteError(f"Cannot {action}: no active transaction")
        transaction, self._transaction = self._transaction, None
        return transaction

    def in_transaction(self) -> bool:
        """True while an explicit transaction is open and still active."""
        return self._transaction is not None and self._transaction.is_active

    def close(self) -> None:
        """Roll back any open transaction and close the connection."""
        if self._transaction is not None:
            self.rollback()
        self.connection.close()
