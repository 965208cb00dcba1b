"""
===========================================
Exception hierarchy for the query builder.
===========================================

Every failure raised by the query builder derives from QueryBuilderError so
callers can catch the whole family in one place, or pick the precise kind.

Argument-shape problems (bad directions, negative limits, empty IN lists,
inverted BETWEEN ranges, read-only targets) are raised as soon as the
offending call is made. Missing-state problems (no target table, no values)
are raised when the statement is rendered.

Executor failures are wrapped into PrepareError / ExecuteError at the
executor boundary and propagate unchanged through the builders. Nothing in
this package retries a failed statement.

Example:
    >>> from core.exceptions import QueryBuilderError, ReadOnlyTargetError
    >>>
    >>> try:
    ...     db.insert().into(active_users_view)
    ... except ReadOnlyTargetError as e:
    ...     logger.error(f"Refusing write: {e}")
"""


class QueryBuilderError(Exception):
    """Base class for all query builder errors."""
    pass


class MissingTableError(QueryBuilderError):
    """Raised when a statement is rendered before its target table is set."""
    pass


class MissingValuesError(QueryBuilderError):
    """Raised when an INSERT or UPDATE is rendered with no values."""
    pass


class ReadOnlyTargetError(QueryBuilderError):
    """Raised when a write is attempted against a non-writable table or view."""
    pass


class InvalidColumnError(QueryBuilderError):
    """Raised when a referenced column does not exist in the active schema."""
    pass


class AmbiguousColumnError(InvalidColumnError):
    """Raised when an unqualified column name is used while joins are active."""
    pass


class InvalidArgumentError(QueryBuilderError, ValueError):
    """Raised for malformed builder arguments.

    Covers negative limit/offset, unknown sort directions or operators,
    malformed set() calls and unsupported key types in value mappings.
    """
    pass


class EmptyOperandListError(InvalidArgumentError):
    """Raised when IN / NOT IN is built with zero values."""
    pass


class InvalidRangeError(InvalidArgumentError):
    """Raised when BETWEEN is built with a lower bound above the upper bound."""
    pass


class ExecutorError(QueryBuilderError):
    """Base class for failures reported by the executor layer."""
    pass


class PrepareError(ExecutorError):
    """Raised when the executor cannot prepare a statement."""
    pass


class ExecuteError(ExecutorError):
    """Raised when the executor fails to run a prepared statement.

    Also raised for transaction misuse, e.g. commit() with no open transaction.
    """
    pass
