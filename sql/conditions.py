"""
=====================================
Condition expression tree.
=====================================

Conditions are immutable nodes describing a WHERE / ON predicate. Rendering
walks the tree and writes every literal into a shared ParameterSink, so the
SQL never contains an interpolated value and placeholder names stay unique
across the whole statement (join conditions and the WHERE clause of one
SELECT all render into the same sink).

Node variants:
- Comparisons: Eq, Ne, Gt, Gte, Lt, Lte, Like -> ``<table>.<col> <op> :param_N``
  (a Column operand renders as ``<table>.<col> <op> <other>.<col>``, which
  is how join keys are expressed)
- Membership: In, NotIn -> ``<table>.<col> IN (:param_N, ...)``
- Null checks: IsNull, IsNotNull (no parameters)
- Range: Between -> ``<table>.<col> BETWEEN :param_N AND :param_N+1``
- Composites: Not -> ``NOT (<child>)``, And / Or -> ``(<left> OP <right>)``

Rendering never mutates a node; only the sink accumulates. Rendering the
same tree into two fresh sinks yields identical SQL and identical
parameter values.

Usage:
    from sql.conditions import and_, between, eq, in_, like

    cond = and_(like(users.c.name, '%john%'), in_(users.c.status, ['active', 'trial']))
    cond = eq(users.c.active, True) & ~eq(users.c.role, 'banned')

    params = ParameterSink()
    sql = cond.render(params)
"""

from dataclasses import dataclass
from typing import Any, Iterable, Tuple

from core.exceptions import (
    EmptyOperandListError,
    InvalidArgumentError,
    InvalidColumnError,
    InvalidRangeError,
)
from models.column import Column
from sql.params import ParameterSink


def require_column(column: Any) -> None:
    if not isinstance(column, Column):
        raise InvalidArgumentError(
            f"Conditions expect a Column, got {type(column).__name__}"
        )
    if not column.is_bound:
        raise InvalidColumnError(f"Column {column.name!r} is not attached to a table")


def require_condition(condition: Any) -> None:
    if not isinstance(condition, Condition):
        raise InvalidArgumentError(
            f"Expected a Condition, got {type(condition).__name__}"
        )


class Condition:
    """Base class of every condition node.

    Supports ``&`` (AND), ``|`` (OR) and ``~`` (NOT) for composition.
    """

    __slots__ = ()

    def render(self, params: ParameterSink) -> str:
        """Render this node to SQL, binding its literals into params."""
        raise NotImplementedError

    def operands(self) -> Tuple[Any, ...]:
        """Literal values of this subtree in render order."""
        raise NotImplementedError

    def __and__(self, other):
        if not isinstance(other, Condition):
            return NotImplemented
        return And(self, other)

    def __or__(self, other):
        if not isinstance(other, Condition):
            return NotImplemented
        return Or(self, other)

    def __invert__(self):
        return Not(self)


@dataclass(frozen=True)
class _Comparison(Condition):
    column: Column
    value: Any

    operator = ''

    def __post_init__(self):
        require_column(self.column)
        if isinstance(self.value, Column):
            require_column(self.value)

    def render(self, params: ParameterSink) -> str:
        # Column operands (join keys) render as references, not parameters
        if isinstance(self.value, Column):
            return f"{self.column.full_name} {self.operator} {self.value.full_name}"
        placeholder = params.bind(self.value)
        return f"{self.column.full_name} {self.operator} :{placeholder}"

    def operands(self) -> Tuple[Any, ...]:
        if isinstance(self.value, Column):
            return ()
        return (self.value,)


class Eq(_Comparison):
    operator = '='


class Ne(_Comparison):
    operator = '!='


class Gt(_Comparison):
    operator = '>'


class Gte(_Comparison):
    operator = '>='


class Lt(_Comparison):
    operator = '<'


class Lte(_Comparison):
    operator = '<='


class Like(_Comparison):
    operator = 'LIKE'

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.value, str):
            raise InvalidArgumentError(
                f"LIKE pattern must be a string, got {type(self.value).__name__}"
            )


@dataclass(frozen=True)
class In(Condition):
    column: Column
    values: Tuple[Any, ...]

    operator = 'IN'

    def __post_init__(self):
        require_column(self.column)
        if isinstance(self.values, (str, bytes)) or not isinstance(self.values, Iterable):
            raise InvalidArgumentError(
                f"{self.operator} expects a collection of values, got {type(self.values).__name__}"
            )
        values = tuple(self.values)
        if not values:
            raise EmptyOperandListError(
                f"{self.operator} on {self.column.full_name} requires at least one value"
            )
        object.__setattr__(self, 'values', values)

    def render(self, params: ParameterSink) -> str:
        placeholders = ', '.join(f":{params.bind(value)}" for value in self.values)
        return f"{self.column.full_name} {self.operator} ({placeholders})"

    def operands(self) -> Tuple[Any, ...]:
        return self.values


class NotIn(In):
    operator = 'NOT IN'


@dataclass(frozen=True)
class IsNull(Condition):
    column: Column

    operator = 'IS NULL'

    def __post_init__(self):
        require_column(self.column)

    def render(self, params: ParameterSink) -> str:
        return f"{self.column.full_name} {self.operator}"

    def operands(self) -> Tuple[Any, ...]:
        return ()


class IsNotNull(IsNull):
    operator = 'IS NOT NULL'


@dataclass(frozen=True)
class Between(Condition):
    """Inclusive range check; an inverted range is rejected, never reordered."""

    column: Column
    low: Any
    high: Any

    def __post_init__(self):
        require_column(self.column)
        try:
            inverted = self.low > self.high
        except TypeError:
            raise InvalidArgumentError(
                f"BETWEEN bounds {self.low!r} and {self.high!r} are not comparable"
            ) from None
        if inverted:
            raise InvalidRangeError(
                f"BETWEEN on {self.column.full_name}: lower bound {self.low!r} "
                f"is greater than upper bound {self.high!r}"
            )

    def render(self, params: ParameterSink) -> str:
        low = params.bind(self.low)
        high = params.bind(self.high)
        return f"{self.column.full_name} BETWEEN :{low} AND :{high}"

    def operands(self) -> Tuple[Any, ...]:
        return (self.low, self.high)


@dataclass(frozen=True)
class Not(Condition):
    condition: Condition

    def __post_init__(self):
        require_condition(self.condition)

    def render(self, params: ParameterSink) -> str:
        return f"NOT ({self.condition.render(params)})"

    def operands(self) -> Tuple[Any, ...]:
        return self.condition.operands()


@dataclass(frozen=True)
class And(Condition):
    left: Condition
    right: Condition

    operator = 'AND'

    def __post_init__(self):
        require_condition(self.left)
        require_condition(self.right)

    def render(self, params: ParameterSink) -> str:
        # Left renders first so its placeholders get the lower indices
        left = self.left.render(params)
        right = self.right.render(params)
        return f"({left} {self.operator} {right})"

    def operands(self) -> Tuple[Any, ...]:
        return self.left.operands() + self.right.operands()


class Or(And):
    operator = 'OR'


# ============================
# Helper constructors
# ============================

def eq(column: Column, value: Any) -> Eq:
    """``column = value``"""
    return Eq(column, value)


def ne(column: Column, value: Any) -> Ne:
    """``column != value``"""
    return Ne(column, value)


def gt(column: Column, value: Any) -> Gt:
    """``column > value``"""
    return Gt(column, value)


def gte(column: Column, value: Any) -> Gte:
    """``column >= value``"""
    return Gte(column, value)


def lt(column: Column, value: Any) -> Lt:
    """``column < value``"""
    return Lt(column, value)


def lte(column: Column, value: Any) -> Lte:
    """``column <= value``"""
    return Lte(column, value)


def like(column: Column, pattern: str) -> Like:
    """``column LIKE pattern``"""
    return Like(column, pattern)


def in_(column: Column, values: Iterable[Any]) -> In:
    """``column IN (...)``; raises EmptyOperandListError for no values."""
    return In(column, values)


def not_in(column: Column, values: Iterable[Any]) -> NotIn:
    """``column NOT IN (...)``; raises EmptyOperandListError for no values."""
    return NotIn(column, values)


def is_null(column: Column) -> IsNull:
    return IsNull(column)


def is_not_null(column: Column) -> IsNotNull:
    return IsNotNull(column)


def between(column: Column, low: Any, high: Any) -> Between:
    """``column BETWEEN low AND high``; raises InvalidRangeError if low > high."""
    return Between(column, low, high)


def not_(condition: Condition) -> Not:
    return Not(condition)


def _fold(node_type, conditions: Tuple[Condition, ...]) -> Condition:
    if not conditions:
        raise InvalidArgumentError(f"{node_type.operator} requires at least one condition")
    for condition in conditions:
        require_condition(condition)
    result = conditions[0]
    for condition in conditions[1:]:
        result = node_type(result, condition)
    return result


def and_(*conditions: Condition) -> Condition:
    """AND two or more conditions, folding left: ``and_(a, b, c)`` is ``((a AND b) AND c)``."""
    return _fold(And, conditions)


def or_(*conditions: Condition) -> Condition:
    """OR two or more conditions, folding left."""
    return _fold(Or, conditions)
