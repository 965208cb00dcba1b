"""
=======================================================
Comprehensive pytest suite for sql/conditions.py
=======================================================

Sections:
---------
1. Unit tests - Rendering of every node variant
2. Composition tests - And/Or/Not nesting and operator sugar
3. Property tests - Render purity and placeholder numbering
4. Edge case tests - Construction-time validation
5. ParameterSink tests

Available markers:
------------------
unit, edge_case

How to Execute:
---------------
All tests:          pytest tests/tests_sql/test_conditions.py -v
With coverage:      pytest tests/tests_sql/test_conditions.py --cov=sql.conditions --cov=sql.params
"""

import re
from dataclasses import FrozenInstanceError

import pytest

from core.exceptions import (
    EmptyOperandListError,
    InvalidArgumentError,
    InvalidColumnError,
    InvalidRangeError,
)
from models.column import Column
from sql.conditions import (
    And,
    Between,
    Eq,
    Not,
    Or,
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
from sql.params import ParameterSink


def render(condition):
    """Render into a fresh sink and return (sql, params)."""
    sink = ParameterSink()
    return condition.render(sink), sink.as_dict()


def normalize(sql):
    return re.sub(r'param_\d+', 'param_N', sql)


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
@pytest.mark.parametrize("factory, operator", [
    (eq, '='),
    (ne, '!='),
    (gt, '>'),
    (gte, '>='),
    (lt, '<'),
    (lte, '<='),
])
def test_comparison_rendering(users, factory, operator):
    """Comparisons render the qualified column, operator and one placeholder."""
    sql, params = render(factory(users.c.id, 5))

    assert sql == f"users.id {operator} :param_0"
    assert params == {'param_0': 5}


@pytest.mark.unit
def test_like_rendering(users):
    sql, params = render(like(users.c.name, '%john%'))

    assert sql == "users.name LIKE :param_0"
    assert params == {'param_0': '%john%'}


@pytest.mark.unit
def test_in_rendering(users):
    sql, params = render(in_(users.c.id, [1, 2, 3]))

    assert sql == "users.id IN (:param_0, :param_1, :param_2)"
    assert params == {'param_0': 1, 'param_1': 2, 'param_2': 3}


@pytest.mark.unit
def test_not_in_rendering_accepts_any_iterable(users):
    sql, params = render(not_in(users.c.id, (n for n in (7, 8))))

    assert sql == "users.id NOT IN (:param_0, :param_1)"
    assert params == {'param_0': 7, 'param_1': 8}


@pytest.mark.unit
def test_null_checks_bind_nothing(users):
    assert render(is_null(users.c.email)) == ("users.email IS NULL", {})
    assert render(is_not_null(users.c.email)) == ("users.email IS NOT NULL", {})


@pytest.mark.unit
def test_between_rendering(users):
    """BETWEEN binds low then high as two consecutive placeholders."""
    sql, params = render(between(users.c.id, 5, 10))

    assert sql == "users.id BETWEEN :param_0 AND :param_1"
    assert params == {'param_0': 5, 'param_1': 10}


@pytest.mark.unit
def test_between_accepts_equal_bounds(users):
    sql, params = render(between(users.c.id, 3, 3))

    assert params == {'param_0': 3, 'param_1': 3}


@pytest.mark.unit
def test_not_rendering(users):
    assert render(not_(eq(users.c.id, 1))) == ("NOT (users.id = :param_0)", {'param_0': 1})


@pytest.mark.unit
def test_column_operand_renders_as_reference(users, posts):
    """Comparing two columns binds no parameter."""
    condition = eq(posts.c.user_id, users.c.id)

    assert render(condition) == ("posts.user_id = users.id", {})
    assert condition.operands() == ()


@pytest.mark.unit
def test_equal_bind_value_none(users):
    """None is bound like any other literal."""
    assert render(eq(users.c.email, None)) == ("users.email = :param_0", {'param_0': None})


# =====================
# 2. COMPOSITION TESTS
# =====================

@pytest.mark.unit
def test_and_or_render_left_first(users):
    condition = or_(eq(users.c.id, 1), and_(gt(users.c.id, 10), like(users.c.name, 'a%')))
    sql, params = render(condition)

    assert sql == "(users.id = :param_0 OR (users.id > :param_1 AND users.name LIKE :param_2))"
    assert params == {'param_0': 1, 'param_1': 10, 'param_2': 'a%'}


@pytest.mark.unit
def test_and_folds_left(users):
    condition = and_(eq(users.c.id, 1), eq(users.c.name, 'a'), eq(users.c.email, 'b'))
    sql, _ = render(condition)

    assert sql == "((users.id = :param_0 AND users.name = :param_1) AND users.email = :param_2)"


@pytest.mark.unit
def test_single_condition_is_returned_unchanged(users):
    condition = eq(users.c.id, 1)

    assert and_(condition) is condition
    assert or_(condition) is condition


@pytest.mark.unit
def test_operator_sugar(users):
    a = eq(users.c.id, 1)
    b = eq(users.c.name, 'x')

    assert isinstance(a & b, And)
    assert isinstance(a | b, Or)
    assert isinstance(~a, Not)
    assert (a & b) == And(a, b)
    assert render(a & ~b)[0] == "(users.id = :param_0 AND NOT (users.name = :param_1))"


@pytest.mark.unit
def test_operator_sugar_rejects_non_conditions(users):
    with pytest.raises(TypeError):
        eq(users.c.id, 1) & 'users.id = 1'


# ===================
# 3. PROPERTY TESTS
# ===================

@pytest.mark.unit
def test_render_is_repeatable(users):
    """Rendering twice into fresh sinks yields identical output."""
    condition = and_(in_(users.c.id, [1, 2]), not_(between(users.c.id, 5, 9)))

    assert render(condition) == render(condition)


@pytest.mark.unit
def test_render_offset_only_shifts_placeholder_numbers(users):
    """A pre-filled sink shifts indices but keeps the fragment isomorphic."""
    condition = or_(eq(users.c.name, 'a'), between(users.c.id, 1, 2))
    fresh_sql, _ = render(condition)

    sink = ParameterSink()
    sink.bind('earlier')
    shifted_sql = condition.render(sink)

    assert shifted_sql == "(users.name = :param_1 OR users.id BETWEEN :param_2 AND :param_3)"
    assert normalize(shifted_sql) == normalize(fresh_sql)


@pytest.mark.unit
def test_sink_size_matches_operand_count(users):
    condition = and_(
        in_(users.c.id, [1, 2, 3]),
        or_(is_null(users.c.email), between(users.c.id, 0, 100)),
        ne(users.c.name, 'root'),
    )
    sink = ParameterSink()
    condition.render(sink)

    assert len(sink) == len(condition.operands()) == 6
    assert list(sink.values()) == list(condition.operands())


@pytest.mark.unit
def test_conditions_are_immutable(users):
    condition = eq(users.c.id, 1)

    with pytest.raises(FrozenInstanceError):
        condition.value = 2


@pytest.mark.unit
def test_helpers_build_expected_nodes(users):
    assert eq(users.c.id, 1) == Eq(users.c.id, 1)
    assert between(users.c.id, 1, 2) == Between(users.c.id, 1, 2)
    assert eq(users.c.id, 1) != ne(users.c.id, 1)


# =====================
# 4. EDGE CASE TESTS
# =====================

@pytest.mark.edge_case
def test_in_rejects_empty_list(users):
    with pytest.raises(EmptyOperandListError):
        in_(users.c.id, [])


@pytest.mark.edge_case
def test_not_in_rejects_empty_list(users):
    with pytest.raises(EmptyOperandListError):
        not_in(users.c.id, ())


@pytest.mark.edge_case
@pytest.mark.parametrize("values", ['abc', 42])
def test_in_rejects_non_collections(users, values):
    with pytest.raises(InvalidArgumentError):
        in_(users.c.id, values)


@pytest.mark.edge_case
def test_between_rejects_inverted_range(users):
    with pytest.raises(InvalidRangeError):
        between(users.c.id, 10, 5)


@pytest.mark.edge_case
def test_between_rejects_incomparable_bounds(users):
    with pytest.raises(InvalidArgumentError):
        between(users.c.id, 1, 'z')


@pytest.mark.edge_case
def test_invalid_range_is_an_invalid_argument(users):
    """Range errors can be caught as argument errors."""
    with pytest.raises(InvalidArgumentError):
        between(users.c.id, 2, 1)


@pytest.mark.edge_case
def test_like_requires_string_pattern(users):
    with pytest.raises(InvalidArgumentError, match="LIKE pattern"):
        like(users.c.name, 5)


@pytest.mark.edge_case
def test_conditions_require_column_objects():
    with pytest.raises(InvalidArgumentError):
        eq('users.id', 1)


@pytest.mark.edge_case
def test_conditions_require_bound_columns():
    with pytest.raises(InvalidColumnError):
        eq(Column('loose'), 1)


@pytest.mark.edge_case
def test_composites_require_conditions(users):
    with pytest.raises(InvalidArgumentError):
        not_('users.id = 1')
    with pytest.raises(InvalidArgumentError):
        and_(eq(users.c.id, 1), None)


@pytest.mark.edge_case
def test_and_or_require_at_least_one_condition():
    with pytest.raises(InvalidArgumentError):
        and_()
    with pytest.raises(InvalidArgumentError):
        or_()


# ========================
# 5. PARAMETER SINK TESTS
# ========================

@pytest.mark.unit
def test_sink_bind_generates_sequential_names():
    sink = ParameterSink()

    assert sink.bind('a') == 'param_0'
    assert sink.bind('b') == 'param_1'
    assert dict(sink) == {'param_0': 'a', 'param_1': 'b'}


@pytest.mark.unit
def test_sink_add_and_merge():
    sink = ParameterSink()
    sink.add('set_name', 'x')
    other = ParameterSink()
    other.bind(1)
    sink.merge(other)

    assert sink.as_dict() == {'set_name': 'x', 'param_0': 1}


@pytest.mark.edge_case
def test_sink_add_rejects_reserved_prefix():
    with pytest.raises(InvalidArgumentError, match="reserved"):
        ParameterSink().add('param_9', 1)


@pytest.mark.edge_case
def test_sink_rejects_duplicates():
    sink = ParameterSink()
    sink.add('set_a', 1)

    with pytest.raises(InvalidArgumentError, match="already bound"):
        sink.add('set_a', 2)

    other = ParameterSink()
    other.bind(1)
    sink.merge(other)
    with pytest.raises(InvalidArgumentError):
        sink.merge(other)
