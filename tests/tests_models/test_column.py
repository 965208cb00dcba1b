"""
==================================================
Comprehensive pytest suite for models/column.py
==================================================

Sections:
---------
1. Unit tests - Column construction and binding
2. Edge case tests - Invalid names, kinds and attributes

Available markers:
------------------
unit, edge_case

Test Coverage:
--------------
- ColumnKind.coerce: enum and case-insensitive name input
- Column: defaults, identity, full_name, bind, immutability

How to Execute:
---------------
All tests:          pytest tests/tests_models/test_column.py -v
By category:        pytest tests/tests_models/test_column.py -m unit
With coverage:      pytest tests/tests_models/test_column.py --cov=models.column
"""

from dataclasses import FrozenInstanceError

import pytest

from core.exceptions import InvalidArgumentError, InvalidColumnError
from models.column import DEFAULT_STRING_LENGTH, Column, ColumnKind

# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_column_kind_coerce_accepts_names_case_insensitively():
    """ColumnKind.coerce maps names in any case to the enum member."""
    assert ColumnKind.coerce('datetime') is ColumnKind.DATETIME
    assert ColumnKind.coerce(' Json ') is ColumnKind.JSON
    assert ColumnKind.coerce(ColumnKind.INT) is ColumnKind.INT


@pytest.mark.unit
def test_column_defaults():
    """A bare column is an unbound, nullable STRING with the default length."""
    column = Column('email')

    assert column.kind is ColumnKind.STRING
    assert column.table_name is None
    assert column.is_bound is False
    assert column.nullable is True
    assert column.primary_key is False
    assert column.max_length == DEFAULT_STRING_LENGTH == 255


@pytest.mark.unit
def test_column_kind_given_as_string():
    column = Column('created_at', 'datetime')

    assert column.kind is ColumnKind.DATETIME
    assert column.max_length is None


@pytest.mark.unit
def test_column_bind_returns_bound_copy():
    """bind() leaves the original untouched and keeps metadata."""
    column = Column('id', ColumnKind.INT, auto_increment=True)
    bound = column.bind('users')

    assert column.is_bound is False
    assert bound.table_name == 'users'
    assert bound.full_name == 'users.id'
    assert bound.auto_increment is True


@pytest.mark.unit
def test_column_identity_ignores_metadata():
    """Identity is (table, name): metadata does not affect equality or hashing."""
    a = Column('name', max_length=10, table_name='users')
    b = Column('name', max_length=50, nullable=False, table_name='users')
    c = Column('name', table_name='posts')

    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert {a: 1}[b] == 1


@pytest.mark.unit
def test_column_str_is_plain_name(users):
    assert str(users.c.email) == 'email'


@pytest.mark.unit
def test_column_is_immutable(users):
    with pytest.raises(FrozenInstanceError):
        users.c.name.name = 'other'


# =====================
# 2. EDGE CASE TESTS
# =====================

@pytest.mark.edge_case
def test_column_kind_coerce_rejects_unknown():
    with pytest.raises(InvalidArgumentError, match="Unknown column kind"):
        ColumnKind.coerce('blob')


@pytest.mark.edge_case
@pytest.mark.parametrize("name", ['', '   ', None, 'users.id'])
def test_column_rejects_invalid_names(name):
    """Empty, non-string and table-qualified names are rejected."""
    with pytest.raises(InvalidArgumentError):
        Column(name)


@pytest.mark.edge_case
def test_column_rejects_names_unusable_as_placeholders():
    """Names end up in :name placeholders, so only word characters are allowed."""
    for name in ('first-name', 'first name', 'price$'):
        with pytest.raises(InvalidArgumentError, match="letters, digits and underscores"):
            Column(name)


@pytest.mark.edge_case
def test_column_auto_increment_requires_int():
    with pytest.raises(InvalidArgumentError, match="auto_increment"):
        Column('code', ColumnKind.STRING, auto_increment=True)


@pytest.mark.edge_case
@pytest.mark.parametrize("length", [0, -5])
def test_column_rejects_non_positive_max_length(length):
    with pytest.raises(InvalidArgumentError, match="max_length"):
        Column('title', max_length=length)


@pytest.mark.edge_case
def test_unbound_column_has_no_full_name():
    with pytest.raises(InvalidColumnError, match="not attached"):
        Column('orphan').full_name
