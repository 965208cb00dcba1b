"""
===========================================================
Column model for typed query construction
===========================================================

A Column is an immutable, typed handle naming a table.field pair. Columns
are declared without a table and get bound to their owning table when the
Table is constructed; a bound column always reports the table that owns it.

Column identity is (table_name, name): two handles for the same field compare
equal and hash the same regardless of their metadata, which lets columns be
used directly as keys in INSERT/UPDATE value mappings.

Example:
    >>> from models.column import Column, ColumnKind
    >>>
    >>> id_col = Column('id', ColumnKind.INT, auto_increment=True, primary_key=True)
    >>> email = Column('email', 'string', max_length=320)
    >>> email.max_length
    320
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Union

from core.exceptions import InvalidArgumentError, InvalidColumnError

DEFAULT_STRING_LENGTH = 255

_IDENTIFIER = re.compile(r"\w+")


class ColumnKind(str, Enum):
    """Logical value type carried by a column."""

    INT = 'INT'
    STRING = 'STRING'
    DATETIME = 'DATETIME'
    FLOAT = 'FLOAT'
    BOOL = 'BOOL'
    JSON = 'JSON'

    @classmethod
    def coerce(cls, value: Union['ColumnKind', str]) -> 'ColumnKind':
        """Accept a ColumnKind or its case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise InvalidArgumentError(
            f"Unknown column kind {value!r}. Expected one of: "
            f"{', '.join(kind.value for kind in cls)}"
        )


@dataclass(frozen=True)
class Column:
    """Typed handle naming one field of one table.

    Attributes:
        name: Column name as it appears in SQL
        kind: Logical value type
        table_name: Owning table; None until bound by a Table
        auto_increment: Database generates the value (INT columns only)
        max_length: Maximum length for STRING columns (defaults to 255)
        nullable: Column accepts NULL
        primary_key: Column is part of the primary key
        default: Database-side default, informational only
    """

    name: str
    kind: ColumnKind = field(default=ColumnKind.STRING, compare=False)
    table_name: Optional[str] = None
    auto_increment: bool = field(default=False, compare=False)
    max_length: Optional[int] = field(default=None, compare=False)
    nullable: bool = field(default=True, compare=False)
    primary_key: bool = field(default=False, compare=False)
    default: Any = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgumentError(f"Column name must be a non-empty string, got {self.name!r}")
        if '.' in self.name:
            raise InvalidArgumentError(
                f"Column name {self.name!r} must not be table-qualified; "
                f"declare it on its Table instead"
            )
        if not _IDENTIFIER.fullmatch(self.name):
            raise InvalidArgumentError(
                f"Column name {self.name!r} must contain only letters, digits and underscores"
            )

        kind = ColumnKind.coerce(self.kind)
        object.__setattr__(self, 'kind', kind)

        if self.auto_increment and kind is not ColumnKind.INT:
            raise InvalidArgumentError(
                f"Column {self.name!r}: auto_increment requires an INT column, got {kind.value}"
            )

        if kind is ColumnKind.STRING and self.max_length is None:
            object.__setattr__(self, 'max_length', DEFAULT_STRING_LENGTH)
        if self.max_length is not None and self.max_length <= 0:
            raise InvalidArgumentError(
                f"Column {self.name!r}: max_length must be positive, got {self.max_length}"
            )

    @property
    def is_bound(self) -> bool:
        """True once the column belongs to a table."""
        return self.table_name is not None

    @property
    def full_name(self) -> str:
        """Table-qualified name used when rendering conditions and projections.

        Raises:
            InvalidColumnError: If the column was never bound to a table
        """
        if self.table_name is None:
            raise InvalidColumnError(
                f"Column {self.name!r} is not attached to a table"
            )
        return f"{self.table_name}.{self.name}"

    def bind(self, table_name: str) -> 'Column':
        """Return a copy of this column owned by table_name."""
        return replace(self, table_name=table_name)

    def __str__(self) -> str:
        return self.name
