"""Catalog snapshot types.

Flat, read-only records built from catalog rows for a single run. Readers
for every dialect produce these same shapes; grouping and ordering happen
when the documents are rendered.
"""
from __future__ import annotations

from dataclasses import dataclass, field


# Routine type codes (SQL Server type_desc vocabulary, shared by all readers)
PROCEDURE = "SQL_STORED_PROCEDURE"
SCALAR_FUNCTION = "SQL_SCALAR_FUNCTION"
INLINE_TABLE_FUNCTION = "SQL_INLINE_TABLE_VALUED_FUNCTION"
TABLE_FUNCTION = "SQL_TABLE_VALUED_FUNCTION"

ROUTINE_TYPE_LABELS = {
    PROCEDURE: "Stored Procedure",
    SCALAR_FUNCTION: "Scalar Function",
    INLINE_TABLE_FUNCTION: "Inline Table-Valued Function",
    TABLE_FUNCTION: "Table-Valued Function",
}


@dataclass(frozen=True)
class TableRef:
    """A user table."""
    object_id: int
    schema_name: str
    table_name: str

    @property
    def name(self) -> str:
        return self.table_name


@dataclass(frozen=True)
class ViewRef:
    """A user view and its definition text."""
    object_id: int
    schema_name: str
    view_name: str
    definition: str

    @property
    def name(self) -> str:
        return self.view_name


@dataclass(frozen=True)
class RoutineRef:
    """A stored procedure or function and its definition text."""
    object_id: int
    schema_name: str
    routine_name: str
    routine_type: str  # one of the *_FUNCTION / PROCEDURE codes above
    definition: str

    @property
    def name(self) -> str:
        return self.routine_name

    @property
    def is_procedure(self) -> bool:
        return self.routine_type == PROCEDURE

    @property
    def type_label(self) -> str:
        return routine_type_label(self.routine_type)


@dataclass(frozen=True)
class ColumnInfo:
    """One column of a table."""
    column_id: int
    column_name: str
    type_name: str
    max_length: int
    precision: int
    scale: int
    is_nullable: bool
    is_identity: bool
    default_definition: str | None
    is_computed: bool
    computed_definition: str | None


@dataclass(frozen=True)
class KeyPart:
    """One column of a primary key or unique constraint."""
    constraint_name: str
    key_ordinal: int
    column_name: str


@dataclass(frozen=True)
class ForeignKeyPart:
    """One column pair of a foreign key."""
    constraint_name: str
    parent_schema: str
    parent_table: str
    parent_column: str
    ref_schema: str
    ref_table: str
    ref_column: str
    ordinal: int


@dataclass(frozen=True)
class CheckConstraintInfo:
    """A check constraint; column_name is set for column-level checks only."""
    constraint_name: str
    column_name: str | None
    definition: str


@dataclass(frozen=True)
class TableDetails:
    """Everything the table report needs about one table."""
    table: TableRef
    columns: tuple[ColumnInfo, ...] = field(default_factory=tuple)
    primary_key: tuple[KeyPart, ...] = field(default_factory=tuple)
    unique_constraints: tuple[KeyPart, ...] = field(default_factory=tuple)
    foreign_keys: tuple[ForeignKeyPart, ...] = field(default_factory=tuple)
    check_constraints: tuple[CheckConstraintInfo, ...] = field(default_factory=tuple)


def routine_type_label(routine_type: str) -> str:
    """Display label for a routine type code; unknown codes pass through."""
    return ROUTINE_TYPE_LABELS.get(routine_type, routine_type)
