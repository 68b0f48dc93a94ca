"""
Per-object markdown reports.

Builds one document per table, view or routine. Builders are pure: the
same snapshot and timestamp always render the same text.
"""
from __future__ import annotations

from datetime import datetime
from itertools import groupby
from typing import Iterable, Sequence

from catalog_docs.db_introspect.models import (
    CheckConstraintInfo,
    ColumnInfo,
    ForeignKeyPart,
    KeyPart,
    RoutineRef,
    TableDetails,
    ViewRef,
)
from catalog_docs.db_introspect.type_renderer import render_type
from catalog_docs.reports.markdown import MarkdownWriter, code, escape_cell, format_timestamp

CHECK_MARK = "✓"
NONE_MARKER = "*None*"

COLUMN_TABLE_HEADER = "| # | Column Name | Data Type | Nullable | Identity | Default | Computed |"
COLUMN_TABLE_RULE = "|---|-------------|-----------|----------|----------|---------|----------|"


def build_table_report(details: TableDetails, generated_at: datetime, dialect: str = "sqlserver") -> str:
    """Render the markdown document for a table.

    Args:
        details: Columns, keys and constraints of the table
        generated_at: Timestamp printed in the document header
        dialect: Dialect used to render column types

    Returns:
        Markdown text
    """
    table = details.table
    md = MarkdownWriter()
    md.heading(1, f"{table.schema_name}.{table.table_name}")
    md.field("Generated", format_timestamp(generated_at))

    md.heading(2, "Columns")
    md.line(COLUMN_TABLE_HEADER)
    md.line(COLUMN_TABLE_RULE)
    for column in sorted(details.columns, key=lambda c: c.column_id):
        md.line(_column_row(column, dialect))
    md.line()

    md.heading(2, "Primary Key")
    _key_section(md, details.primary_key)

    md.line()
    md.heading(2, "Unique Constraints")
    _key_section(md, details.unique_constraints)

    md.line()
    md.heading(2, "Foreign Keys")
    _foreign_key_section(md, details.foreign_keys)

    md.line()
    md.heading(2, "Check Constraints")
    _check_section(md, details.check_constraints)

    return md.render()


def build_view_report(view: ViewRef, generated_at: datetime) -> str:
    """Render the markdown document for a view."""
    return _definition_report(view.schema_name, view.view_name, "View", [view.definition], generated_at)


def build_routine_report(routine: RoutineRef | Sequence[RoutineRef], generated_at: datetime) -> str:
    """Render the markdown document for a stored procedure or function.

    Overloads sharing a schema and name are passed together and rendered
    into one document, one definition block per overload in object id order.
    """
    if isinstance(routine, RoutineRef):
        overloads = [routine]
    else:
        overloads = sorted(routine, key=lambda r: r.object_id)
    if not overloads:
        raise ValueError("At least one routine is required")

    first = overloads[0]
    labels = list(dict.fromkeys(r.type_label for r in overloads))
    return _definition_report(
        first.schema_name,
        first.routine_name,
        ", ".join(labels),
        [r.definition for r in overloads],
        generated_at,
    )


def _definition_report(
    schema_name: str,
    object_name: str,
    type_label: str,
    definitions: Sequence[str | None],
    generated_at: datetime,
) -> str:
    md = MarkdownWriter()
    md.heading(1, f"{schema_name}.{object_name}")
    md.field("Type", type_label)
    md.field("Generated", format_timestamp(generated_at))
    md.heading(2, "Definition")
    for i, definition in enumerate(definitions):
        if i:
            md.line()
        md.line("```sql")
        md.line((definition or "").strip())
        md.line("```")
    return md.render()


def _column_row(column: ColumnInfo, dialect: str) -> str:
    nullable = CHECK_MARK if column.is_nullable else ""
    identity = CHECK_MARK if column.is_identity else ""
    computed = column.computed_definition if column.is_computed else ""
    cells = [
        str(column.column_id),
        code(column.column_name),
        code(render_type(column, dialect)),
        nullable,
        identity,
        escape_cell(column.default_definition),
        escape_cell(computed),
    ]
    return "| " + " | ".join(cells) + " |"


def _key_section(md: MarkdownWriter, parts: Iterable[KeyPart]) -> None:
    ordered = sorted(parts, key=lambda p: (p.constraint_name, p.key_ordinal))
    if not ordered:
        md.line(NONE_MARKER)
        return

    for name, group in groupby(ordered, key=lambda p: p.constraint_name):
        columns = ", ".join(code(p.column_name) for p in group)
        md.line(f"- **{name}**: {columns}")


def _foreign_key_section(md: MarkdownWriter, parts: Iterable[ForeignKeyPart]) -> None:
    ordered = sorted(parts, key=lambda p: (p.constraint_name, p.ordinal))
    if not ordered:
        md.line(NONE_MARKER)
        return

    for name, group in groupby(ordered, key=lambda p: p.constraint_name):
        group = list(group)
        source_columns = ", ".join(code(p.parent_column) for p in group)
        ref_table = code(f"{group[0].ref_schema}.{group[0].ref_table}")
        ref_columns = ", ".join(code(p.ref_column) for p in group)
        md.line(f"- **{name}**: ({source_columns}) → {ref_table} ({ref_columns})")


def _check_section(md: MarkdownWriter, checks: Iterable[CheckConstraintInfo]) -> None:
    ordered = sorted(checks, key=lambda c: c.constraint_name)
    if not ordered:
        md.line(NONE_MARKER)
        return

    for check in ordered:
        md.line(f"- **{check.constraint_name}**: {code(check.definition)}")
