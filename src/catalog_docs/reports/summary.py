"""Summary index document.

Lists every documented object grouped by kind, then by schema, with links
to the per-object documents.
"""
from __future__ import annotations

from datetime import datetime
from itertools import groupby
from typing import Callable, Sequence, TypeVar

from catalog_docs.db_introspect.models import RoutineRef, TableRef, ViewRef
from catalog_docs.reports.layout import (
    FUNCTIONS_FOLDER,
    PROCEDURES_FOLDER,
    TABLES_FOLDER,
    VIEWS_FOLDER,
    document_path,
)
from catalog_docs.reports.markdown import MarkdownWriter, format_timestamp

T = TypeVar("T", TableRef, ViewRef, RoutineRef)


def build_summary(
    tables: Sequence[TableRef],
    views: Sequence[ViewRef],
    routines: Sequence[RoutineRef],
    generated_at: datetime,
) -> str:
    """Render the summary index for one run.

    The Tables section is always present; the other kinds appear only when
    at least one object of that kind exists.

    Args:
        tables: Documented tables
        views: Documented views
        routines: Documented procedures and functions
        generated_at: Timestamp printed in the header

    Returns:
        Markdown text
    """
    procedures = [r for r in routines if r.is_procedure]
    functions = [r for r in routines if not r.is_procedure]

    md = MarkdownWriter()
    md.heading(1, "Database Schema Summary")
    md.field("Generated", format_timestamp(generated_at))

    md.heading(2, "Overview")
    md.line(f"- **Tables:** {len(tables)}")
    md.line(f"- **Views:** {len(views)}")
    md.line(f"- **Stored Procedures:** {len(procedures)}")
    md.line(f"- **Functions:** {len(functions)}")
    md.line()

    md.heading(2, "Tables")
    _object_section(md, tables, TABLES_FOLDER)

    if views:
        md.heading(2, "Views")
        _object_section(md, views, VIEWS_FOLDER)

    if procedures:
        md.heading(2, "Stored Procedures")
        _object_section(md, procedures, PROCEDURES_FOLDER)

    if functions:
        md.heading(2, "Functions")
        _object_section(md, functions, FUNCTIONS_FOLDER, suffix=_function_suffix)

    return md.render()


def _object_section(
    md: MarkdownWriter,
    objects: Sequence[T],
    kind_folder: str,
    suffix: Callable[[list[T]], str] | None = None,
) -> None:
    # Overloads share a document, so each schema-qualified name is linked once
    ordered = sorted(objects, key=lambda o: (o.schema_name, o.name, o.object_id))
    for schema_name, in_schema in groupby(ordered, key=lambda o: o.schema_name):
        md.heading(3, schema_name)
        for name, same_name in groupby(in_schema, key=lambda o: o.name):
            same_name = list(same_name)
            link = document_path(kind_folder, schema_name, name).as_posix()
            extra = suffix(same_name) if suffix else ""
            md.line(f"- [{name}]({link}){extra}")
        md.line()


def _function_suffix(overloads: list[RoutineRef]) -> str:
    labels = ", ".join(dict.fromkeys(r.type_label for r in overloads))
    if len(overloads) > 1:
        return f" - *{labels}* ({len(overloads)} overloads)"
    return f" - *{labels}*"
