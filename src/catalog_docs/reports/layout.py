"""Output folder layout.

Every object gets its own directory named ``[schema].[name]`` under a
per-kind folder, holding a single ``schema.name.md`` document. The summary
links to these paths relative to the output root.
"""
from __future__ import annotations

from pathlib import PurePosixPath
from typing import Iterable

from catalog_docs.db_introspect.models import RoutineRef

TABLES_FOLDER = "Tables"
VIEWS_FOLDER = "Views"
PROCEDURES_FOLDER = "Procedures"
FUNCTIONS_FOLDER = "Functions"
SUMMARY_FILE = "summary.md"


def routine_folder(routine: RoutineRef) -> str:
    return PROCEDURES_FOLDER if routine.is_procedure else FUNCTIONS_FOLDER


def document_path(kind_folder: str, schema_name: str, object_name: str) -> PurePosixPath:
    """Path of an object's document relative to the output folder."""
    return PurePosixPath(
        kind_folder,
        f"[{schema_name}].[{object_name}]",
        f"{schema_name}.{object_name}.md",
    )


def routine_documents(routines: Iterable[RoutineRef]) -> dict[PurePosixPath, list[RoutineRef]]:
    """Group routines by the document they are written to.

    PostgreSQL overloads share a schema and name, so they share a document.
    Groups keep first-seen order; routines within a group are ordered by
    object id.
    """
    documents: dict[PurePosixPath, list[RoutineRef]] = {}
    for routine in routines:
        path = document_path(routine_folder(routine), routine.schema_name, routine.routine_name)
        documents.setdefault(path, []).append(routine)
    return {path: sorted(group, key=lambda r: r.object_id) for path, group in documents.items()}
