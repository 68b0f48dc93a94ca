"""
Documentation generator.

Runs one sequential pass over the catalog: prepare the output folder, read
tables, views and routines, render each into its own document, then write
the summary index. Any query failure aborts the run.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Sequence, TypeVar

from catalog_docs.config import DocsConfig
from catalog_docs.db_introspect import CatalogReader, create_catalog_reader
from catalog_docs.db_introspect.models import RoutineRef, TableRef, ViewRef
from catalog_docs.reports.layout import (
    SUMMARY_FILE,
    TABLES_FOLDER,
    VIEWS_FOLDER,
    document_path,
    routine_documents,
)
from catalog_docs.reports.object_reports import (
    build_routine_report,
    build_table_report,
    build_view_report,
)
from catalog_docs.reports.summary import build_summary
from catalog_docs.reports.writer import prepare_output_folder, write_document

logger = logging.getLogger(__name__)

T = TypeVar("T", TableRef, ViewRef, RoutineRef)


@dataclass
class GenerationResult:
    """Outcome of a documentation run."""
    output_folder: Path
    generated_at: datetime
    tables: int = 0
    views: int = 0
    procedures: int = 0
    functions: int = 0
    written: list[Path] = field(default_factory=list)
    summary_path: Path | None = None


async def generate_documentation(
    config: DocsConfig,
    reader: CatalogReader | None = None,
    now: datetime | None = None,
) -> GenerationResult:
    """Generate documentation for every user object in the catalog.

    Args:
        config: Run configuration
        reader: Catalog reader to use instead of opening one from the config;
            it is entered as a context manager either way
        now: Timestamp stamped on every document (default: current local time)

    Returns:
        GenerationResult with counts and written paths
    """
    generated_at = now or datetime.now().astimezone()
    dialect = reader.dialect if reader is not None else config.resolved_dialect()

    logger.debug(f"Configuration: {config.log_redacted()}")

    output_folder = prepare_output_folder(config.output_folder, clean=config.clean_output)
    result = GenerationResult(output_folder=output_folder, generated_at=generated_at)

    if reader is None:
        reader = create_catalog_reader(config.connection_string, dialect)

    async with reader:
        tables = _filter_schemas(await reader.list_tables(), config.schemas)
        logger.debug(f"Found {len(tables)} tables")
        for table in tables:
            details = await reader.get_table_details(table)
            content = build_table_report(details, generated_at, dialect)
            path = document_path(TABLES_FOLDER, table.schema_name, table.table_name)
            result.written.append(write_document(output_folder, path, content))

        views = _filter_schemas(await reader.list_views(), config.schemas)
        logger.debug(f"Found {len(views)} views")
        for view in views:
            content = build_view_report(view, generated_at)
            path = document_path(VIEWS_FOLDER, view.schema_name, view.view_name)
            result.written.append(write_document(output_folder, path, content))

        routines = _filter_schemas(await reader.list_routines(), config.schemas)
        logger.debug(f"Found {len(routines)} routines")
        for path, overloads in routine_documents(routines).items():
            content = build_routine_report(overloads, generated_at)
            result.written.append(write_document(output_folder, path, content))

    summary = build_summary(tables, views, routines, generated_at)
    result.summary_path = write_document(output_folder, SUMMARY_FILE, summary)

    result.tables = len(tables)
    result.views = len(views)
    result.procedures = sum(1 for r in routines if r.is_procedure)
    result.functions = len(routines) - result.procedures
    return result


def _filter_schemas(objects: Sequence[T], schemas: Sequence[str]) -> list[T]:
    if not schemas:
        return list(objects)
    wanted = set(schemas)
    return [o for o in objects if o.schema_name in wanted]
