"""
Markdown documentation rendering.

Builds per-object documents and the summary index, and writes them into
the output folder layout.
"""

from catalog_docs.reports.object_reports import (
    build_routine_report,
    build_table_report,
    build_view_report,
)
from catalog_docs.reports.summary import build_summary
from catalog_docs.reports.generator import GenerationResult, generate_documentation

__all__ = [
    "build_routine_report",
    "build_table_report",
    "build_view_report",
    "build_summary",
    "GenerationResult",
    "generate_documentation",
]
