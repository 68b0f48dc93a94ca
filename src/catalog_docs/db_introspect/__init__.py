"""
Database catalog introspection.

Provides catalog readers for SQL Server and PostgreSQL, the immutable
snapshot types they produce, and column type rendering.
"""

from catalog_docs.db_introspect.base import CatalogReader
from catalog_docs.db_introspect.models import (
    ColumnInfo,
    CheckConstraintInfo,
    ForeignKeyPart,
    KeyPart,
    RoutineRef,
    TableDetails,
    TableRef,
    ViewRef,
    routine_type_label,
)
from catalog_docs.db_introspect.type_renderer import render_type

DIALECTS = ("sqlserver", "postgres")


def infer_dialect(connection_string: str) -> str:
    """Guess the dialect from a connection string.

    URL-style postgres DSNs select "postgres"; anything else is assumed to
    be a SQL Server connection string.
    """
    lowered = connection_string.strip().lower()
    if lowered.startswith(("postgres://", "postgresql://")):
        return "postgres"
    return "sqlserver"


def create_catalog_reader(connection_string: str, dialect: str | None = None) -> CatalogReader:
    """Create an unopened catalog reader for a dialect.

    Args:
        connection_string: DSN or ODBC/ADO.NET connection string
        dialect: "sqlserver", "postgres", or None to infer from the string

    Returns:
        CatalogReader; use it as an async context manager
    """
    dialect = dialect or infer_dialect(connection_string)

    # Drivers are imported lazily so only the selected one must be installed
    if dialect == "sqlserver":
        from catalog_docs.db_introspect.sqlserver_reader import SqlServerCatalogReader
        return SqlServerCatalogReader(connection_string)
    if dialect == "postgres":
        from catalog_docs.db_introspect.postgres_reader import PostgresCatalogReader
        return PostgresCatalogReader(connection_string)

    raise ValueError(f"Unknown dialect: {dialect} (expected one of {', '.join(DIALECTS)})")


__all__ = [
    "CatalogReader",
    "ColumnInfo",
    "CheckConstraintInfo",
    "ForeignKeyPart",
    "KeyPart",
    "RoutineRef",
    "TableDetails",
    "TableRef",
    "ViewRef",
    "DIALECTS",
    "create_catalog_reader",
    "infer_dialect",
    "render_type",
    "routine_type_label",
]
