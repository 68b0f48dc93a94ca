"""Render column type descriptors as human-readable type strings.

Turns a raw (type name, max length, precision, scale) tuple from the catalog
into the form a developer would write in DDL, e.g. ``decimal(10,2)``,
``nvarchar(max)`` or ``timestamp(3) with time zone``.
"""
from __future__ import annotations

from catalog_docs.db_introspect.models import ColumnInfo


# SQL Server reports byte lengths; n-types store two bytes per character
_SQLSERVER_VARIABLE_LENGTH = ("varbinary", "varchar", "nvarchar")
_SQLSERVER_FIXED_LENGTH = ("binary", "char", "nchar")
_SQLSERVER_FRACTIONAL_SECONDS = ("datetime2", "datetimeoffset", "time")

_POSTGRES_ALIASES = {
    "int2": "smallint",
    "int4": "integer",
    "int8": "bigint",
    "float4": "real",
    "float8": "double precision",
    "bool": "boolean",
    "bpchar": "char",
}

_POSTGRES_TIME_ZONE_TYPES = {
    "timestamptz": "timestamp",
    "timetz": "time",
}


def render_type(column: ColumnInfo, dialect: str = "sqlserver") -> str:
    """Render a column's type for the given dialect.

    Args:
        column: Column whose type to render
        dialect: "sqlserver" or "postgres"

    Returns:
        Rendered type string
    """
    if dialect == "postgres":
        return render_postgres_type(column.type_name, column.max_length, column.precision, column.scale)
    if dialect == "sqlserver":
        return render_sqlserver_type(column.type_name, column.max_length, column.precision, column.scale)
    raise ValueError(f"Unknown dialect: {dialect}")


def render_sqlserver_type(type_name: str, max_length: int, precision: int, scale: int) -> str:
    """Render a SQL Server type from sys.columns / sys.types values."""
    t = type_name.lower()

    if t in ("decimal", "numeric"):
        return f"{t}({precision},{scale})"

    if t in _SQLSERVER_FRACTIONAL_SECONDS:
        return f"{t}({scale})" if scale > 0 else t

    if t == "float":
        return "float" if precision in (53, 0) else f"float({precision})"

    if t in _SQLSERVER_VARIABLE_LENGTH:
        length = max_length
        if t.startswith("n") and length >= 0:
            length = length // 2
        return f"{t}({'max' if length == -1 else length})"

    if t in _SQLSERVER_FIXED_LENGTH:
        length = max_length // 2 if t.startswith("n") else max_length
        return f"{t}({length})"

    return t


def render_postgres_type(type_name: str, max_length: int, precision: int, scale: int) -> str:
    """Render a PostgreSQL type from pg_type.typname and a decoded typmod."""
    t = type_name.lower()

    if t.startswith("_"):
        return render_postgres_type(t[1:], max_length, precision, scale) + "[]"

    if t in ("varchar", "bpchar", "bit", "varbit"):
        name = _POSTGRES_ALIASES.get(t, t)
        return f"{name}({max_length})" if max_length > 0 else name

    if t == "numeric":
        return f"numeric({precision},{scale})" if precision > 0 else "numeric"

    if t in _POSTGRES_TIME_ZONE_TYPES:
        base = _POSTGRES_TIME_ZONE_TYPES[t]
        if precision >= 0:
            base = f"{base}({precision})"
        return f"{base} with time zone"

    if t in ("timestamp", "time", "interval"):
        return f"{t}({precision})" if precision >= 0 else t

    return _POSTGRES_ALIASES.get(t, t)
