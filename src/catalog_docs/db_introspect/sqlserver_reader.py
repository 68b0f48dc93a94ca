"""Catalog reader for Microsoft SQL Server.

Reads the sys.* catalog views through pyodbc. pyodbc is blocking, so every
query runs in a worker thread via asyncio.to_thread; queries are still
issued one at a time on a single connection.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import pyodbc

from catalog_docs.db_introspect.base import CatalogReader
from catalog_docs.db_introspect.models import (
    CheckConstraintInfo,
    ColumnInfo,
    ForeignKeyPart,
    KeyPart,
    RoutineRef,
    TableRef,
    ViewRef,
)

logger = logging.getLogger(__name__)

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


TABLES_SQL = """
    SELECT t.object_id, s.name AS schema_name, t.name AS table_name
    FROM sys.tables t
    JOIN sys.schemas s ON s.schema_id = t.schema_id
    WHERE t.is_ms_shipped = 0
    ORDER BY s.name, t.name
"""

VIEWS_SQL = """
    SELECT
        v.object_id,
        s.name AS schema_name,
        v.name AS view_name,
        m.definition
    FROM sys.views v
    JOIN sys.schemas s ON s.schema_id = v.schema_id
    JOIN sys.sql_modules m ON m.object_id = v.object_id
    WHERE v.is_ms_shipped = 0
    ORDER BY s.name, v.name
"""

ROUTINES_SQL = """
    SELECT
        r.object_id,
        s.name AS schema_name,
        r.name AS routine_name,
        r.type_desc AS routine_type,
        m.definition
    FROM sys.objects r
    JOIN sys.schemas s ON s.schema_id = r.schema_id
    JOIN sys.sql_modules m ON m.object_id = r.object_id
    WHERE r.type IN ('P', 'FN', 'IF', 'TF')
      AND r.is_ms_shipped = 0
    ORDER BY r.type_desc, s.name, r.name
"""

COLUMNS_SQL = """
    SELECT
        c.column_id,
        c.name AS column_name,
        ty.name AS type_name,
        c.max_length,
        c.precision,
        c.scale,
        c.is_nullable,
        c.is_identity,
        dc.definition AS default_definition,
        c.is_computed,
        cc.definition AS computed_definition
    FROM sys.columns c
    JOIN sys.types ty ON ty.user_type_id = c.user_type_id
    LEFT JOIN sys.default_constraints dc
        ON dc.parent_object_id = c.object_id AND dc.parent_column_id = c.column_id
    LEFT JOIN sys.computed_columns cc
        ON cc.object_id = c.object_id AND cc.column_id = c.column_id
    WHERE c.object_id = ?
    ORDER BY c.column_id
"""

# kc.type is 'PK' or 'UQ'
KEY_PARTS_SQL = """
    SELECT kc.name, ic.key_ordinal, col.name
    FROM sys.key_constraints kc
    JOIN sys.index_columns ic
        ON ic.object_id = kc.parent_object_id AND ic.index_id = kc.unique_index_id
    JOIN sys.columns col
        ON col.object_id = ic.object_id AND col.column_id = ic.column_id
    WHERE kc.parent_object_id = ? AND kc.type = ?
    ORDER BY kc.name, ic.key_ordinal
"""

FOREIGN_KEYS_SQL = """
    SELECT
        fk.name,
        schP.name AS parent_schema,
        tP.name AS parent_table,
        colP.name AS parent_column,
        schR.name AS ref_schema,
        tR.name AS ref_table,
        colR.name AS ref_column,
        fkc.constraint_column_id
    FROM sys.foreign_keys fk
    JOIN sys.foreign_key_columns fkc ON fkc.constraint_object_id = fk.object_id
    JOIN sys.tables tP ON tP.object_id = fk.parent_object_id
    JOIN sys.schemas schP ON schP.schema_id = tP.schema_id
    JOIN sys.tables tR ON tR.object_id = fk.referenced_object_id
    JOIN sys.schemas schR ON schR.schema_id = tR.schema_id
    JOIN sys.columns colP
        ON colP.object_id = fk.parent_object_id AND colP.column_id = fkc.parent_column_id
    JOIN sys.columns colR
        ON colR.object_id = fk.referenced_object_id AND colR.column_id = fkc.referenced_column_id
    WHERE fk.parent_object_id = ?
    ORDER BY fk.name, fkc.constraint_column_id
"""

CHECK_CONSTRAINTS_SQL = """
    SELECT
        cc.name,
        col.name AS column_name,
        cc.definition
    FROM sys.check_constraints cc
    LEFT JOIN sys.columns col
        ON col.object_id = cc.parent_object_id AND col.column_id = cc.parent_column_id
    WHERE cc.parent_object_id = ?
    ORDER BY cc.name
"""


def build_odbc_connection_string(connection_string: str, driver: str = DEFAULT_ODBC_DRIVER) -> str:
    """Prefix an ADO.NET-style connection string with an ODBC driver.

    Connection strings that already name a driver are returned unchanged.
    """
    keys = {
        part.split("=", 1)[0].strip().lower()
        for part in connection_string.split(";")
        if "=" in part
    }
    if "driver" in keys:
        return connection_string
    return f"Driver={{{driver}}};{connection_string}"


class SqlServerCatalogReader(CatalogReader):
    """Catalog reader over SQL Server's sys.* views."""

    dialect = "sqlserver"

    def __init__(self, connection_string: str, driver: str = DEFAULT_ODBC_DRIVER):
        self.connection_string = build_odbc_connection_string(connection_string, driver)
        self.conn: pyodbc.Connection | None = None

    async def open(self) -> None:
        self.conn = await asyncio.to_thread(pyodbc.connect, self.connection_string)
        logger.debug("Connected to SQL Server")

    async def close(self) -> None:
        if self.conn is not None:
            await asyncio.to_thread(self.conn.close)
            self.conn = None

    def _fetch_sync(self, sql: str, params: tuple[Any, ...]) -> list[Any]:
        if self.conn is None:
            raise RuntimeError("Reader is not open")
        cursor = self.conn.cursor()
        try:
            cursor.execute(sql, *params)
            return cursor.fetchall()
        finally:
            cursor.close()

    async def _fetch(self, sql: str, *params: Any) -> list[Any]:
        return await asyncio.to_thread(self._fetch_sync, sql, params)

    async def server_version(self) -> str:
        rows = await self._fetch("SELECT @@VERSION")
        return rows[0][0]

    async def list_tables(self) -> list[TableRef]:
        rows = await self._fetch(TABLES_SQL)
        return [TableRef(int(r[0]), r[1], r[2]) for r in rows]

    async def list_views(self) -> list[ViewRef]:
        rows = await self._fetch(VIEWS_SQL)
        return [ViewRef(int(r[0]), r[1], r[2], r[3]) for r in rows]

    async def list_routines(self) -> list[RoutineRef]:
        rows = await self._fetch(ROUTINES_SQL)
        return [RoutineRef(int(r[0]), r[1], r[2], r[3], r[4]) for r in rows]

    async def get_columns(self, object_id: int) -> list[ColumnInfo]:
        rows = await self._fetch(COLUMNS_SQL, object_id)
        return [
            ColumnInfo(
                column_id=int(r[0]),
                column_name=r[1],
                type_name=r[2],
                max_length=int(r[3]),
                precision=int(r[4]),
                scale=int(r[5]),
                is_nullable=bool(r[6]),
                is_identity=bool(r[7]),
                default_definition=r[8],
                is_computed=bool(r[9]),
                computed_definition=r[10],
            )
            for r in rows
        ]

    async def get_primary_key(self, object_id: int) -> list[KeyPart]:
        return await self._key_parts(object_id, "PK")

    async def get_unique_constraints(self, object_id: int) -> list[KeyPart]:
        return await self._key_parts(object_id, "UQ")

    async def _key_parts(self, object_id: int, constraint_type: str) -> list[KeyPart]:
        rows = await self._fetch(KEY_PARTS_SQL, object_id, constraint_type)
        return [KeyPart(r[0], int(r[1]), r[2]) for r in rows]

    async def get_foreign_keys(self, object_id: int) -> list[ForeignKeyPart]:
        rows = await self._fetch(FOREIGN_KEYS_SQL, object_id)
        return [
            ForeignKeyPart(r[0], r[1], r[2], r[3], r[4], r[5], r[6], int(r[7]))
            for r in rows
        ]

    async def get_check_constraints(self, object_id: int) -> list[CheckConstraintInfo]:
        rows = await self._fetch(CHECK_CONSTRAINTS_SQL, object_id)
        return [CheckConstraintInfo(r[0], r[1], r[2]) for r in rows]
