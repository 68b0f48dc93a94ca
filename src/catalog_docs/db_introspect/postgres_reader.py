"""Catalog reader for PostgreSQL.

Reads pg_catalog through asyncpg and normalizes the rows into the same
snapshot types the SQL Server reader produces:
- object ids are pg_class / pg_proc oids
- routine kinds map onto the shared routine type codes
- length, precision and scale are decoded from atttypmod
"""
from __future__ import annotations

import logging

import asyncpg

from catalog_docs.db_introspect.base import CatalogReader
from catalog_docs.db_introspect.models import (
    PROCEDURE,
    SCALAR_FUNCTION,
    TABLE_FUNCTION,
    CheckConstraintInfo,
    ColumnInfo,
    ForeignKeyPart,
    KeyPart,
    RoutineRef,
    TableRef,
    ViewRef,
)

logger = logging.getLogger(__name__)


USER_SCHEMA_FILTER = """
    n.nspname NOT IN ('pg_catalog', 'information_schema')
    AND n.nspname NOT LIKE 'pg_toast%'
    AND n.nspname NOT LIKE 'pg_temp_%'
"""

# Objects created by an extension are the Postgres analogue of is_ms_shipped
NOT_EXTENSION_MEMBER = """
    NOT EXISTS (
        SELECT 1 FROM pg_depend dep
        WHERE dep.objid = {oid} AND dep.deptype = 'e'
    )
"""

TABLES_SQL = f"""
    SELECT c.oid AS object_id, n.nspname AS schema_name, c.relname AS table_name
    FROM pg_class c
    JOIN pg_namespace n ON n.oid = c.relnamespace
    WHERE c.relkind IN ('r', 'p')
      AND NOT c.relispartition
      AND {USER_SCHEMA_FILTER}
      AND {NOT_EXTENSION_MEMBER.format(oid="c.oid")}
    ORDER BY n.nspname, c.relname
"""

VIEWS_SQL = f"""
    SELECT
        c.oid AS object_id,
        n.nspname AS schema_name,
        c.relname AS view_name,
        'CREATE VIEW ' || quote_ident(n.nspname) || '.' || quote_ident(c.relname)
            || ' AS' || E'\\n' || pg_get_viewdef(c.oid, true) AS definition
    FROM pg_class c
    JOIN pg_namespace n ON n.oid = c.relnamespace
    WHERE c.relkind = 'v'
      AND {USER_SCHEMA_FILTER}
      AND {NOT_EXTENSION_MEMBER.format(oid="c.oid")}
    ORDER BY n.nspname, c.relname
"""

ROUTINES_SQL = f"""
    SELECT
        p.oid AS object_id,
        n.nspname AS schema_name,
        p.proname AS routine_name,
        CASE
            WHEN p.prokind = 'p' THEN '{PROCEDURE}'
            WHEN p.proretset THEN '{TABLE_FUNCTION}'
            ELSE '{SCALAR_FUNCTION}'
        END AS routine_type,
        pg_get_functiondef(p.oid) AS definition
    FROM pg_proc p
    JOIN pg_namespace n ON n.oid = p.pronamespace
    WHERE p.prokind IN ('f', 'p')
      AND {USER_SCHEMA_FILTER}
      AND {NOT_EXTENSION_MEMBER.format(oid="p.oid")}
    ORDER BY routine_type, n.nspname, p.proname, p.oid
"""

COLUMNS_SQL = """
    SELECT
        a.attnum AS column_id,
        a.attname AS column_name,
        t.typname AS type_name,
        a.atttypmod AS typmod,
        NOT a.attnotnull AS is_nullable,
        a.attidentity <> '' AS is_identity,
        CASE WHEN a.attgenerated = '' THEN pg_get_expr(d.adbin, d.adrelid) END AS default_definition,
        a.attgenerated = 's' AS is_computed,
        CASE WHEN a.attgenerated = 's' THEN pg_get_expr(d.adbin, d.adrelid) END AS computed_definition
    FROM pg_attribute a
    JOIN pg_type t ON t.oid = a.atttypid
    LEFT JOIN pg_attrdef d ON d.adrelid = a.attrelid AND d.adnum = a.attnum
    WHERE a.attrelid = $1
      AND a.attnum > 0
      AND NOT a.attisdropped
    ORDER BY a.attnum
"""

# contype is 'p' (primary key) or 'u' (unique)
KEY_PARTS_SQL = """
    SELECT con.conname AS constraint_name, k.ord AS key_ordinal, a.attname AS column_name
    FROM pg_constraint con
    CROSS JOIN LATERAL unnest(con.conkey) WITH ORDINALITY AS k(attnum, ord)
    JOIN pg_attribute a ON a.attrelid = con.conrelid AND a.attnum = k.attnum
    WHERE con.conrelid = $1 AND con.contype::text = $2
    ORDER BY con.conname, k.ord
"""

FOREIGN_KEYS_SQL = """
    SELECT
        con.conname AS constraint_name,
        pn.nspname AS parent_schema,
        pc.relname AS parent_table,
        pa.attname AS parent_column,
        rn.nspname AS ref_schema,
        rc.relname AS ref_table,
        ra.attname AS ref_column,
        k.ord AS ordinal
    FROM pg_constraint con
    CROSS JOIN LATERAL unnest(con.conkey, con.confkey)
        WITH ORDINALITY AS k(parent_attnum, ref_attnum, ord)
    JOIN pg_class pc ON pc.oid = con.conrelid
    JOIN pg_namespace pn ON pn.oid = pc.relnamespace
    JOIN pg_class rc ON rc.oid = con.confrelid
    JOIN pg_namespace rn ON rn.oid = rc.relnamespace
    JOIN pg_attribute pa ON pa.attrelid = con.conrelid AND pa.attnum = k.parent_attnum
    JOIN pg_attribute ra ON ra.attrelid = con.confrelid AND ra.attnum = k.ref_attnum
    WHERE con.conrelid = $1 AND con.contype = 'f'
    ORDER BY con.conname, k.ord
"""

CHECK_CONSTRAINTS_SQL = """
    SELECT
        con.conname AS constraint_name,
        a.attname AS column_name,
        pg_get_constraintdef(con.oid, true) AS definition
    FROM pg_constraint con
    LEFT JOIN pg_attribute a
        ON a.attrelid = con.conrelid
        AND a.attnum = con.conkey[1]
        AND array_length(con.conkey, 1) = 1
    WHERE con.conrelid = $1 AND con.contype = 'c'
    ORDER BY con.conname
"""

_VARHDRSZ = 4
_INTERVAL_FULL_PRECISION = 0xFFFF


def decode_typmod(type_name: str, typmod: int) -> tuple[int, int, int]:
    """Decode a Postgres type modifier into (max_length, precision, scale).

    Array types carry the element's modifier, so the leading underscore of
    an array type name is ignored. A missing modifier (-1) decodes to
    (-1, -1, 0).

    Args:
        type_name: pg_type.typname of the column
        typmod: pg_attribute.atttypmod of the column

    Returns:
        Tuple of max_length, precision and scale
    """
    if typmod < 0:
        return -1, -1, 0

    base = type_name[1:] if type_name.startswith("_") else type_name

    if base in ("varchar", "bpchar"):
        return typmod - _VARHDRSZ, -1, 0
    if base in ("bit", "varbit"):
        return typmod, -1, 0
    if base == "numeric":
        mod = typmod - _VARHDRSZ
        return -1, (mod >> 16) & 0xFFFF, mod & 0xFFFF
    if base in ("timestamp", "timestamptz", "time", "timetz"):
        return -1, typmod, 0
    if base == "interval":
        precision = typmod & 0xFFFF
        return -1, -1 if precision == _INTERVAL_FULL_PRECISION else precision, 0

    return -1, -1, 0


class PostgresCatalogReader(CatalogReader):
    """Catalog reader over PostgreSQL's pg_catalog."""

    dialect = "postgres"

    def __init__(self, dsn: str):
        self.dsn = dsn
        self.conn: asyncpg.Connection | None = None

    async def open(self) -> None:
        self.conn = await asyncpg.connect(dsn=self.dsn)
        logger.debug("Connected to PostgreSQL")

    async def close(self) -> None:
        if self.conn is not None:
            await self.conn.close()
            self.conn = None

    def _connection(self) -> asyncpg.Connection:
        if self.conn is None:
            raise RuntimeError("Reader is not open")
        return self.conn

    async def server_version(self) -> str:
        return await self._connection().fetchval("SELECT version()")

    async def list_tables(self) -> list[TableRef]:
        rows = await self._connection().fetch(TABLES_SQL)
        return [TableRef(r["object_id"], r["schema_name"], r["table_name"]) for r in rows]

    async def list_views(self) -> list[ViewRef]:
        rows = await self._connection().fetch(VIEWS_SQL)
        return [
            ViewRef(r["object_id"], r["schema_name"], r["view_name"], r["definition"])
            for r in rows
        ]

    async def list_routines(self) -> list[RoutineRef]:
        rows = await self._connection().fetch(ROUTINES_SQL)
        return [
            RoutineRef(
                r["object_id"],
                r["schema_name"],
                r["routine_name"],
                r["routine_type"],
                r["definition"],
            )
            for r in rows
        ]

    async def get_columns(self, object_id: int) -> list[ColumnInfo]:
        rows = await self._connection().fetch(COLUMNS_SQL, object_id)
        columns = []
        for r in rows:
            max_length, precision, scale = decode_typmod(r["type_name"], r["typmod"])
            columns.append(ColumnInfo(
                column_id=r["column_id"],
                column_name=r["column_name"],
                type_name=r["type_name"],
                max_length=max_length,
                precision=precision,
                scale=scale,
                is_nullable=r["is_nullable"],
                is_identity=r["is_identity"],
                default_definition=r["default_definition"],
                is_computed=r["is_computed"],
                computed_definition=r["computed_definition"],
            ))
        return columns

    async def get_primary_key(self, object_id: int) -> list[KeyPart]:
        return await self._key_parts(object_id, "p")

    async def get_unique_constraints(self, object_id: int) -> list[KeyPart]:
        return await self._key_parts(object_id, "u")

    async def _key_parts(self, object_id: int, contype: str) -> list[KeyPart]:
        rows = await self._connection().fetch(KEY_PARTS_SQL, object_id, contype)
        return [
            KeyPart(r["constraint_name"], r["key_ordinal"], r["column_name"])
            for r in rows
        ]

    async def get_foreign_keys(self, object_id: int) -> list[ForeignKeyPart]:
        rows = await self._connection().fetch(FOREIGN_KEYS_SQL, object_id)
        return [
            ForeignKeyPart(
                constraint_name=r["constraint_name"],
                parent_schema=r["parent_schema"],
                parent_table=r["parent_table"],
                parent_column=r["parent_column"],
                ref_schema=r["ref_schema"],
                ref_table=r["ref_table"],
                ref_column=r["ref_column"],
                ordinal=r["ordinal"],
            )
            for r in rows
        ]

    async def get_check_constraints(self, object_id: int) -> list[CheckConstraintInfo]:
        rows = await self._connection().fetch(CHECK_CONSTRAINTS_SQL, object_id)
        return [
            CheckConstraintInfo(r["constraint_name"], r["column_name"], r["definition"])
            for r in rows
        ]
