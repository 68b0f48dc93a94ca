"""Tests for column type rendering."""
import pytest

from catalog_docs.db_introspect.models import ColumnInfo
from catalog_docs.db_introspect.postgres_reader import decode_typmod
from catalog_docs.db_introspect.type_renderer import (
    render_postgres_type,
    render_sqlserver_type,
    render_type,
)


def _column(type_name, max_length=0, precision=0, scale=0):
    return ColumnInfo(1, "c", type_name, max_length, precision, scale, True, False, None, False, None)


# =============================================================================
# SQL Server
# =============================================================================

class TestSqlServerTypes:
    """SQL Server type rendering from sys.columns values."""

    @pytest.mark.parametrize("type_name,max_length,precision,scale,expected", [
        ("decimal", 9, 10, 2, "decimal(10,2)"),
        ("NUMERIC", 5, 5, 0, "numeric(5,0)"),
        ("datetime2", 8, 27, 7, "datetime2(7)"),
        ("datetime2", 6, 19, 0, "datetime2"),
        ("datetimeoffset", 10, 34, 3, "datetimeoffset(3)"),
        ("time", 5, 16, 0, "time"),
        ("float", 8, 53, 0, "float"),
        ("float", 4, 24, 0, "float(24)"),
        ("nvarchar", 100, 0, 0, "nvarchar(50)"),
        ("nvarchar", -1, 0, 0, "nvarchar(max)"),
        ("varchar", 255, 0, 0, "varchar(255)"),
        ("varchar", -1, 0, 0, "varchar(max)"),
        ("varbinary", -1, 0, 0, "varbinary(max)"),
        ("nchar", 20, 0, 0, "nchar(10)"),
        ("char", 3, 0, 0, "char(3)"),
        ("binary", 16, 0, 0, "binary(16)"),
        ("Int", 4, 10, 0, "int"),
        ("uniqueidentifier", 16, 0, 0, "uniqueidentifier"),
    ])
    def test_render(self, type_name, max_length, precision, scale, expected):
        assert render_sqlserver_type(type_name, max_length, precision, scale) == expected

    def test_render_type_defaults_to_sqlserver(self):
        assert render_type(_column("nvarchar", max_length=100)) == "nvarchar(50)"


# =============================================================================
# PostgreSQL
# =============================================================================

class TestPostgresTypes:
    """PostgreSQL type rendering from typname and decoded typmod."""

    @pytest.mark.parametrize("type_name,max_length,precision,scale,expected", [
        ("int4", -1, -1, 0, "integer"),
        ("int8", -1, -1, 0, "bigint"),
        ("float8", -1, -1, 0, "double precision"),
        ("bool", -1, -1, 0, "boolean"),
        ("text", -1, -1, 0, "text"),
        ("varchar", 50, -1, 0, "varchar(50)"),
        ("varchar", -1, -1, 0, "varchar"),
        ("bpchar", 2, -1, 0, "char(2)"),
        ("numeric", -1, 12, 2, "numeric(12,2)"),
        ("numeric", -1, -1, 0, "numeric"),
        ("timestamp", -1, 3, 0, "timestamp(3)"),
        ("timestamp", -1, -1, 0, "timestamp"),
        ("timestamptz", -1, -1, 0, "timestamp with time zone"),
        ("timestamptz", -1, 0, 0, "timestamp(0) with time zone"),
        ("timetz", -1, 6, 0, "time(6) with time zone"),
        ("_int4", -1, -1, 0, "integer[]"),
        ("_varchar", 10, -1, 0, "varchar(10)[]"),
    ])
    def test_render(self, type_name, max_length, precision, scale, expected):
        assert render_postgres_type(type_name, max_length, precision, scale) == expected

    def test_render_type_postgres_dialect(self):
        assert render_type(_column("int4", -1, -1, 0), dialect="postgres") == "integer"

    def test_unknown_dialect(self):
        with pytest.raises(ValueError, match="Unknown dialect"):
            render_type(_column("int"), dialect="oracle")


class TestDecodeTypmod:
    """atttypmod decoding."""

    def test_missing_modifier(self):
        assert decode_typmod("varchar", -1) == (-1, -1, 0)

    def test_varchar_length(self):
        # varchar(50) is stored as 50 + VARHDRSZ
        assert decode_typmod("varchar", 54) == (50, -1, 0)

    def test_array_uses_element_modifier(self):
        assert decode_typmod("_bpchar", 14) == (10, -1, 0)

    def test_numeric_precision_scale(self):
        # numeric(12,2): ((12 << 16) | 2) + VARHDRSZ
        assert decode_typmod("numeric", ((12 << 16) | 2) + 4) == (-1, 12, 2)

    def test_timestamp_precision(self):
        assert decode_typmod("timestamptz", 3) == (-1, 3, 0)

    def test_interval_full_precision(self):
        # interval DAY TO SECOND without precision keeps 0xFFFF in the low bits
        assert decode_typmod("interval", (0x7FFF << 16) | 0xFFFF) == (-1, -1, 0)

    def test_unmodified_type(self):
        assert decode_typmod("int4", -1) == (-1, -1, 0)
        assert decode_typmod("text", 10) == (-1, -1, 0)
