"""Shared pytest fixtures for all tests."""
import os
from datetime import datetime, timedelta, timezone

import pytest

from catalog_docs.db_introspect.base import CatalogReader
from catalog_docs.db_introspect.models import (
    INLINE_TABLE_FUNCTION,
    PROCEDURE,
    SCALAR_FUNCTION,
    CheckConstraintInfo,
    ColumnInfo,
    ForeignKeyPart,
    KeyPart,
    RoutineRef,
    TableDetails,
    TableRef,
    ViewRef,
)


class FakeCatalogReader(CatalogReader):
    """In-memory catalog reader for exercising the generator without a database."""

    dialect = "sqlserver"

    def __init__(self, tables=(), views=(), routines=(), details=None):
        self.tables = list(tables)
        self.views = list(views)
        self.routines = list(routines)
        self.details = details or {}
        self.opened = False
        self.closed = False

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def server_version(self) -> str:
        return "Fake SQL Server 2022"

    async def list_tables(self):
        return list(self.tables)

    async def list_views(self):
        return list(self.views)

    async def list_routines(self):
        return list(self.routines)

    def _details(self, object_id: int) -> TableDetails:
        return self.details.get(object_id) or TableDetails(table=None)

    async def get_columns(self, object_id):
        return list(self._details(object_id).columns)

    async def get_primary_key(self, object_id):
        return list(self._details(object_id).primary_key)

    async def get_unique_constraints(self, object_id):
        return list(self._details(object_id).unique_constraints)

    async def get_foreign_keys(self, object_id):
        return list(self._details(object_id).foreign_keys)

    async def get_check_constraints(self, object_id):
        return list(self._details(object_id).check_constraints)


@pytest.fixture
def generated_at():
    """Fixed timestamp in a +02:00 zone."""
    return datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone(timedelta(hours=2)))


@pytest.fixture
def orders_table():
    return TableRef(object_id=101, schema_name="dbo", table_name="Orders")


@pytest.fixture
def orders_details(orders_table):
    """Orders table with columns deliberately out of ordinal order."""
    columns = (
        ColumnInfo(3, "Note", "nvarchar", -1, 0, 0, True, False, None, False, None),
        ColumnInfo(1, "OrderId", "int", 4, 10, 0, False, True, None, False, None),
        ColumnInfo(2, "Total", "decimal", 9, 10, 2, False, False, "((0))", False, None),
        ColumnInfo(4, "TotalWithTax", "decimal", 17, 38, 4, True, False, None, True, "([Total]*(1.2))"),
        ColumnInfo(5, "CustomerId", "int", 4, 10, 0, False, False, None, False, None),
    )
    return TableDetails(
        table=orders_table,
        columns=columns,
        primary_key=(KeyPart("PK_Orders", 1, "OrderId"),),
        foreign_keys=(
            ForeignKeyPart("FK_Orders_Customers", "dbo", "Orders", "CustomerId",
                           "sales", "Customers", "Id", 1),
        ),
        check_constraints=(CheckConstraintInfo("CK_Orders_Total", "Total", "([Total]>=(0))"),),
    )


@pytest.fixture
def sample_views():
    return [
        ViewRef(201, "dbo", "vOpenOrders", "\nCREATE VIEW dbo.vOpenOrders AS SELECT 1 AS x\n  "),
    ]


@pytest.fixture
def sample_routines():
    return [
        RoutineRef(301, "dbo", "usp_PlaceOrder", PROCEDURE, "CREATE PROCEDURE dbo.usp_PlaceOrder AS SELECT 1"),
        RoutineRef(302, "dbo", "fn_Tax", SCALAR_FUNCTION, "CREATE FUNCTION dbo.fn_Tax() RETURNS int AS BEGIN RETURN 1 END"),
        RoutineRef(303, "sales", "fn_Open", INLINE_TABLE_FUNCTION, "CREATE FUNCTION sales.fn_Open() RETURNS TABLE AS RETURN SELECT 1 AS x"),
    ]


@pytest.fixture
def fake_reader(orders_table, orders_details, sample_views, sample_routines):
    customers = TableRef(object_id=102, schema_name="sales", table_name="Customers")
    customers_details = TableDetails(
        table=customers,
        columns=(ColumnInfo(1, "Id", "int", 4, 10, 0, False, True, None, False, None),),
        primary_key=(KeyPart("PK_Customers", 1, "Id"),),
    )
    return FakeCatalogReader(
        tables=[orders_table, customers],
        views=sample_views,
        routines=sample_routines,
        details={101: orders_details, 102: customers_details},
    )


@pytest.fixture(scope="session")
def test_db_url():
    """Postgres DSN for integration tests; tests skip when it is unset."""
    return os.getenv("TEST_DB_URL")
