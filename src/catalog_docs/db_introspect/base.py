"""Catalog reader interface shared by the dialect-specific readers."""
from __future__ import annotations

from abc import ABC, abstractmethod

from catalog_docs.db_introspect.models import (
    CheckConstraintInfo,
    ColumnInfo,
    ForeignKeyPart,
    KeyPart,
    RoutineRef,
    TableDetails,
    TableRef,
    ViewRef,
)


class CatalogReader(ABC):
    """Reads user objects and their metadata from a database catalog.

    Readers are async context managers: the connection is opened on enter
    and closed on exit. Every query is issued sequentially on that one
    connection, and any driver error propagates to the caller.
    """

    dialect: str = ""

    async def __aenter__(self) -> CatalogReader:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @abstractmethod
    async def open(self) -> None:
        """Open the underlying connection."""

    @abstractmethod
    async def close(self) -> None:
        """Close the underlying connection."""

    @abstractmethod
    async def server_version(self) -> str:
        """Return the server's version banner."""

    @abstractmethod
    async def list_tables(self) -> list[TableRef]:
        """List user tables ordered by schema, then name."""

    @abstractmethod
    async def list_views(self) -> list[ViewRef]:
        """List user views with their definitions."""

    @abstractmethod
    async def list_routines(self) -> list[RoutineRef]:
        """List stored procedures and functions with their definitions."""

    @abstractmethod
    async def get_columns(self, object_id: int) -> list[ColumnInfo]:
        """Columns of a table ordered by ordinal."""

    @abstractmethod
    async def get_primary_key(self, object_id: int) -> list[KeyPart]:
        """Primary key parts of a table."""

    @abstractmethod
    async def get_unique_constraints(self, object_id: int) -> list[KeyPart]:
        """Unique constraint parts of a table."""

    @abstractmethod
    async def get_foreign_keys(self, object_id: int) -> list[ForeignKeyPart]:
        """Foreign key parts declared on a table."""

    @abstractmethod
    async def get_check_constraints(self, object_id: int) -> list[CheckConstraintInfo]:
        """Check constraints declared on a table."""

    async def get_table_details(self, table: TableRef) -> TableDetails:
        """Fetch columns, keys and constraints for one table.

        Args:
            table: Table to describe

        Returns:
            TableDetails snapshot for the table
        """
        columns = await self.get_columns(table.object_id)
        primary_key = await self.get_primary_key(table.object_id)
        unique_constraints = await self.get_unique_constraints(table.object_id)
        foreign_keys = await self.get_foreign_keys(table.object_id)
        check_constraints = await self.get_check_constraints(table.object_id)

        return TableDetails(
            table=table,
            columns=tuple(columns),
            primary_key=tuple(primary_key),
            unique_constraints=tuple(unique_constraints),
            foreign_keys=tuple(foreign_keys),
            check_constraints=tuple(check_constraints),
        )
