"""Database client protocol definition.

Defines the ``DatabaseClient`` Protocol the restore engine talks to.
All methods are ``async def`` -- the library is async-first.

Identity handling is explicit: ``insert`` lets the store generate the
primary key, ``insert_with_id`` writes a row carrying a caller-supplied
identity.  Restores always use the latter so that foreign keys captured in
a snapshot keep resolving.

Usage:
    from cms_restore.adapters.base import DatabaseClient

    async def do_work(client: DatabaseClient) -> None:
        rows = await client.select("User", "id, email", filters={"id": 1})
        await client.insert_with_id("User", {"id": 1, "email": "a@x.com"})
        await client.update_many("SiteSettings", {"maintenanceMode": False})
        await client.close()
"""

from typing import Any, Protocol


class DatabaseClient(Protocol):
    """Database client interface that all adapters must implement.

    All methods are async -- callers must ``await`` every operation.
    Table and column names are passed exactly as they are named in the
    store (e.g. ``"PostTag"``, ``"authorId"``); adapters take care of
    quoting.
    """

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        """Select rows from table.

        Args:
            table: Table name.
            columns: Comma-separated column list or ``"*"``.
            filters: Optional dict of field=value filters (all must match via AND).
            order_by: Optional ORDER BY expression.
            limit: Optional maximum number of rows.

        Returns:
            List of dicts, one per row.  Empty list if no matches.
        """
        ...

    async def insert(self, table: str, data: dict) -> dict:
        """Insert a row, letting the store generate its identity.

        Returns:
            Dict representing the created row.

        Raises:
            Exception: If a constraint is violated.
        """
        ...

    async def insert_with_id(self, table: str, data: dict, pk: str = "id") -> dict:
        """Insert a row that carries its own identity in ``data[pk]``.

        The store must not substitute a generated identity, and any
        identity generator backing ``pk`` must afterwards be ahead of the
        inserted value.

        Raises:
            KeyError: If ``data`` has no ``pk`` value.
            Exception: If a constraint is violated.
        """
        ...

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> dict:
        """Update rows in table and return the first updated row.

        Raises:
            ValueError: If no rows match filters.
        """
        ...

    async def update_many(
        self,
        table: str,
        data: dict,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Update every matching row (all rows when ``filters`` is empty).

        Returns:
            Number of rows updated.  Zero matches is not an error.
        """
        ...

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        """Delete every row matching ``filters``."""
        ...

    async def execute(self, sql: str, params: dict | None = None) -> None:
        """Execute a raw SQL statement."""
        ...

    async def close(self) -> None:
        """Close database connection and clean up resources."""
        ...

    async def test_connection(self) -> bool:
        """Check the store is reachable.

        Returns:
            True when a trivial query succeeds.

        Raises:
            Exception: If the connection cannot be established.
        """
        ...
