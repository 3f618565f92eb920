"""Shared fixtures: an in-memory ``DatabaseClient`` and snapshot builders."""

import copy
import json
from typing import Any

import pytest


class FakeStore:
    """In-memory implementation of the ``DatabaseClient`` protocol.

    Tables are lists of row dicts.  Every write is appended to ``writes`` as
    ``(method, table, entity_id)`` so tests can assert ordering, and
    ``fail_on`` injects an error into a matching write.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {}
        self.writes: list[tuple[str, str, Any]] = []
        self.failures: list[tuple[str, str, Any]] = []
        self.closed = False

    # -- test helpers --------------------------------------------------

    def seed(self, table: str, *rows: dict) -> None:
        self.tables.setdefault(table, []).extend(copy.deepcopy(list(rows)))

    def rows(self, table: str) -> list[dict]:
        return self.tables.get(table, [])

    def row(self, table: str, row_id: int) -> dict | None:
        for row in self.rows(table):
            if row.get("id") == row_id:
                return row
        return None

    def fail_on(self, method: str, table: str, entity_id: Any = None) -> None:
        """Make the next matching write raise ``RuntimeError``."""
        self.failures.append((method, table, entity_id))

    def _record(self, method: str, table: str, entity_id: Any) -> None:
        for failure in self.failures:
            f_method, f_table, f_id = failure
            if f_method == method and f_table == table and f_id in (None, entity_id):
                raise RuntimeError(f"injected {method} failure on {table} {entity_id}")
        self.writes.append((method, table, entity_id))

    def _matches(self, row: dict, filters: dict | None) -> bool:
        return all(row.get(k) == v for k, v in (filters or {}).items())

    # -- DatabaseClient ------------------------------------------------

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        found = [copy.deepcopy(r) for r in self.rows(table) if self._matches(r, filters)]
        if limit is not None:
            found = found[:limit]
        return found

    async def insert(self, table: str, data: dict) -> dict:
        self._record("insert", table, data.get("id"))
        row = copy.deepcopy(data)
        if "id" not in row:
            existing = [r["id"] for r in self.rows(table) if isinstance(r.get("id"), int)]
            row["id"] = max(existing, default=0) + 1
        self.tables.setdefault(table, []).append(row)
        return copy.deepcopy(row)

    async def insert_with_id(self, table: str, data: dict, pk: str = "id") -> dict:
        if data.get(pk) is None:
            raise KeyError(f"insert_with_id into {table} requires a '{pk}' value")
        self._record("insert_with_id", table, data[pk])
        if any(r.get(pk) == data[pk] for r in self.rows(table)):
            raise ValueError(f"duplicate key {pk}={data[pk]} in {table}")
        row = copy.deepcopy(data)
        self.tables.setdefault(table, []).append(row)
        return copy.deepcopy(row)

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> dict:
        self._record("update", table, filters.get("id"))
        matched = [r for r in self.rows(table) if self._matches(r, filters)]
        if not matched:
            raise ValueError(f"No rows matched filters: {filters}")
        for row in matched:
            row.update(copy.deepcopy(data))
        return copy.deepcopy(matched[0])

    async def update_many(
        self,
        table: str,
        data: dict,
        filters: dict[str, Any] | None = None,
    ) -> int:
        self._record("update_many", table, None)
        matched = [r for r in self.rows(table) if self._matches(r, filters)]
        for row in matched:
            row.update(copy.deepcopy(data))
        return len(matched)

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        if not filters:
            raise ValueError(f"Refusing to delete from {table} without filters")
        self._record("delete", table, None)
        self.tables[table] = [r for r in self.rows(table) if not self._matches(r, filters)]

    async def execute(self, sql: str, params: dict | None = None) -> None:
        self._record("execute", sql, None)

    async def close(self) -> None:
        self.closed = True

    async def test_connection(self) -> bool:
        return True


@pytest.fixture
def store() -> FakeStore:
    """Store holding one settings row with the maintenance flag off."""
    fake = FakeStore()
    fake.seed("SiteSettings", {"id": 1, "siteName": "Live", "maintenanceMode": False})
    return fake


def make_envelope(**data: Any) -> dict:
    return {
        "exportedAt": "2026-01-15T10:00:00.000Z",
        "exportType": "full",
        "backupId": 42,
        "data": data,
    }


def add_backup(
    store: FakeStore,
    backup_id: int,
    content: Any,
    status: str = "COMPLETED",
) -> None:
    """Seed a backup record; dict content is stored as JSON text."""
    if isinstance(content, dict):
        content = json.dumps(content)
    store.seed(
        "Backup",
        {
            "id": backup_id,
            "filename": f"backup-{backup_id}.json",
            "type": "full",
            "status": status,
            "content": content,
            "createdAt": "2026-01-15T10:00:00",
        },
    )
