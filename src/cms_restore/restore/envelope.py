"""Snapshot envelope reader.

Loads a backup record from the store and turns its ``content`` into a
typed ``SnapshotEnvelope``.  Reading never writes: every error raised here
happens before the restore touches live data.

Usage:
    from cms_restore.restore.envelope import read_snapshot

    envelope = await read_snapshot(adapter, backup_id=42)
    envelope.data.present_kinds()   # [EntityKind.USERS, EntityKind.POSTS]
"""

import json
from typing import Any

from pydantic import ValidationError

from cms_restore.adapters.base import DatabaseClient
from cms_restore.restore.errors import (
    BackupNotFoundError,
    InvalidBackupStateError,
    MalformedSnapshotError,
    MissingContentError,
)
from cms_restore.restore.models import BackupStatus, BackupSummary, SnapshotEnvelope


async def read_snapshot(
    adapter: DatabaseClient,
    backup_id: int,
    backups_table: str = "Backup",
) -> SnapshotEnvelope:
    """Fetch a backup record and parse its content.

    Args:
        adapter: Database adapter implementing ``DatabaseClient`` Protocol.
        backup_id: Identity of the backup record.
        backups_table: Table holding backup records.

    Returns:
        The parsed envelope.

    Raises:
        BackupNotFoundError: No record has ``backup_id``.
        InvalidBackupStateError: The record's status is not ``completed``.
        MissingContentError: The record has no content.
        MalformedSnapshotError: The content is not a valid envelope.
    """
    rows = await adapter.select(
        backups_table,
        "id, status, content",
        filters={"id": backup_id},
    )
    if not rows:
        raise BackupNotFoundError(backup_id)

    record = rows[0]
    status = record.get("status") or ""
    if not _is_completed(status):
        raise InvalidBackupStateError(backup_id, str(status))

    content = record.get("content")
    if not content:
        raise MissingContentError(backup_id)

    return parse_envelope(content)


def parse_envelope(content: str | bytes | dict) -> SnapshotEnvelope:
    """Parse serialized backup content into a ``SnapshotEnvelope``.

    Accepts the raw JSON text, or an already-decoded object when the
    content column is a JSON type.

    Raises:
        MalformedSnapshotError: If the content is not JSON, is not an object,
            has no ``data`` object, or an entity fails validation.
    """
    payload: Any
    if isinstance(content, dict):
        payload = content
    else:
        try:
            payload = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedSnapshotError(f"Invalid backup content format: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedSnapshotError(
            f"Invalid backup content format: expected an object, got {type(payload).__name__}"
        )

    if not isinstance(payload.get("data"), dict):
        raise MalformedSnapshotError("No data found in backup")

    try:
        return SnapshotEnvelope.model_validate(payload)
    except ValidationError as e:
        raise MalformedSnapshotError(
            f"Backup data does not match the snapshot format "
            f"({e.error_count()} errors):\n{e}"
        ) from e


async def list_backups(
    adapter: DatabaseClient,
    backups_table: str = "Backup",
    limit: int = 100,
) -> list[BackupSummary]:
    """Most recent backup records, newest first, without their content."""
    rows = await adapter.select(
        backups_table,
        'id, filename, type, status, "createdAt"',
        order_by='"createdAt" DESC',
        limit=limit,
    )
    return [BackupSummary.model_validate(row) for row in rows]


def _is_completed(status: str) -> bool:
    try:
        return BackupStatus(status) is BackupStatus.COMPLETED
    except ValueError:
        return False
