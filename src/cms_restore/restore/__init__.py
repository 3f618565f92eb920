"""Snapshot restore engine.

Reads a completed backup record, then upserts its entities by original
identity in foreign-key order while the site's maintenance flag is held.

Usage:
    from cms_restore.restore import restore_backup, read_snapshot, validate_snapshot

    envelope = await read_snapshot(adapter, 42)
    report = validate_snapshot(envelope)
    stats = await restore_backup(adapter, backup_id=42, user_id=9)
"""

from cms_restore.restore.envelope import list_backups, parse_envelope, read_snapshot
from cms_restore.restore.errors import (
    BackupNotFoundError,
    EntityWriteError,
    InvalidBackupStateError,
    MalformedSnapshotError,
    MissingContentError,
    RestoreError,
)
from cms_restore.restore.gate import is_maintenance_mode, maintenance_mode
from cms_restore.restore.models import (
    BackupStatus,
    BackupSummary,
    EntityKind,
    RestoreStats,
    SnapshotData,
    SnapshotEnvelope,
)
from cms_restore.restore.service import RestorePhase, restore_backup
from cms_restore.restore.validate import validate_snapshot

__all__ = [
    # Entry points
    "restore_backup",
    "read_snapshot",
    "parse_envelope",
    "list_backups",
    "validate_snapshot",
    "maintenance_mode",
    "is_maintenance_mode",
    # Models
    "BackupStatus",
    "BackupSummary",
    "EntityKind",
    "RestorePhase",
    "RestoreStats",
    "SnapshotData",
    "SnapshotEnvelope",
    # Errors
    "RestoreError",
    "BackupNotFoundError",
    "InvalidBackupStateError",
    "MissingContentError",
    "MalformedSnapshotError",
    "EntityWriteError",
]
