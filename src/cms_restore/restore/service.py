"""Restore entry point.

``restore_backup`` reads a backup record, then -- with the maintenance
flag held -- applies the snapshot in dependency order and writes the audit
record.  The phases it moves through::

    IDLE -> READING -> RESTORING -> FINALIZING -> SUCCEEDED
               |           |            |
               +-----------+------------+--> FAILED

Failures while READING happen before any write.  Failures while RESTORING
leave the rows written so far in place; the flag is cleared and no audit
row is written.  The whole call is safe to repeat with the same backup.

Usage:
    from cms_restore.restore import restore_backup

    stats = await restore_backup(adapter, backup_id=42, user_id=9)
    stats.posts   # number of posts upserted
"""

import logging
from enum import Enum

from cms_restore.adapters.base import DatabaseClient
from cms_restore.config.models import RestoreConfig
from cms_restore.restore.audit import record_restore
from cms_restore.restore.envelope import read_snapshot
from cms_restore.restore.gate import maintenance_mode
from cms_restore.restore.models import RestoreStats
from cms_restore.restore.restorer import restore_entities

logger = logging.getLogger(__name__)


class RestorePhase(str, Enum):
    IDLE = "idle"
    READING = "reading"
    RESTORING = "restoring"
    FINALIZING = "finalizing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


async def restore_backup(
    adapter: DatabaseClient,
    backup_id: int,
    user_id: int,
    config: RestoreConfig | None = None,
) -> RestoreStats:
    """Restore a completed backup into the live store.

    The caller is responsible for checking that ``user_id`` may restore;
    it is only recorded on the audit row.  Two restores must not run
    against the same store at once.

    Args:
        adapter: Database adapter implementing ``DatabaseClient`` Protocol.
        backup_id: Identity of the backup record to restore.
        user_id: Identity of the acting user.
        config: Table names and flag column (defaults to the site schema).

    Returns:
        Per-kind count of restored entities.

    Raises:
        BackupNotFoundError: No such backup.
        InvalidBackupStateError: Backup is not completed.
        MissingContentError: Backup has no content.
        MalformedSnapshotError: Content is not a valid snapshot.
        EntityWriteError: A write failed mid-pass (partial restore).
    """
    config = config or RestoreConfig()
    tables = config.tables
    tag = f"[Backup Restore {backup_id}]"

    phase = RestorePhase.READING
    logger.info(f"{tag} Started by user {user_id}")

    try:
        envelope = await read_snapshot(adapter, backup_id, tables.backups)
        kinds = ", ".join(kind.value for kind in envelope.data.present_kinds())
        logger.info(f"{tag} Snapshot {envelope.export_type or 'unknown'} contains: {kinds or 'nothing'}")

        uncredentialed: list[int] = []
        async with maintenance_mode(adapter, tables.settings, config.maintenance_column):
            phase = RestorePhase.RESTORING
            stats = await restore_entities(adapter, envelope.data, tables, uncredentialed)

            phase = RestorePhase.FINALIZING
            await record_restore(
                adapter,
                backup_id,
                user_id,
                stats,
                users_without_credential=uncredentialed,
                activity_table=tables.activity_log,
                action=config.audit_action,
            )
    except Exception as e:
        logger.error(f"{tag} {RestorePhase.FAILED.value} while {phase.value}: {e}")
        raise

    phase = RestorePhase.SUCCEEDED
    logger.info(
        f"{tag} {phase.value}. Recovered: {stats.posts} posts, "
        f"{stats.users} users, {stats.comments} comments"
    )
    return stats
