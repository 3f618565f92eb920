"""Audit record for completed restores.

One activity-log row is written per successful restore.  Nothing is
written when a restore fails, so a missing row for an attempted restore
means it stopped partway through.
"""

import json

from cms_restore.adapters.base import DatabaseClient
from cms_restore.restore.models import RestoreStats


async def record_restore(
    adapter: DatabaseClient,
    backup_id: int,
    user_id: int,
    stats: RestoreStats,
    users_without_credential: list[int] | None = None,
    activity_table: str = "ActivityLog",
    action: str = "backup_restore_completed",
) -> dict:
    """Append the audit row for a completed restore.

    The row's identity is generated by the store.

    Returns:
        The created activity-log row.
    """
    details = {
        "backupId": backup_id,
        "stats": stats.model_dump(),
        "usersWithoutCredential": users_without_credential or [],
    }
    return await adapter.insert(
        activity_table,
        {
            "action": action,
            "resource": f"backup_{backup_id}",
            "details": json.dumps(details),
            "userId": user_id,
        },
    )
