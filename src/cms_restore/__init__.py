"""cms-restore: restore a site's content graph from a stored snapshot.

Provides an async restore engine that upserts users, categories, tags,
posts, comments, settings, ads and redirects by their original identity,
in foreign-key order, behind the site's maintenance flag.  Ships with an
async PostgreSQL adapter, db.toml profile configuration and a CLI.

Usage:
    from cms_restore import get_adapter, restore_backup

    adapter = await get_adapter(profile_name="local")
    try:
        stats = await restore_backup(adapter, backup_id=42, user_id=9)
    finally:
        await adapter.close()
"""

__version__ = "0.1.0"

# Adapters
from cms_restore.adapters.base import DatabaseClient
from cms_restore.adapters.postgres import AsyncPostgresAdapter

# Config
from cms_restore.config.loader import load_db_config
from cms_restore.config.models import (
    DatabaseConfig,
    DatabaseProfile,
    RestoreConfig,
    TableNames,
)

# Factory
from cms_restore.factory import ProfileNotFoundError, get_adapter, resolve_url

# Restore
from cms_restore.restore import (
    BackupNotFoundError,
    EntityWriteError,
    InvalidBackupStateError,
    MalformedSnapshotError,
    MissingContentError,
    RestoreError,
    RestoreStats,
    SnapshotEnvelope,
    is_maintenance_mode,
    list_backups,
    maintenance_mode,
    read_snapshot,
    restore_backup,
    validate_snapshot,
)

__all__ = [
    # Adapters
    "DatabaseClient",
    "AsyncPostgresAdapter",
    # Config
    "load_db_config",
    "DatabaseConfig",
    "DatabaseProfile",
    "RestoreConfig",
    "TableNames",
    # Factory
    "get_adapter",
    "resolve_url",
    "ProfileNotFoundError",
    # Restore
    "restore_backup",
    "read_snapshot",
    "list_backups",
    "validate_snapshot",
    "maintenance_mode",
    "is_maintenance_mode",
    "RestoreStats",
    "SnapshotEnvelope",
    # Errors
    "RestoreError",
    "BackupNotFoundError",
    "InvalidBackupStateError",
    "MissingContentError",
    "MalformedSnapshotError",
    "EntityWriteError",
]
