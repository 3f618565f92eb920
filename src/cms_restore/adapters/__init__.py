"""Database adapters package.

Provides the ``DatabaseClient`` Protocol and the async PostgreSQL
implementation used by the restore engine.

Usage:
    from cms_restore.adapters import DatabaseClient, AsyncPostgresAdapter
"""

from cms_restore.adapters.base import DatabaseClient
from cms_restore.adapters.postgres import AsyncPostgresAdapter

__all__ = [
    "DatabaseClient",
    "AsyncPostgresAdapter",
]
