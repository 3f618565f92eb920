"""Site-wide maintenance flag.

The flag lives on the settings singleton and is advisory: public request
handling reads it with ``is_maintenance_mode`` and decides what to serve.
It is not a lock, and it never undoes writes made while it was set.

Usage:
    from cms_restore.restore.gate import maintenance_mode

    async with maintenance_mode(adapter):
        ...  # flag is true here, false again on every exit path
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from cms_restore.adapters.base import DatabaseClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def maintenance_mode(
    adapter: DatabaseClient,
    settings_table: str = "SiteSettings",
    column: str = "maintenanceMode",
) -> AsyncIterator[None]:
    """Hold the maintenance flag for the duration of the block.

    Sets ``column`` true on every settings row before entering, and sets it
    false in ``finally`` whether the block returns, raises, or is
    cancelled.  A failure to set the flag propagates before the block runs.
    """
    await adapter.update_many(settings_table, {column: True})
    logger.info("Maintenance mode enabled")
    try:
        yield
    finally:
        await adapter.update_many(settings_table, {column: False})
        logger.info("Maintenance mode disabled")


async def is_maintenance_mode(
    adapter: DatabaseClient,
    settings_table: str = "SiteSettings",
    column: str = "maintenanceMode",
) -> bool:
    """Return True if any settings row has the maintenance flag set."""
    rows = await adapter.select(
        settings_table,
        f'"{column}"',
        filters={column: True},
        limit=1,
    )
    return bool(rows)
