"""Dependency-ordered restore of a snapshot's entity collections.

Collections are applied in foreign-key order (users, categories, tags,
posts with their tags and versions, comments, settings, ads, redirects)
so that no write references an identity that has not been restored yet.
Every entity is upserted by its original identity; nothing is ever
re-keyed.

Collections absent from the snapshot are skipped, leaving live rows of
that kind untouched.  The pass is sequential and stops at the first
failing write.

Usage:
    from cms_restore.restore.restorer import restore_entities

    stats = await restore_entities(adapter, envelope.data)
"""

import logging

from cms_restore.adapters.base import DatabaseClient
from cms_restore.config.models import TableNames
from cms_restore.restore.errors import EntityWriteError
from cms_restore.restore.models import (
    EntityKind,
    RestoreStats,
    SiteSettingsRecord,
    SnapshotData,
    SnapshotRecord,
)
from cms_restore.restore.reconcile import reconcile_post_tags

logger = logging.getLogger(__name__)


async def upsert_by_identity(
    adapter: DatabaseClient,
    table: str,
    record: SnapshotRecord,
    pk: str = "id",
) -> bool:
    """Create or update the row whose identity is ``record.id``.

    An existing row gets the record's scalar columns; a missing row is
    created with exactly that identity via ``insert_with_id``.

    Returns:
        True if a new row was created, False if an existing one was updated.
    """
    existing = await adapter.select(table, pk, filters={pk: record.id})
    if existing:
        columns = record.scalar_columns()
        if columns:
            await adapter.update(table, data=columns, filters={pk: record.id})
        return False

    await adapter.insert_with_id(
        table,
        data={pk: record.id, **record.create_columns()},
        pk=pk,
    )
    return True


async def restore_entities(
    adapter: DatabaseClient,
    data: SnapshotData,
    tables: TableNames | None = None,
    uncredentialed: list[int] | None = None,
) -> RestoreStats:
    """Apply every collection present in ``data`` to the live store.

    Args:
        adapter: Database adapter implementing ``DatabaseClient`` Protocol.
        data: Parsed snapshot data.
        tables: Physical table names (defaults to the site schema).
        uncredentialed: When given, receives the ids of users created with
            the empty credential placeholder.

    Returns:
        Per-kind count of successful upserts.

    Raises:
        EntityWriteError: On the first failing write.  Rows written before
            it stay written.
    """
    tables = tables or TableNames()
    stats = RestoreStats()

    # 1. Users
    if data.users is not None:
        for user in data.users:
            created = await _upsert(adapter, EntityKind.USERS.value, tables.users, user)
            if created and not user.has_credential:
                logger.warning(
                    f"User {user.id} restored without a credential; "
                    f"an empty password placeholder was stored"
                )
                if uncredentialed is not None:
                    uncredentialed.append(user.id)
            stats.increment(EntityKind.USERS)
        logger.info(f"Restored {stats.users} users")

    # 2. Categories
    if data.categories is not None:
        for category in data.categories:
            await _upsert(adapter, EntityKind.CATEGORIES.value, tables.categories, category)
            stats.increment(EntityKind.CATEGORIES)
        logger.info(f"Restored {stats.categories} categories")

    # 3. Tags
    if data.tags is not None:
        for tag in data.tags:
            await _upsert(adapter, EntityKind.TAGS.value, tables.tags, tag)
            stats.increment(EntityKind.TAGS)
        logger.info(f"Restored {stats.tags} tags")

    # 4. Posts, each followed by its tag links and versions
    if data.posts is not None:
        for post in data.posts:
            await _upsert(adapter, EntityKind.POSTS.value, tables.posts, post)

            if post.tags is not None:
                try:
                    await reconcile_post_tags(
                        adapter, post.id, post.tags, tables.post_tags
                    )
                except Exception as e:
                    raise EntityWriteError("post_tags", post.id, e) from e

            for version in post.versions or []:
                if version.post_id is None:
                    version.post_id = post.id
                await _upsert(adapter, "post_versions", tables.post_versions, version)

            stats.increment(EntityKind.POSTS)
        logger.info(f"Restored {stats.posts} posts")

    # 5. Comments, parents (lower ids) first
    if data.comments is not None:
        for comment in sorted(data.comments, key=lambda c: c.id):
            await _upsert(adapter, EntityKind.COMMENTS.value, tables.comments, comment)
            stats.increment(EntityKind.COMMENTS)
        logger.info(f"Restored {stats.comments} comments")

    # 6. Settings singleton
    if data.settings is not None:
        if data.settings.id is None:
            logger.warning("Snapshot settings carry no id; settings left untouched")
        else:
            await _restore_settings(adapter, tables.settings, data.settings)
            stats.increment(EntityKind.SETTINGS)

    # 7. Ads
    if data.ads is not None:
        for ad in data.ads:
            await _upsert(adapter, EntityKind.ADS.value, tables.ads, ad)
            stats.increment(EntityKind.ADS)
        logger.info(f"Restored {stats.ads} ads")

    # 8. Redirects
    if data.redirects is not None:
        for redirect in data.redirects:
            await _upsert(adapter, EntityKind.REDIRECTS.value, tables.redirects, redirect)
            stats.increment(EntityKind.REDIRECTS)
        logger.info(f"Restored {stats.redirects} redirects")

    return stats


async def _upsert(
    adapter: DatabaseClient,
    kind: str,
    table: str,
    record: SnapshotRecord,
) -> bool:
    """``upsert_by_identity`` with failures tagged by kind and identity."""
    try:
        return await upsert_by_identity(adapter, table, record)
    except Exception as e:
        raise EntityWriteError(kind, record.id, e) from e


async def _restore_settings(
    adapter: DatabaseClient,
    table: str,
    settings: SiteSettingsRecord,
) -> None:
    """Upsert the settings singleton without ever adding a second row.

    When the live row has a different identity than the snapshot's, the
    live row is updated in place and keeps its identity.
    """
    try:
        existing = await adapter.select(table, "id", filters={"id": settings.id})
        live = [] if existing else await adapter.select(table, "id", limit=1)
        if not live:
            await upsert_by_identity(adapter, table, settings)
            return

        live_id = live[0]["id"]
        logger.warning(
            f"Snapshot settings id {settings.id} differs from live settings id "
            f"{live_id}; updating the live row"
        )
        columns = settings.scalar_columns()
        if columns:
            await adapter.update(table, data=columns, filters={"id": live_id})
    except Exception as e:
        raise EntityWriteError(EntityKind.SETTINGS.value, settings.id, e) from e
