"""Post/tag join-table reconciliation."""

from cms_restore.adapters.base import DatabaseClient
from cms_restore.restore.models import PostTagRef


async def reconcile_post_tags(
    adapter: DatabaseClient,
    post_id: int,
    tag_refs: list[PostTagRef],
    post_tags_table: str = "PostTag",
) -> list[int]:
    """Replace a post's tag associations with the snapshot's tag set.

    Deletes every association row of ``post_id`` and inserts one row per
    referenced tag.  This is a replacement, not a diff: tags linked live but
    absent from the snapshot are dropped.  Repeated references to the same
    tag produce a single row.

    Args:
        adapter: Database adapter.
        post_id: Restored post identity.
        tag_refs: The post's ``tags`` collection from the snapshot.
        post_tags_table: Join table name.

    Returns:
        Tag ids linked to the post, in snapshot order.
    """
    tag_ids = list(dict.fromkeys(ref.tag_id for ref in tag_refs))

    await adapter.delete(post_tags_table, filters={"postId": post_id})
    for tag_id in tag_ids:
        await adapter.insert(post_tags_table, {"postId": post_id, "tagId": tag_id})

    return tag_ids
