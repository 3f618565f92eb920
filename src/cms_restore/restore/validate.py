"""Pre-restore snapshot checks.

``validate_snapshot`` is sync and does no I/O: it inspects an already
parsed envelope and reports what a restore would do with it.

Usage:
    report = validate_snapshot(envelope)
    if report["errors"]:
        ...
"""

from typing import Any

from cms_restore.restore.models import (
    RESTORE_ORDER,
    EntityKind,
    SnapshotEnvelope,
    SnapshotRecord,
)


def validate_snapshot(envelope: SnapshotEnvelope) -> dict:
    """Check a parsed snapshot for problems a restore would run into.

    Errors:
        - the same identity appears twice within one collection

    Warnings:
        - references to users, categories, posts, tags or parent comments
          whose identity is not in the snapshot (they must already exist
          live or the write will fail)
        - columns the restore does not know and will drop
        - a settings object without an id (it will be skipped)
        - unrecognised top-level collections (ignored)

    Returns:
        Dict with ``valid`` (bool), ``errors`` (list[str]), ``warnings``
        (list[str]) and ``counts`` (dict of kind name to row count, only for
        kinds present in the snapshot).
    """
    data = envelope.data
    errors: list[str] = []
    warnings: list[str] = []
    counts: dict[str, int] = {}

    ids: dict[EntityKind, set[int]] = {}
    for kind in RESTORE_ORDER:
        value = getattr(data, kind.value)
        if value is None:
            continue
        records: list[SnapshotRecord] = value if isinstance(value, list) else [value]
        counts[kind.value] = len(records)

        seen: set[int] = set()
        for record in records:
            if record.id is None:
                continue
            if record.id in seen:
                errors.append(f"Duplicate {kind.value} id {record.id}")
            seen.add(record.id)
        ids[kind] = seen

        for record in records:
            unknown = record.unknown_fields()
            if unknown:
                warnings.append(
                    f"{kind.value} id={record.id}: unknown columns will be "
                    f"dropped: {', '.join(sorted(unknown))}"
                )

    if data.settings is not None and data.settings.id is None:
        warnings.append("Settings have no id and will not be restored")

    for key in sorted(data.model_extra or {}):
        warnings.append(f"Unrecognised collection '{key}' will be ignored")

    users = ids.get(EntityKind.USERS, set())
    categories = ids.get(EntityKind.CATEGORIES, set())
    tags = ids.get(EntityKind.TAGS, set())
    posts = ids.get(EntityKind.POSTS, set())
    comments = ids.get(EntityKind.COMMENTS, set())

    for post in data.posts or []:
        _check_ref(warnings, "post", post.id, "authorId", post.author_id, users)
        _check_ref(warnings, "post", post.id, "categoryId", post.category_id, categories)
        for ref in post.tags or []:
            _check_ref(warnings, "post", post.id, "tagId", ref.tag_id, tags)
        for version in post.versions or []:
            if version.post_id is not None and version.post_id != post.id:
                warnings.append(
                    f"Post version {version.id} is nested under post {post.id} "
                    f"but has postId {version.post_id}"
                )

    for comment in data.comments or []:
        _check_ref(warnings, "comment", comment.id, "postId", comment.post_id, posts)
        _check_ref(warnings, "comment", comment.id, "userId", comment.user_id, users)
        _check_ref(warnings, "comment", comment.id, "parentId", comment.parent_id, comments)

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "counts": counts,
    }


def _check_ref(
    warnings: list[str],
    owner: str,
    owner_id: int,
    field: str,
    value: Any,
    known: set[int],
) -> None:
    if value is not None and value not in known:
        warnings.append(f"Orphaned {owner} {owner_id}: {field} {value} not in backup")
