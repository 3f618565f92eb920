"""Typed snapshot models.

Each entity kind the site exports is declared as a pydantic model whose
fields are exactly the scalar columns the restore may write.  Attributes
are snake_case; column names (and snapshot keys) are the camelCase aliases.

Nested collections and joined objects that the export embeds
(``post.author``, ``category.posts``, ...) are either declared with
``exclude=True`` when the restore needs them (post tags and versions) or
listed in ``RELATION_FIELDS`` so diagnostics can tell them apart from
genuinely unknown columns.  Neither kind is ever written.

Usage:
    from cms_restore.restore.models import SnapshotEnvelope

    envelope = SnapshotEnvelope.model_validate_json(content)
    for post in envelope.data.posts or []:
        columns = post.scalar_columns()   # {"title": ..., "authorId": ...}
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the store's timestamp format)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class EntityKind(str, Enum):
    """Top-level collections of a snapshot, in restore order.

    Definition order is the foreign-key-safe order: every kind only
    references kinds defined above it.
    """

    USERS = "users"
    CATEGORIES = "categories"
    TAGS = "tags"
    POSTS = "posts"
    COMMENTS = "comments"
    SETTINGS = "settings"
    ADS = "ads"
    REDIRECTS = "redirects"


RESTORE_ORDER: tuple[EntityKind, ...] = tuple(EntityKind)


class BackupStatus(str, Enum):
    """Lifecycle of a backup record.  The store writes upper-case values."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def _missing_(cls, value: object) -> "BackupStatus | None":
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


# ============================================================================
# Entity projections
# ============================================================================


class SnapshotRecord(BaseModel):
    """Base for every entity row found in a snapshot."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    # Embedded relation keys the export may include; never written.
    RELATION_FIELDS: ClassVar[frozenset[str]] = frozenset()
    # Timestamp columns that default to "now" when missing or null.
    NOW_DEFAULTS: ClassVar[tuple[str, ...]] = ()

    id: int

    @model_validator(mode="before")
    @classmethod
    def _default_missing_timestamps(cls, data: Any) -> Any:
        if isinstance(data, dict) and cls.NOW_DEFAULTS:
            data = dict(data)
            for key in cls.NOW_DEFAULTS:
                if data.get(key) is None:
                    data[key] = utcnow()
        return data

    @field_validator("*")
    @classmethod
    def _normalise_timestamps(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return to_naive_utc(value)
        return value

    def scalar_columns(self) -> dict[str, Any]:
        """Declared scalar columns present in the snapshot, identity excluded.

        Keys are column names.  Absent keys are omitted so an update never
        clears a column the snapshot did not carry; an explicit ``null`` is
        kept.
        """
        declared = set(type(self).model_fields) - {"id"}
        present = declared & self.model_fields_set
        return self.model_dump(include=present, by_alias=True)

    def create_columns(self) -> dict[str, Any]:
        """Columns for a brand-new row (identity still excluded).

        Raw inserts bypass the ORM's client-side ``@updatedAt``, so a
        missing ``updatedAt`` is filled with the current time.
        """
        columns = self.scalar_columns()
        if "updated_at" in type(self).model_fields and columns.get("updatedAt") is None:
            columns["updatedAt"] = utcnow()
        return columns

    def unknown_fields(self) -> set[str]:
        """Snapshot keys that are neither declared columns nor known relations."""
        return set(self.model_extra or {}) - self.RELATION_FIELDS


class UserRecord(SnapshotRecord):
    RELATION_FIELDS = frozenset({
        "posts", "comments", "activityLogs", "reviewedPosts",
        "postVersions", "backups", "accounts", "sessions",
    })

    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None
    bio: str | None = None
    job_title: str | None = None
    image: str | None = None
    email_verified: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_credential(self) -> bool:
        return bool(self.password)

    def scalar_columns(self) -> dict[str, Any]:
        # A credential is only ever overwritten, never cleared.
        columns = super().scalar_columns()
        if columns.get("password") is None:
            columns.pop("password", None)
        return columns

    def create_columns(self) -> dict[str, Any]:
        columns = super().create_columns()
        columns.setdefault("password", "")
        return columns


class CategoryRecord(SnapshotRecord):
    RELATION_FIELDS = frozenset({"posts", "_count"})

    name: str | None = None
    slug: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TagRecord(SnapshotRecord):
    RELATION_FIELDS = frozenset({"posts", "_count"})

    name: str | None = None
    slug: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PostTagRef(BaseModel):
    """One row of a post's ``tags`` join collection."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    post_id: int | None = None
    tag_id: int


class PostVersionRecord(SnapshotRecord):
    RELATION_FIELDS = frozenset({"post", "editor"})

    post_id: int | None = None
    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    status: str | None = None
    created_by: int | None = None
    change_description: str | None = None
    created_at: datetime | None = None


class PostRecord(SnapshotRecord):
    RELATION_FIELDS = frozenset({"author", "category", "comments", "reviewer", "_count"})

    title: str | None = None
    slug: str | None = None
    content: str | None = None
    excerpt: str | None = None
    status: str | None = None
    author_id: int | None = None
    category_id: int | None = None
    reviewer_id: int | None = None
    featured_image: str | None = None
    featured_image_alt: str | None = None
    is_featured: bool | None = None
    show_in_slider: bool | None = None
    show_in_popular: bool | None = None
    show_in_latest: bool | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    focus_keyword: str | None = None
    faq: Any = None
    references: Any = None
    views: int | None = None
    share_count: int | None = None
    preview_token: str | None = None
    preview_expires_at: datetime | None = None
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    tags: list[PostTagRef] | None = Field(default=None, exclude=True)
    versions: list[PostVersionRecord] | None = Field(default=None, exclude=True)


class CommentRecord(SnapshotRecord):
    RELATION_FIELDS = frozenset({"post", "user", "parent", "replies"})

    content: str | None = None
    name: str | None = None
    email: str | None = None
    website: str | None = None
    status: str | None = None
    post_id: int | None = None
    user_id: int | None = None
    parent_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SiteSettingsRecord(SnapshotRecord):
    # Singleton: restored only when the exported row carries its identity.
    id: int | None = None

    site_name: str | None = None
    site_description: str | None = None
    contact_email: str | None = None
    social_facebook: str | None = None
    social_twitter: str | None = None
    social_instagram: str | None = None
    social_pinterest: str | None = None
    social_youtube: str | None = None
    google_analytics_id: str | None = None
    google_search_console: str | None = None
    ezoic_id: str | None = None
    google_ad_sense_id: str | None = None
    ads_txt: str | None = None
    header_logo: str | None = None
    footer_logo: str | None = None
    logo_subheading: str | None = None
    logo_width: int | None = None
    logo_height: int | None = None
    use_default_logo_size: bool | None = None
    spam_keywords: str | None = None
    blocked_ips: str | None = None
    maintenance_mode: bool | None = None
    auto_backup_enabled: bool | None = None
    auto_backup_frequency: str | None = None
    last_auto_backup: datetime | None = None
    smtp_settings: str | None = None  # JSON text
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AdRecord(SnapshotRecord):
    NOW_DEFAULTS = ("createdAt",)

    name: str | None = None
    type: str | None = None
    location: str | None = None
    content: str | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RedirectRecord(SnapshotRecord):
    NOW_DEFAULTS = ("createdAt", "updatedAt")

    source: str | None = None
    destination: str | None = None
    type: str | None = None
    is_active: bool | None = None
    hits: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ============================================================================
# Envelope
# ============================================================================


class SnapshotData(BaseModel):
    """The ``data`` object of an envelope.  Every collection is optional."""

    model_config = ConfigDict(extra="allow")

    users: list[UserRecord] | None = None
    categories: list[CategoryRecord] | None = None
    tags: list[TagRecord] | None = None
    posts: list[PostRecord] | None = None
    comments: list[CommentRecord] | None = None
    settings: SiteSettingsRecord | None = None
    ads: list[AdRecord] | None = None
    redirects: list[RedirectRecord] | None = None

    def present_kinds(self) -> list[EntityKind]:
        """Kinds carried by this snapshot, in restore order."""
        return [kind for kind in RESTORE_ORDER if getattr(self, kind.value) is not None]


class SnapshotEnvelope(BaseModel):
    """Top-level export document stored in ``Backup.content``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    exported_at: datetime | None = None
    export_type: str | None = None
    backup_id: int | None = None
    filename: str | None = None
    description: str | None = None
    data: SnapshotData


class BackupSummary(BaseModel):
    """Backup row without its content, for listings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: int
    filename: str | None = None
    type: str | None = None
    status: str
    created_at: datetime | None = None

    @property
    def restorable(self) -> bool:
        try:
            return BackupStatus(self.status) is BackupStatus.COMPLETED
        except ValueError:
            return False


# ============================================================================
# Stats
# ============================================================================


class RestoreStats(BaseModel):
    """Per-kind count of successful upserts."""

    users: int = 0
    categories: int = 0
    tags: int = 0
    posts: int = 0
    comments: int = 0
    settings: int = 0
    ads: int = 0
    redirects: int = 0

    def increment(self, kind: EntityKind) -> None:
        setattr(self, kind.value, getattr(self, kind.value) + 1)

    @property
    def total(self) -> int:
        return sum(getattr(self, kind.value) for kind in RESTORE_ORDER)
