"""Pydantic models for database profiles and restore settings."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    provider: str = "postgres"


class TableNames(BaseModel):
    """Physical table names for every entity kind the restore touches.

    Defaults match the site's schema, where each table is named after its
    model.
    """

    users: str = "User"
    categories: str = "Category"
    tags: str = "Tag"
    posts: str = "Post"
    post_tags: str = "PostTag"
    post_versions: str = "PostVersion"
    comments: str = "Comment"
    settings: str = "SiteSettings"
    ads: str = "Ad"
    redirects: str = "Redirect"
    backups: str = "Backup"
    activity_log: str = "ActivityLog"


class RestoreConfig(BaseModel):
    """``[restore]`` section of db.toml."""

    tables: TableNames = Field(default_factory=TableNames)
    maintenance_column: str = "maintenanceMode"
    audit_action: str = "backup_restore_completed"
    jsonb_columns: list[str] = Field(default_factory=list)  # e.g. ["faq", "references"]


class DatabaseConfig(BaseModel):
    """Complete configuration from db.toml."""

    profiles: dict[str, DatabaseProfile]
    restore: RestoreConfig = Field(default_factory=RestoreConfig)
