"""Database adapter factory.

Resolves which ``db.toml`` profile to use and builds an
``AsyncPostgresAdapter`` for it.

Profile resolution order:
1. ``{env_prefix}DB_PROFILE`` environment variable
2. ``.db-profile`` lock file in the current working directory (written by
   ``cms-restore connect`` after a successful connection test)
3. ``ProfileNotFoundError``
"""

import logging
import os
from pathlib import Path
from urllib.parse import quote

from cms_restore.adapters.base import DatabaseClient
from cms_restore.adapters.postgres import AsyncPostgresAdapter
from cms_restore.config.loader import load_db_config
from cms_restore.config.models import DatabaseProfile

logger = logging.getLogger(__name__)

# Profile lock file path
_PROFILE_LOCK_FILE = Path.cwd() / ".db-profile"


# ============================================================================
# Profile Lock File Operations
# ============================================================================


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


def read_profile_lock() -> str | None:
    """Read profile name from lock file.

    Returns:
        Profile name if lock file exists, None otherwise
    """
    if _PROFILE_LOCK_FILE.exists():
        return _PROFILE_LOCK_FILE.read_text().strip()
    return None


def write_profile_lock(profile_name: str) -> None:
    """Write profile name to lock file.

    Only call this after a successful connection test.
    """
    _PROFILE_LOCK_FILE.write_text(profile_name)


def clear_profile_lock() -> None:
    """Remove profile lock file."""
    if _PROFILE_LOCK_FILE.exists():
        _PROFILE_LOCK_FILE.unlink()


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from env var or lock file.

    Args:
        env_prefix: Prefix for the environment variable
            (``"APP_"`` reads ``APP_DB_PROFILE``).

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    env_profile = os.environ.get(f"{env_prefix}DB_PROFILE")
    if env_profile:
        return env_profile

    lock_profile = read_profile_lock()
    if lock_profile:
        return lock_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Run: {env_prefix}DB_PROFILE=<name> cms-restore connect"
    )


def get_active_profile(env_prefix: str = "") -> tuple[str, DatabaseProfile]:
    """Get active profile name and configuration.

    Raises:
        ProfileNotFoundError: If no profile configured
        KeyError: If profile not found in db.toml
    """
    profile_name = get_active_profile_name(env_prefix=env_prefix)
    config = load_db_config()

    if profile_name not in config.profiles:
        raise KeyError(
            f"Profile '{profile_name}' not found in db.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )

    return profile_name, config.profiles[profile_name]


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Replaces the ``[YOUR-PASSWORD]`` placeholder with the URL-encoded
    ``db_password`` when both are present.
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


# ============================================================================
# Adapter Factory
# ============================================================================


async def get_adapter(
    profile_name: str | None = None,
    env_prefix: str = "",
    database_url: str | None = None,
    jsonb_columns: list[str] | None = None,
) -> DatabaseClient:
    """Create a database adapter.

    A new adapter is created on every call; callers own it and must
    ``await adapter.close()``.

    Args:
        profile_name: Profile from db.toml.  Resolved from the environment
            or lock file when ``None``.
        env_prefix: Prefix for ``DB_PROFILE`` lookup.
        database_url: Direct connection URL; bypasses profile resolution.
        jsonb_columns: Column names that need JSONB casts on write.

    Raises:
        ProfileNotFoundError: If no profile can be resolved.
        KeyError: If the profile is not in db.toml.
    """
    if database_url is None:
        if profile_name is None:
            profile_name = get_active_profile_name(env_prefix=env_prefix)
        config = load_db_config()
        if profile_name not in config.profiles:
            available = ", ".join(config.profiles.keys())
            raise KeyError(f"Profile '{profile_name}' not found. Available: {available}")
        profile = config.profiles[profile_name]
        if profile.provider != "postgres":
            logger.warning(
                f"Profile '{profile_name}' declares provider '{profile.provider}'; "
                f"connecting with the PostgreSQL adapter"
            )
        database_url = resolve_url(profile)

    return AsyncPostgresAdapter(
        database_url=database_url,
        jsonb_columns=jsonb_columns,
    )
