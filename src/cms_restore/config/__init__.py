"""Configuration management: profiles, restore settings, TOML loading.

Usage:
    >>> from cms_restore.config import load_db_config, DatabaseProfile, RestoreConfig
"""

from cms_restore.config.loader import load_db_config
from cms_restore.config.models import (
    DatabaseConfig,
    DatabaseProfile,
    RestoreConfig,
    TableNames,
)

__all__ = [
    "load_db_config",
    "DatabaseConfig",
    "DatabaseProfile",
    "RestoreConfig",
    "TableNames",
]
