"""Tests for db.toml loading."""

import textwrap

import pytest
from pydantic import ValidationError

from cms_restore.config.loader import load_db_config
from cms_restore.config.models import RestoreConfig, TableNames


def _write(tmp_path, content: str):
    path = tmp_path / "db.toml"
    path.write_text(textwrap.dedent(content))
    return path


class TestLoadDbConfig:
    """load_db_config reads profiles and the optional [restore] section."""

    def test_profiles(self, tmp_path):
        path = _write(tmp_path, """
            [profiles.local]
            url = "postgresql://localhost/site"
            description = "Local"

            [profiles.prod]
            url = "postgresql://u:[YOUR-PASSWORD]@db/site"
            db_password = "s3cret"
        """)
        config = load_db_config(path)
        assert set(config.profiles) == {"local", "prod"}
        assert config.profiles["local"].description == "Local"
        assert config.profiles["local"].provider == "postgres"
        assert config.profiles["prod"].db_password == "s3cret"

    def test_restore_defaults(self, tmp_path):
        path = _write(tmp_path, """
            [profiles.local]
            url = "postgresql://localhost/site"
        """)
        config = load_db_config(path)
        assert config.restore == RestoreConfig()
        assert config.restore.tables.post_tags == "PostTag"
        assert config.restore.maintenance_column == "maintenanceMode"
        assert config.restore.jsonb_columns == []

    def test_restore_overrides(self, tmp_path):
        path = _write(tmp_path, """
            [profiles.local]
            url = "postgresql://localhost/site"

            [restore]
            audit_action = "restore_done"
            jsonb_columns = ["faq"]

            [restore.tables]
            users = "users"
        """)
        restore = load_db_config(path).restore
        assert restore.audit_action == "restore_done"
        assert restore.jsonb_columns == ["faq"]
        assert restore.tables.users == "users"
        assert restore.tables.posts == "Post"

    def test_default_path_is_cwd(self, tmp_path, monkeypatch):
        _write(tmp_path, """
            [profiles.local]
            url = "postgresql://localhost/site"
        """)
        monkeypatch.chdir(tmp_path)
        assert "local" in load_db_config().profiles

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Database config not found"):
            load_db_config(tmp_path / "missing.toml")

    def test_invalid_profile(self, tmp_path):
        path = _write(tmp_path, """
            [profiles.local]
            description = "no url"
        """)
        with pytest.raises(ValidationError):
            load_db_config(path)


class TestTableNames:
    def test_defaults_follow_model_names(self):
        tables = TableNames()
        assert tables.users == "User"
        assert tables.settings == "SiteSettings"
        assert tables.activity_log == "ActivityLog"
