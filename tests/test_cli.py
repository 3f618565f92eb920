"""Tests for the cms-restore CLI commands."""

import argparse
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import add_backup, make_envelope

from cms_restore.cli import (
    _restore_config,
    cmd_backups,
    cmd_connect,
    cmd_restore,
    cmd_status,
    cmd_validate,
    main,
)
from cms_restore.config.models import RestoreConfig


@pytest.fixture
def cli_store(store):
    """Route the CLI's adapter and config lookups to the in-memory store."""
    with patch("cms_restore.cli.get_adapter", AsyncMock(return_value=store)), \
            patch("cms_restore.cli._restore_config", return_value=RestoreConfig()):
        yield store


def _args(**kwargs) -> argparse.Namespace:
    return argparse.Namespace(env_prefix="", **kwargs)


# ============================================================================
# Test: Argument Parsing
# ============================================================================


class TestMain:
    def test_env_prefix_passed_to_command(self):
        with patch("sys.argv", ["cms-restore", "--env-prefix", "APP_", "status"]):
            with patch("cms_restore.cli.cmd_status", return_value=0) as mock_status:
                assert main() == 0
        assert mock_status.call_args[0][0].env_prefix == "APP_"

    def test_restore_arguments(self):
        with patch("sys.argv", ["cms-restore", "restore", "42", "--user-id", "9", "-y"]):
            with patch("cms_restore.cli.cmd_restore", return_value=0) as mock_restore:
                main()
        args = mock_restore.call_args[0][0]
        assert (args.backup_id, args.user_id, args.yes) == (42, 9, True)

    def test_restore_requires_user_id(self):
        with patch("sys.argv", ["cms-restore", "restore", "42"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 2

    def test_backup_id_must_be_int(self):
        with patch("sys.argv", ["cms-restore", "validate", "latest"]):
            with pytest.raises(SystemExit):
                main()

    def test_command_required(self):
        with patch("sys.argv", ["cms-restore"]):
            with pytest.raises(SystemExit):
                main()


# ============================================================================
# Test: restore
# ============================================================================


class TestCmdRestore:
    def test_restores_with_yes(self, cli_store):
        add_backup(cli_store, 42, make_envelope(users=[{"id": 1, "password": "x"}]))

        assert cmd_restore(_args(backup_id=42, user_id=9, yes=True)) == 0

        assert cli_store.row("User", 1) is not None
        assert len(cli_store.rows("ActivityLog")) == 1
        assert cli_store.closed

    def test_failure_returns_one(self, cli_store):
        add_backup(cli_store, 42, make_envelope(), status="PENDING")

        assert cmd_restore(_args(backup_id=42, user_id=9, yes=True)) == 1
        assert cli_store.closed

    def test_partial_failure_returns_one(self, cli_store):
        add_backup(cli_store, 42, make_envelope(tags=[{"id": 1}]))
        cli_store.fail_on("insert_with_id", "Tag", 1)

        assert cmd_restore(_args(backup_id=42, user_id=9, yes=True)) == 1
        assert cli_store.row("SiteSettings", 1)["maintenanceMode"] is False

    def test_store_error_returns_one(self, cli_store):
        add_backup(cli_store, 42, make_envelope(users=[{"id": 1, "password": "x"}]))
        cli_store.select = AsyncMock(side_effect=ConnectionRefusedError("db down"))

        assert cmd_restore(_args(backup_id=42, user_id=9, yes=True)) == 1
        assert cli_store.closed
        assert cli_store.writes == []

    def test_prompt_declined(self, cli_store):
        add_backup(cli_store, 42, make_envelope(users=[{"id": 1}]))
        with patch("builtins.input", return_value="n"):
            assert cmd_restore(_args(backup_id=42, user_id=9, yes=False)) == 0
        assert cli_store.writes == []

    def test_prompt_accepted(self, cli_store):
        add_backup(cli_store, 42, make_envelope(users=[{"id": 1, "password": "x"}]))
        with patch("builtins.input", return_value="yes"):
            assert cmd_restore(_args(backup_id=42, user_id=9, yes=False)) == 0
        assert cli_store.row("User", 1) is not None

    def test_no_profile(self):
        from cms_restore.factory import ProfileNotFoundError

        with patch("cms_restore.cli.get_adapter", AsyncMock(side_effect=ProfileNotFoundError("none"))), \
                patch("cms_restore.cli._restore_config", return_value=RestoreConfig()):
            assert cmd_restore(_args(backup_id=42, user_id=9, yes=True)) == 1


# ============================================================================
# Test: validate / backups
# ============================================================================


class TestCmdValidate:
    def test_valid(self, cli_store):
        add_backup(cli_store, 42, make_envelope(users=[{"id": 1}]))
        assert cmd_validate(_args(backup_id=42)) == 0
        assert cli_store.writes == []

    def test_invalid(self, cli_store):
        add_backup(cli_store, 42, make_envelope(users=[{"id": 1}, {"id": 1}]))
        assert cmd_validate(_args(backup_id=42)) == 1

    def test_not_found(self, cli_store):
        assert cmd_validate(_args(backup_id=404)) == 1
        assert cli_store.closed

    def test_store_error_returns_one(self, cli_store):
        cli_store.select = AsyncMock(side_effect=ConnectionRefusedError("db down"))
        assert cmd_validate(_args(backup_id=42)) == 1
        assert cli_store.closed


class TestCmdBackups:
    def test_lists(self, cli_store):
        add_backup(cli_store, 1, make_envelope())
        assert cmd_backups(_args(limit=10)) == 0
        assert cli_store.closed

    def test_empty(self, cli_store):
        assert cmd_backups(_args(limit=10)) == 0


# ============================================================================
# Test: connect / status
# ============================================================================


class TestCmdConnect:
    def test_success_writes_lock(self):
        adapter = MagicMock()
        adapter.test_connection = AsyncMock(return_value=True)
        adapter.close = AsyncMock()
        with patch("cms_restore.cli.read_profile_lock", return_value=None), \
                patch("cms_restore.cli.get_active_profile_name", return_value="local"), \
                patch("cms_restore.cli.get_adapter", AsyncMock(return_value=adapter)), \
                patch("cms_restore.cli.write_profile_lock") as mock_write:
            assert cmd_connect(_args()) == 0
        mock_write.assert_called_once_with("local")
        adapter.close.assert_awaited_once()

    def test_failure_leaves_lock(self):
        adapter = MagicMock()
        adapter.test_connection = AsyncMock(side_effect=OSError("refused"))
        adapter.close = AsyncMock()
        with patch("cms_restore.cli.read_profile_lock", return_value="old"), \
                patch("cms_restore.cli.get_active_profile_name", return_value="local"), \
                patch("cms_restore.cli.get_adapter", AsyncMock(return_value=adapter)), \
                patch("cms_restore.cli.write_profile_lock") as mock_write:
            assert cmd_connect(_args()) == 1
        mock_write.assert_not_called()


class TestCmdStatus:
    def test_no_profile(self):
        with patch("cms_restore.cli.read_profile_lock", return_value=None):
            assert cmd_status(_args()) == 0


class TestRestoreConfigLookup:
    def test_defaults_without_db_toml(self):
        with patch("cms_restore.cli.load_db_config", side_effect=FileNotFoundError("x")):
            assert _restore_config() == RestoreConfig()

