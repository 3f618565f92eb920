"""CLI for inspecting and restoring site backups.

Usage:
    DB_PROFILE=local cms-restore connect
    cms-restore status
    cms-restore profiles
    cms-restore backups --limit 20
    cms-restore validate 42
    cms-restore restore 42 --user-id 9
    cms-restore restore 42 --user-id 9 --yes

Commands:
    connect   - Test the profile's connection and remember it
    status    - Show current connection status
    profiles  - List available profiles
    backups   - List recent backup records
    validate  - Check a backup's snapshot without writing anything
    restore   - Restore a completed backup into the live database
"""

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from cms_restore.adapters.base import DatabaseClient
from cms_restore.config.loader import load_db_config
from cms_restore.config.models import RestoreConfig
from cms_restore.factory import (
    ProfileNotFoundError,
    get_active_profile_name,
    get_adapter,
    read_profile_lock,
    write_profile_lock,
)
from cms_restore.restore import (
    EntityWriteError,
    RestoreError,
    list_backups,
    read_snapshot,
    restore_backup,
    validate_snapshot,
)

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _restore_config() -> RestoreConfig:
    """``[restore]`` settings from db.toml, or defaults when there is none."""
    try:
        return load_db_config().restore
    except FileNotFoundError:
        return RestoreConfig()


async def _open_adapter(args: argparse.Namespace, config: RestoreConfig) -> DatabaseClient | None:
    """Create an adapter for the active profile, reporting failures."""
    env_prefix = getattr(args, "env_prefix", "")
    try:
        return await get_adapter(
            env_prefix=env_prefix,
            jsonb_columns=config.jsonb_columns or None,
        )
    except (ProfileNotFoundError, FileNotFoundError, KeyError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return None


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_connect(args: argparse.Namespace) -> int:
    """Async implementation for connect command.

    Returns:
        0 on success, 1 on failure.
    """
    env_prefix = getattr(args, "env_prefix", "")

    previous_profile = read_profile_lock()

    try:
        profile_name = get_active_profile_name(env_prefix=env_prefix)
    except ProfileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    console.print("Connecting to database...", style="dim")

    try:
        adapter = await get_adapter(profile_name=profile_name, env_prefix=env_prefix)
        try:
            await adapter.test_connection()
        finally:
            await adapter.close()
    except Exception as e:
        console.print()
        console.print(f"[bold red]x[/bold red] Failed to connect to database: {e}")
        return 1

    write_profile_lock(profile_name)

    console.print()
    console.print(
        f"[bold green]v[/bold green] Connected to profile: "
        f"[bold cyan]{profile_name}[/bold cyan]"
    )

    if previous_profile and previous_profile != profile_name:
        console.print(
            f"\n[dim]Switched from[/dim] [bold]{previous_profile}[/bold] "
            f"[dim]to[/dim] [bold cyan]{profile_name}[/bold cyan]"
        )

    return 0


async def _async_backups(args: argparse.Namespace) -> int:
    """Async implementation for backups command.

    Returns:
        0 on success, 1 on failure.
    """
    config = _restore_config()
    adapter = await _open_adapter(args, config)
    if adapter is None:
        return 1

    try:
        backups = await list_backups(adapter, config.tables.backups, limit=args.limit)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    finally:
        await adapter.close()

    if not backups:
        console.print("[yellow]No backups found.[/yellow]")
        return 0

    table = Table(title="Backups", show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Filename")
    table.add_column("Type", style="dim")
    table.add_column("Status")
    table.add_column("Created", style="dim")

    for backup in backups:
        status_style = "green" if backup.restorable else "yellow"
        table.add_row(
            str(backup.id),
            backup.filename or "",
            backup.type or "",
            f"[{status_style}]{backup.status}[/{status_style}]",
            backup.created_at.strftime("%Y-%m-%d %H:%M") if backup.created_at else "",
        )

    console.print(table)
    return 0


async def _async_validate(args: argparse.Namespace) -> int:
    """Async implementation for validate command.

    Returns:
        0 if the snapshot is valid, 1 otherwise.
    """
    config = _restore_config()
    adapter = await _open_adapter(args, config)
    if adapter is None:
        return 1

    console.print(f"Validating backup: [bold cyan]{args.backup_id}[/bold cyan]")

    try:
        envelope = await read_snapshot(adapter, args.backup_id, config.tables.backups)
    except RestoreError as e:
        console.print(f"\n[bold red]x[/bold red] {e}")
        return 1
    except Exception as e:
        console.print(f"\n[bold red]x[/bold red] Failed to read backup: {e}")
        return 1
    finally:
        await adapter.close()

    report = validate_snapshot(envelope)

    counts = Table(title="Snapshot Contents", show_header=True, header_style="bold")
    counts.add_column("Kind", style="dim")
    counts.add_column("Rows", justify="right")
    for kind, count in report["counts"].items():
        counts.add_row(kind, str(count))
    console.print(counts)

    if report["errors"]:
        console.print(f"\n[red]Found {len(report['errors'])} errors:[/red]")
        for error in report["errors"]:
            console.print(f"   - {error}")

    if report["warnings"]:
        console.print(f"\n[yellow]Found {len(report['warnings'])} warnings:[/yellow]")
        for warning in report["warnings"]:
            console.print(f"   - {warning}")

    if report["valid"]:
        suffix = " (with warnings)" if report["warnings"] else ""
        console.print(f"\n[bold green]v[/bold green] Backup is valid{suffix}")
        return 0

    console.print("\n[bold red]x[/bold red] Backup is invalid")
    return 1


async def _async_restore(args: argparse.Namespace) -> int:
    """Async implementation for restore command.

    Returns:
        0 on success or when cancelled at the prompt, 1 on failure.
    """
    if not args.yes:
        console.print(
            f"[yellow]This will restore backup {args.backup_id} into the live database.[/yellow]"
        )
        console.print("   Existing rows with the same ids will be overwritten.")
        console.print("   The site is in maintenance mode while the restore runs.")
        response = input("Continue? [y/N] ")
        if response.lower() not in ["y", "yes"]:
            console.print("Cancelled.")
            return 0

    config = _restore_config()
    adapter = await _open_adapter(args, config)
    if adapter is None:
        return 1

    console.print("Restoring...", style="dim")

    try:
        stats = await restore_backup(adapter, args.backup_id, args.user_id, config)
    except RestoreError as e:
        console.print(f"\n[bold red]x[/bold red] Restore failed: {e}")
        if isinstance(e, EntityWriteError):
            console.print(
                "[yellow]The restore stopped partway: rows written before the "
                "failure remain and no audit record was written.[/yellow]"
            )
        return 1
    except Exception as e:
        console.print(f"\n[bold red]x[/bold red] Restore failed: {e}")
        return 1
    finally:
        await adapter.close()

    table = Table(title="Restored", show_header=True, header_style="bold")
    table.add_column("Kind", style="dim")
    table.add_column("Rows", justify="right")
    for kind, count in stats.model_dump().items():
        table.add_row(kind, str(count) if count else "-")

    console.print(table)
    console.print(f"[bold green]v[/bold green] Restore complete ({stats.total} rows).")
    return 0


# ============================================================================
# Sync command wrappers (cmd_status, cmd_profiles read local files only)
# ============================================================================


def cmd_connect(args: argparse.Namespace) -> int:
    """Test the active profile's connection and write the lock file."""
    return asyncio.run(_async_connect(args))


def cmd_status(args: argparse.Namespace) -> int:
    """Show current connection status.

    Reads only local files (lock file and TOML config) -- no database calls.

    Returns:
        0 always (informational command).
    """
    profile = read_profile_lock()

    if profile:
        table = Table(title="Connection Status", show_header=False)
        table.add_column("Key", style="dim")
        table.add_column("Value")

        table.add_row("Current profile", f"[bold cyan]{profile}[/bold cyan]")
        table.add_row("Profile source", ".db-profile (connected)")

        try:
            config = load_db_config()
            if profile in config.profiles:
                p = config.profiles[profile]
                table.add_row("Provider", p.provider)
                if p.description:
                    table.add_row("Description", p.description)
        except FileNotFoundError:
            table.add_row("Warning", "[yellow]db.toml not found[/yellow]")

        console.print(table)
    else:
        console.print("[yellow]No connected profile.[/yellow]")
        console.print(
            "[dim]Run:[/dim] [cyan]DB_PROFILE=<name> cms-restore connect[/cyan]"
        )

    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Returns:
        0 on success, 1 if db.toml not found.
    """
    try:
        config = load_db_config()
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    current = read_profile_lock()

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        name_style = "bold cyan" if name == current else ""
        table.add_row(
            marker,
            f"[{name_style}]{name}[/{name_style}]" if name_style else name,
            profile.provider,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = current profile")

    return 0


def cmd_backups(args: argparse.Namespace) -> int:
    """List recent backup records."""
    return asyncio.run(_async_backups(args))


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a backup's snapshot without writing."""
    return asyncio.run(_async_validate(args))


def cmd_restore(args: argparse.Namespace) -> int:
    """Restore a completed backup."""
    return asyncio.run(_async_restore(args))


# ============================================================================
# Main entry point
# ============================================================================


def main() -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="cms-restore",
        description="Inspect and restore site content backups",
    )

    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show restore progress log lines",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_connect = subparsers.add_parser(
        "connect",
        help="Test the profile's connection and remember it",
    )
    p_connect.set_defaults(func=cmd_connect)

    p_status = subparsers.add_parser(
        "status",
        help="Show current connection status",
    )
    p_status.set_defaults(func=cmd_status)

    p_profiles = subparsers.add_parser(
        "profiles",
        help="List available profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    p_backups = subparsers.add_parser(
        "backups",
        help="List recent backup records",
    )
    p_backups.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Maximum number of backups to list (default: 100)",
    )
    p_backups.set_defaults(func=cmd_backups)

    p_validate = subparsers.add_parser(
        "validate",
        help="Check a backup's snapshot without writing anything",
    )
    p_validate.add_argument("backup_id", type=int, help="Backup record id")
    p_validate.set_defaults(func=cmd_validate)

    p_restore = subparsers.add_parser(
        "restore",
        help="Restore a completed backup into the live database",
    )
    p_restore.add_argument("backup_id", type=int, help="Backup record id")
    p_restore.add_argument(
        "--user-id",
        type=int,
        required=True,
        help="Id of the user performing the restore (recorded on the audit log)",
    )
    p_restore.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    p_restore.set_defaults(func=cmd_restore)

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
