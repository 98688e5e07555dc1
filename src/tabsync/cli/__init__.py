"""CLI module for pushing and pulling tabbed schema files.

Usage:
    tabsync --tab ./schema push shop --dry-run-push
    tabsync --profile local push shop --drop-scratch --push-script-export-path push.sql
    tabsync --host db.internal --user deploy pull shop
    tabsync profiles

Commands:
    push      - Apply the schema files to the live database
    pull      - Export the live database schema into the schema files
    profiles  - List server profiles from tabsync.toml

Push and pull report their outcome through logs and a summary table and
always exit 0 once they ran; only configuration errors exit 1.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from tabsync.config.loader import DEFAULT_CONFIG_FILE, load_config
from tabsync.config.models import SyncSettings, TabsyncConfig
from tabsync.factory import ProfileNotFoundError, resolve_profile
from tabsync.pull import run_pull
from tabsync.push import run_push
from tabsync.schema.models import PullResult, PushResult

console = Console()

DEFAULT_SCHEMA_DIR = "./skeema-repo-root"


class ConfigurationError(Exception):
    """Raised when the command line and config file can't form valid settings."""

    pass


# ============================================================================
# Setup helpers
# ============================================================================


def configure_logging(level: str = "INFO") -> None:
    """Route all log records through a rich handler on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def default_push_script_path() -> Path:
    """``push_script_<timestamp>.sql`` in the current directory."""
    return Path.cwd() / f"push_script_{datetime.now():%Y-%m-%d-%H-%M-%S}.sql"


def _load_config(args: argparse.Namespace) -> TabsyncConfig | None:
    """Load the TOML config; an absent default file is not an error."""
    if args.config is not None:
        return load_config(args.config)
    default_path = Path.cwd() / DEFAULT_CONFIG_FILE
    if default_path.exists():
        return load_config(default_path)
    return None


def build_settings(args: argparse.Namespace) -> SyncSettings:
    """Merge command line, environment and config file into ``SyncSettings``.

    Precedence: command line > environment > config file > defaults.

    Raises:
        ConfigurationError: On an unreadable config, unknown profile, or
            invalid values.
    """
    try:
        config = _load_config(args)
        server = resolve_profile(
            config,
            args.profile,
            host=args.host,
            port=args.port,
            user=args.user,
            password=args.password,
        )
    except (FileNotFoundError, ValueError, ProfileNotFoundError) as e:
        raise ConfigurationError(str(e)) from e

    config = config or TabsyncConfig()
    push = config.push
    schema_dir = args.tab or config.schema_dir or DEFAULT_SCHEMA_DIR

    values: dict = {
        "server": server,
        "live_db": args.livedbname,
        "schema_dir": Path(schema_dir),
        "tools": config.tools,
    }
    if args.command == "push":
        values.update(
            scratch_db=args.scratch_db or push.scratch_db,
            retain_scratch=(
                push.retain_scratch if args.retain_scratch is None else args.retain_scratch
            ),
            push_script_path=args.push_script_export_path or default_push_script_path(),
            dry_run=args.dry_run_push,
            diff_concurrency=args.diff_concurrency or push.diff_concurrency,
            on_diff_failure=args.on_diff_failure or push.on_diff_failure,
        )

    try:
        return SyncSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


# ============================================================================
# Reporting
# ============================================================================


def _print_push_summary(result: PushResult) -> None:
    table = Table(title="Push Summary", show_header=False)
    table.add_column("Key", style="dim")
    table.add_column("Value")

    reconciliation = result.reconciliation
    if reconciliation is not None:
        table.add_row("Tables to create", ", ".join(reconciliation.only_in_files) or "-")
        table.add_row("Tables to drop", ", ".join(reconciliation.only_live) or "-")
        table.add_row("Tables diffed", ", ".join(reconciliation.in_both) or "-")
        table.add_row("Tables created or dropped", str(reconciliation.change_count))
    if result.load is not None:
        table.add_row("Sourced into scratch", f"{len(result.load.sourced)}/{result.load.total}")
        if result.load.failed:
            table.add_row("Not sourced", f"[yellow]{', '.join(result.load.failed)}[/yellow]")
    if result.script_path is not None:
        table.add_row("Push script", str(result.script_path))
    table.add_row("Executed", "yes" if result.executed else "no")
    if result.scratch_dropped:
        table.add_row("Scratch database", "dropped")

    console.print(table)
    if result.success:
        console.print("[bold green]v[/bold green] Push complete")
    else:
        console.print(f"[bold red]x[/bold red] Push failed: {result.error}")


def _print_pull_summary(result: PullResult) -> None:
    if result.success:
        console.print(
            f"[bold green]v[/bold green] Schema pulled into [cyan]{result.output_dir}[/cyan] "
            f"({result.deleted_files} old files removed)"
        )
    else:
        console.print(f"[bold red]x[/bold red] Pull failed: {result.error}")


# ============================================================================
# Command implementations
# ============================================================================


async def _async_push(settings: SyncSettings) -> PushResult:
    return await run_push(settings)


async def _async_pull(settings: SyncSettings) -> PullResult:
    return await run_pull(settings)


def cmd_push(args: argparse.Namespace) -> int:
    """Apply the schema files to the live database.

    Wraps the async implementation with ``asyncio.run()``.

    Returns:
        0 once the push ran (outcome is in the logs), 1 on configuration errors.
    """
    try:
        settings = build_settings(args)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    result = asyncio.run(_async_push(settings))
    _print_push_summary(result)
    if settings.dry_run and result.script is not None:
        console.print("[bold yellow]DRY RUN[/bold yellow] - Push script not executed.")
    return 0


def cmd_pull(args: argparse.Namespace) -> int:
    """Regenerate the schema files from the live database.

    Wraps the async implementation with ``asyncio.run()``.
    """
    try:
        settings = build_settings(args)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    result = asyncio.run(_async_pull(settings))
    _print_pull_summary(result)
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List server profiles from the config file.

    Reads only the local TOML config -- no database calls.

    Returns:
        0 on success, 1 if the config can't be read.
    """
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    table = Table(title="Server Profiles", show_header=True, header_style="bold")
    table.add_column("Profile")
    table.add_column("Server")
    table.add_column("User")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        table.add_row(
            name,
            f"{profile.host}:{profile.port}",
            profile.user,
            profile.description or "",
        )

    console.print(table)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = argparse.ArgumentParser(
        prog="tabsync",
        description="Push and pull tabbed MySQL schema files (<table>.sql) to and from a live database",
    )

    parser.add_argument("--config", type=Path, default=None, help=f"TOML config (default: ./{DEFAULT_CONFIG_FILE} if present)")
    parser.add_argument("--profile", default=None, help="Server profile from the config (or TABSYNC_PROFILE)")
    parser.add_argument("--host", default=None, help="MySQL server host (default: localhost)")
    parser.add_argument("--port", type=int, default=None, help="MySQL server port (default: 3306)")
    parser.add_argument("--user", default=None, help="MySQL server username (default: root)")
    parser.add_argument("--password", default=None, help="MySQL server raw password (or TABSYNC_PASSWORD)")
    parser.add_argument(
        "--tab",
        default=None,
        help=(
            "Directory containing <tablename>.sql files, usually created by "
            "`mysqldump --no-data --tab=<...>` or `skeema pull` "
            f"(default: {DEFAULT_SCHEMA_DIR})"
        ),
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # push command
    p_push = subparsers.add_parser("push", help="Apply the schema files to the live database")
    p_push.add_argument("livedbname", help="Live database to be compared with the scratch database")
    retain = p_push.add_mutually_exclusive_group()
    retain.add_argument(
        "--retain-scratch",
        dest="retain_scratch",
        action="store_true",
        default=None,
        help="Keep the scratch database after the push (default)",
    )
    retain.add_argument(
        "--drop-scratch",
        dest="retain_scratch",
        action="store_false",
        help="Drop the scratch database after the push",
    )
    p_push.add_argument("--scratch-db", default=None, help="Scratch database name (default: tmp)")
    p_push.add_argument(
        "--push-script-export-path",
        type=Path,
        default=None,
        help="File to export the push script into (default: ./push_script_<timestamp>.sql)",
    )
    p_push.add_argument(
        "--dry-run-push",
        action="store_true",
        help="Generate and export the push script without running it on the live database",
    )
    p_push.add_argument(
        "--diff-concurrency",
        type=_positive_int,
        default=None,
        help="Structural diffs run at once (default: 1)",
    )
    p_push.add_argument(
        "--on-diff-failure",
        choices=["skip", "keep", "abort"],
        default=None,
        help="What a failed structural diff does to the script (default: skip)",
    )
    p_push.set_defaults(func=cmd_push)

    # pull command
    p_pull = subparsers.add_parser("pull", help="Export the live database schema into the schema files")
    p_pull.add_argument("livedbname", help="Live database to dump")
    p_pull.set_defaults(func=cmd_pull)

    # profiles command
    p_profiles = subparsers.add_parser("profiles", help="List server profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if args.verbose else (args.log_level or "INFO"))
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
