"""Main entry point for the old files cleanup daemon."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .config import ConfigError, SweepConfig
from .daemon import SweepDaemon
from .events import CallbackObserver, Progress
from .scheduler import Scheduler


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments.

    """
    parser = argparse.ArgumentParser(
        prog="old-files-cleanup",
        description="Daemon for deleting old files from configured directories",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command (default)
    run_parser = subparsers.add_parser("run", help="Run the daemon")
    run_parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single pass and exit instead of continuous daemon mode",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log what would be deleted without deleting anything",
    )

    # Scan command
    scan_parser = subparsers.add_parser("scan", help="List files that would be deleted")
    scan_parser.add_argument(
        "--dir",
        "-d",
        type=Path,
        default=None,
        help="Specific directory to scan",
    )

    # Config command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "--init",
        action="store_true",
        help="Create default configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )

    return parser.parse_args(argv)


def cmd_scan(config: SweepConfig, args: argparse.Namespace) -> int:
    """Execute scan command.

    Args:
        config: Sweep configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = Console()
    directories = [args.dir] if args.dir else config.directory_paths
    scan_config = dataclasses.replace(config, directory_paths=directories, dry_run=True, verbose=True)

    candidates: list[Progress] = []
    errors: list[str] = []

    def collect(event: Progress) -> None:
        if event.kind == "would_delete":
            candidates.append(event)

    observer = CallbackObserver(
        on_error=lambda event: errors.append(str(event.error)),
        on_progress=collect,
    )
    asyncio.run(Scheduler(scan_config, observer).run_once())

    for error in errors:
        console.print(f"[red]{error}[/red]")

    if not candidates:
        console.print("[green]No old files found[/green]")
        return 0

    table = Table(title=f"Found {len(candidates)} files to delete")
    table.add_column("File", style="red")
    table.add_column("Location", style="dim")

    for event in candidates:
        if event.path is not None:
            table.add_row(event.path.name, str(event.path.parent))

    console.print(table)
    return 0


def cmd_config(config: SweepConfig, args: argparse.Namespace) -> int:
    """Execute config command.

    Args:
        config: Sweep configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = Console()

    if args.init:
        config_path = args.config or SweepConfig.get_config_path()
        if config_path.exists():
            console.print(f"[yellow]Config already exists: {config_path}[/yellow]")
            return 1
        config.save(config_path)
        console.print(f"[green]Created config: {config_path}[/green]")
        return 0

    if args.show:
        table = Table(title="Current Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Directories", "\n".join(str(d) for d in config.directory_paths))
        table.add_row("Age", f"{config.age}s")
        table.add_row("Check interval", f"{config.check_interval}s")
        table.add_row("Recursive", str(config.recursive))
        table.add_row("Include", "\n".join(str(p) for p in config.include))
        table.add_row("Exclude", "\n".join(str(p) for p in config.exclude))
        table.add_row("Dry run", str(config.dry_run))
        table.add_row("Allow overlap", str(config.allow_overlap))
        table.add_row("Log file", str(config.log_file))
        table.add_row("Log level", config.log_level)

        console.print(table)
        return 0

    console.print("[yellow]Use --init or --show[/yellow]")
    return 1


def cmd_run(config: SweepConfig, args: argparse.Namespace) -> int:
    """Execute run command.

    Args:
        config: Sweep configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    if getattr(args, "dry_run", False):
        config = dataclasses.replace(config, dry_run=True)
    daemon = SweepDaemon(config)

    if getattr(args, "once", False):
        summary = asyncio.run(daemon.run_once())
        print(
            f"Examined {summary.files_examined} files, deleted {summary.files_deleted}, "
            f"would delete {summary.files_would_delete}, errors {summary.errors}"
        )
        return 1 if summary.errors else 0

    asyncio.run(daemon.run_daemon())
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    args = parse_args(argv)
    try:
        config = SweepConfig.load(args.config)
    except ConfigError as e:
        Console(stderr=True).print(f"[red]Configuration error: {e}[/red]")
        return 2

    # Default to run command
    command = args.command or "run"

    if command == "scan":
        return cmd_scan(config, args)
    elif command == "config":
        return cmd_config(config, args)
    elif command == "run":
        return cmd_run(config, args)
    else:
        print(f"Unknown command: {command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
