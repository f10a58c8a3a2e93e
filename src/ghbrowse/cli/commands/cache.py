"""Local store commands for ghbrowse."""

from __future__ import annotations

import sqlite3

import typer
from rich.console import Console
from rich.table import Table

from ghbrowse.cli.app import ExitCode
from ghbrowse.cli.atyper import ATyper
from ghbrowse.config.settings import get_config
from ghbrowse.db.database import GithubDb
from ghbrowse.display.json import output_json_pretty
from ghbrowse.errors import ConfigError
from ghbrowse.executors import AppExecutors

cache_app = ATyper(help="Inspect or clear the local store.")


async def _open_db(console: Console) -> GithubDb:
    try:
        path = get_config().cache.database_path()
        return GithubDb(AppExecutors(), path)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(ExitCode.CONFIG_ERROR) from e
    except (OSError, sqlite3.Error) as e:
        console.print(f"[red]Cannot open the local store:[/red] {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e


@cache_app.command("show")
async def cache_show_command(ctx: typer.Context) -> None:
    """Show row counts and the database location."""
    console = Console()
    db = await _open_db(console)
    try:
        counts = db.count_rows()
    finally:
        db.executors.shutdown()
        db.close()

    if ctx.meta.get("json", False):
        output_json_pretty({"database": db.path, "tables": counts})
        return

    table = Table(title="Local Store", show_header=True, header_style="bold")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))

    console.print(table)
    console.print(f"\nDatabase: {db.path}")


@cache_app.command("clear")
async def cache_clear_command(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete every cached repository, user, contributor and search."""
    console = Console()

    if not force and not typer.confirm("Delete all cached data?"):
        raise typer.Abort()

    db = await _open_db(console)
    try:
        db.clear()
    finally:
        db.executors.shutdown()
        db.close()

    if ctx.meta.get("json", False):
        output_json_pretty({"success": True, "database": db.path})
        return

    console.print("[green]✓[/green] Cleared the local store")
