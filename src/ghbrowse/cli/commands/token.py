"""Access token commands for ghbrowse."""

from __future__ import annotations

import typer
from rich.console import Console

from ghbrowse.cli.app import ExitCode
from ghbrowse.cli.atyper import ATyper
from ghbrowse.display.json import output_json_pretty
from ghbrowse.models import AccessToken
from ghbrowse.repository.token import AccessTokenRepository

token_app = ATyper(help="Manage the GitHub access token.")


@token_app.callback(invoke_without_command=True)
def token_callback(ctx: typer.Context) -> None:
    """Show whether an access token is stored."""
    if ctx.invoked_subcommand is not None:
        return

    console = Console()
    tokens = AccessTokenRepository()
    configured = tokens.load() is not None

    if ctx.meta.get("json", False):
        output_json_pretty({"configured": configured, "path": str(tokens.path)})
        return

    if configured:
        console.print("[green]✓[/green] Access token configured")
        console.print(f"  Location: {tokens.path}")
    else:
        console.print("[yellow]✗[/yellow] No access token configured")
        console.print("\n[dim]Run 'ghbrowse token set' to add one[/dim]")


@token_app.command("set")
def token_set_command(
    value: str = typer.Argument(None, help="Token value (or enter interactively)"),
) -> None:
    """Store an access token used for every API call."""
    console = Console()

    if value is None:
        value = typer.prompt("GitHub access token", hide_input=True)
    value = value.strip()

    if not value:
        console.print("[red]Token cannot be empty[/red]")
        raise typer.Exit(ExitCode.CONFIG_ERROR)

    tokens = AccessTokenRepository()
    try:
        tokens.save(AccessToken(value=value))
    except OSError as e:
        console.print(f"[red]Error saving token:[/red] {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    console.print(f"[green]✓[/green] Token saved to {tokens.path}")


@token_app.command("clear")
def token_clear_command(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete the stored access token."""
    console = Console()

    if not force and not typer.confirm("Delete the stored access token?"):
        raise typer.Abort()

    if AccessTokenRepository().clear():
        console.print("[green]✓[/green] Token deleted")
    else:
        console.print("[yellow]No token stored[/yellow]")
