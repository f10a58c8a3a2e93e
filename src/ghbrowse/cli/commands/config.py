"""Config management commands for ghbrowse."""

from __future__ import annotations

import msgspec.toml
import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from ghbrowse.cli.app import ExitCode
from ghbrowse.cli.atyper import ATyper
from ghbrowse.config.paths import cache_dir, config_dir, config_file, credentials_dir
from ghbrowse.config.settings import (
    get_config,
    load_config,
    save_config,
    update_config,
)
from ghbrowse.display.json import output_json_pretty
from ghbrowse.errors import ConfigError

config_app = ATyper(help="Manage configuration settings.")


def _fail(console: Console, error: ConfigError) -> None:
    console.print(f"[red]Configuration error:[/red] {error}")
    raise typer.Exit(ExitCode.CONFIG_ERROR) from error


@config_app.command("show")
def config_show_command(ctx: typer.Context) -> None:
    """Display current settings, environment overrides included."""
    console = Console()
    try:
        config = get_config()
    except ConfigError as e:
        _fail(console, e)

    config_path = config_file()
    # Every setting, defaults included
    settings = {
        "api": {
            "base_url": config.api.base_url,
            "timeout": config.api.timeout,
            "user_agent": config.api.user_agent,
        },
        "cache": {
            "rate_limit_minutes": config.cache.rate_limit_minutes,
            "database": config.cache.database_path(),
        },
    }

    if ctx.meta.get("json", False):
        output_json_pretty({**settings, "path": str(config_path)})
        return

    toml_data = msgspec.toml.encode(settings).decode()
    console.print(Panel(Syntax(toml_data, "toml"), title=f"Config: {config_path}"))
    if not config_path.exists():
        console.print("[dim]Using default configuration (file not created yet)[/dim]")


@config_app.command("set")
def config_set_command(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Setting, e.g. api.base_url or cache.rate_limit_minutes"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Change one setting in config.toml."""
    console = Console()
    try:
        config = update_config(load_config(apply_env=False), key, value)
        save_config(config)
    except ConfigError as e:
        _fail(console, e)

    if ctx.meta.get("json", False):
        output_json_pretty({"success": True, "key": key, "path": str(config_file())})
        return

    console.print(f"[green]✓[/green] Set {key} in {config_file()}")


@config_app.command("path")
def config_path_command(ctx: typer.Context) -> None:
    """Show directory paths used by ghbrowse."""
    console = Console()
    paths = {
        "config_dir": str(config_dir()),
        "config_file": str(config_file()),
        "cache_dir": str(cache_dir()),
        "credentials_dir": str(credentials_dir()),
    }

    if ctx.meta.get("json", False):
        output_json_pretty(paths)
        return

    console.print(f"Config dir:    {paths['config_dir']}")
    console.print(f"Config file:   {paths['config_file']}")
    console.print(f"Cache dir:     {paths['cache_dir']}")
    console.print(f"Credentials:   {paths['credentials_dir']}")


@config_app.command("reset")
def config_reset_command(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    console = Console()

    if not force and not typer.confirm(
        "This will reset your configuration to defaults. Continue?", default=False
    ):
        raise typer.Abort()

    cfg_path = config_file()
    reset = cfg_path.exists()
    if reset:
        cfg_path.unlink()

    if ctx.meta.get("json", False):
        output_json_pretty({"success": True, "reset": reset, "path": str(cfg_path)})
        return

    if reset:
        console.print("[green]✓[/green] Configuration reset to defaults")
        console.print(f"\nDeleted: {cfg_path}")
    else:
        console.print("[yellow]No custom configuration to reset[/yellow]")
