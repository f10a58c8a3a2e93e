"""Main CLI application for ghbrowse."""

from __future__ import annotations

import logging
from enum import IntEnum

import typer
from rich.console import Console
from rich.logging import RichHandler

from ghbrowse.cli.atyper import ATyper

app = ATyper(
    name="ghbrowse",
    help="Browse GitHub repositories, users and contributors through a local cache",
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
)


class ExitCode(IntEnum):
    """Exit codes for ghbrowse."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    NETWORK_ERROR = 3
    CONFIG_ERROR = 4
    NOT_FOUND = 6


def configure_logging(verbose: bool) -> None:
    """Send library logs to stderr through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; only show it when asked
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main(
    ctx: typer.Context,
    json: bool = typer.Option(False, "--json", "-j", help="Enable JSON output mode"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log requests and cache decisions"
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit", is_eager=True
    ),
) -> None:
    """ghbrowse - Browse GitHub through a local cache."""
    if version:
        from ghbrowse import __version__

        typer.echo(f"ghbrowse {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    configure_logging(verbose)

    ctx.meta["json"] = json
    ctx.meta["verbose"] = verbose


def run_app() -> None:
    """Run the CLI app."""
    app()


# Command modules register themselves on import; they need app defined
from ghbrowse.cli.commands import browse  # noqa: E402, F401
from ghbrowse.cli.commands import cache as cache_cmd  # noqa: E402
from ghbrowse.cli.commands import config as config_cmd  # noqa: E402
from ghbrowse.cli.commands import token as token_cmd  # noqa: E402

app.add_typer(cache_cmd.cache_app, name="cache")
app.add_typer(config_cmd.config_app, name="config")
app.add_typer(token_cmd.token_app, name="token")
