"""Commands that load data through the repositories."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Callable
from typing import Any

import msgspec
import typer
from rich.console import Console

from ghbrowse.cli.app import ExitCode, app
from ghbrowse.cli.display import (
    contributors_table,
    display_error,
    repo_grid,
    repos_table,
    user_grid,
)
from ghbrowse.client import GithubBrowser
from ghbrowse.display.json import (
    from_ghbrowse_error,
    output_json_error,
    output_json_pretty,
    resource_to_dict,
)
from ghbrowse.errors import (
    ConfigError,
    ErrorCategory,
    ErrorSeverity,
    GhBrowseError,
    classify_api_error,
)
from ghbrowse.livedata import LiveData, await_value
from ghbrowse.resource import Resource, Status

logger = logging.getLogger(__name__)

Render = Callable[[Console, Any], None]

_EXIT_CODES = {
    ErrorCategory.AUTHENTICATION: ExitCode.AUTH_ERROR,
    ErrorCategory.AUTHORIZATION: ExitCode.AUTH_ERROR,
    ErrorCategory.NETWORK: ExitCode.NETWORK_ERROR,
    ErrorCategory.RATE_LIMITED: ExitCode.NETWORK_ERROR,
    ErrorCategory.SERVER: ExitCode.NETWORK_ERROR,
    ErrorCategory.CONFIGURATION: ExitCode.CONFIG_ERROR,
    ErrorCategory.NOT_FOUND: ExitCode.NOT_FOUND,
}


def exit_code_for(error: GhBrowseError) -> ExitCode:
    return _EXIT_CODES.get(error.category, ExitCode.GENERAL_ERROR)


def open_browser(console: Console, json_mode: bool) -> GithubBrowser:
    """Create the browser, turning setup failures into a clean exit."""
    try:
        return GithubBrowser()
    except ConfigError as e:
        error = GhBrowseError(
            message=str(e),
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.FATAL,
            remediation="Fix or remove the ghbrowse config.toml.",
        )
    except (OSError, sqlite3.Error) as e:
        error = GhBrowseError(
            message=f"Cannot open the local store: {e}",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.FATAL,
        )

    if json_mode:
        output_json_error(error)
    else:
        display_error(console, error)
    raise typer.Exit(exit_code_for(error))


async def settle(live_data: LiveData[Resource]) -> Resource:
    """Wait for the first envelope that is not LOADING."""
    return await await_value(live_data, lambda resource: resource.is_terminal)


def report(
    ctx: typer.Context,
    console: Console,
    resource: Resource,
    render: Render,
    browser: GithubBrowser,
) -> None:
    """Print a settled resource, exiting non-zero if it is an error."""
    json_mode = ctx.meta.get("json", False)

    if resource.status != Status.ERROR:
        if json_mode:
            output_json_pretty(resource_to_dict(resource))
        elif resource.data is None or resource.data == []:
            console.print("[dim]Nothing found.[/dim]")
        else:
            render(console, resource.data)
        return

    last_error = browser.service.last_error
    # The service remembers its latest failure, which need not be this one
    if last_error is not None and last_error.error_message == resource.message:
        error = classify_api_error(last_error)
    else:
        error = GhBrowseError(
            message=resource.message or "unknown error",
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.RECOVERABLE,
        )

    if json_mode:
        document = msgspec.to_builtins(from_ghbrowse_error(error))
        if resource.data is not None:
            # Cached data that is still valid next to the error
            document["data"] = msgspec.to_builtins(resource.data)
        output_json_pretty(document)
    else:
        display_error(console, error, stale=resource.data is not None)
        if resource.data:
            render(console, resource.data)
    raise typer.Exit(exit_code_for(error))


async def run_load(
    ctx: typer.Context,
    load: Callable[[GithubBrowser], LiveData[Resource]],
    render: Render,
) -> None:
    console = Console()
    browser = open_browser(console, ctx.meta.get("json", False))
    async with browser:
        resource = await settle(load(browser))
    report(ctx, console, resource, render, browser)


@app.command("repos")
async def repos_command(
    ctx: typer.Context,
    owner: str = typer.Argument(..., help="User or organization login"),
) -> None:
    """List an owner's repositories, most starred first."""
    await run_load(
        ctx,
        lambda browser: browser.repos.load_repos(owner),
        lambda console, repos: console.print(repos_table(repos, title=owner)),
    )


@app.command("repo")
async def repo_command(
    ctx: typer.Context,
    owner: str = typer.Argument(..., help="Repository owner"),
    name: str = typer.Argument(..., help="Repository name"),
) -> None:
    """Show one repository."""
    await run_load(
        ctx,
        lambda browser: browser.repos.load_repo(owner, name),
        lambda console, repo: console.print(repo_grid(repo)),
    )


@app.command("contributors")
async def contributors_command(
    ctx: typer.Context,
    owner: str = typer.Argument(..., help="Repository owner"),
    name: str = typer.Argument(..., help="Repository name"),
) -> None:
    """List a repository's contributors."""
    await run_load(
        ctx,
        lambda browser: browser.repos.load_contributors(owner, name),
        lambda console, contributors: console.print(
            contributors_table(contributors, title=f"{owner}/{name}")
        ),
    )


@app.command("user")
async def user_command(
    ctx: typer.Context,
    login: str = typer.Argument(..., help="User login"),
) -> None:
    """Show a user profile."""
    await run_load(
        ctx,
        lambda browser: browser.users.load_user(login),
        lambda console, user: console.print(user_grid(user)),
    )


@app.command("search")
async def search_command(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search terms"),
    pages: int = typer.Option(
        1, "--pages", "-p", min=1, help="Number of result pages to load"
    ),
) -> None:
    """Search repositories, following further pages on request."""
    console = Console()
    json_mode = ctx.meta.get("json", False)
    query = query.strip().lower()
    if not query:
        console.print("[red]Error:[/red] search query must not be empty")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    browser = open_browser(console, json_mode)
    async with browser:
        resource = await settle(browser.repos.search(query))
        loaded = 1
        while resource.status == Status.SUCCESS and loaded < pages:
            more = await await_value(browser.repos.search_next_page(query))
            if more.status == Status.ERROR:
                resource = Resource.error(more.message or "unknown error", resource.data)
                break
            if more.status != Status.SUCCESS:
                break
            # Success(False) may still have saved the last page
            loaded += 1
            resource = await settle(browser.repos.search(query))
            if not more.data:
                break

        cursor = await asyncio.to_thread(browser.db.repo_dao.find_search_result, query)

    title = f"{query!r}"
    if cursor is not None:
        title += f" ({cursor.total_count} total)"
        logger.debug("search %r: next page %s", query, cursor.next)
    report(
        ctx,
        console,
        resource,
        lambda console, repos: console.print(repos_table(repos, title=title)),
        browser,
    )
