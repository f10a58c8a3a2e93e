"""Rich display components for the ghbrowse CLI."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ghbrowse.errors.types import ErrorSeverity, GhBrowseError
from ghbrowse.models import Contributor, Repo, User
from ghbrowse.resource import Resource, Status

_STATUS_STYLES = {
    Status.SUCCESS: "green",
    Status.ERROR: "red",
    Status.LOADING: "yellow",
    Status.NOT_STARTED: "dim",
}


def format_status(resource: Resource) -> Text:
    """One-word status label, colored."""
    return Text(resource.status.value, style=_STATUS_STYLES[resource.status])


def repos_table(repos: list[Repo], title: str | None = None) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Repository", style="cyan", no_wrap=True)
    table.add_column("Stars", justify="right")
    table.add_column("Description", style="dim")

    for repo in repos:
        table.add_row(repo.full_name, str(repo.stars), repo.description or "")
    return table


def contributors_table(contributors: list[Contributor], title: str | None = None) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Login", style="cyan")
    table.add_column("Contributions", justify="right")

    for contributor in contributors:
        table.add_row(contributor.login, str(contributor.contributions))
    return table


def user_grid(user: User) -> Table:
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column()

    grid.add_row("Login", user.login)
    for label, value in (
        ("Name", user.name),
        ("Company", user.company),
        ("Blog", user.blog),
        ("Repos", user.repos_url),
    ):
        if value:
            grid.add_row(label, value)
    return grid


def repo_grid(repo: Repo) -> Table:
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column()

    grid.add_row("Repository", repo.full_name)
    grid.add_row("Owner", repo.owner.login)
    grid.add_row("Stars", str(repo.stars))
    if repo.description:
        grid.add_row("Description", repo.description)
    return grid


def display_error(console: Console, error: GhBrowseError, stale: bool = False) -> None:
    """Print an error with its remediation hint.

    Args:
        console: Target console
        error: Classified error
        stale: Whether cached data is shown alongside the error
    """
    style = "yellow" if error.severity == ErrorSeverity.TRANSIENT else "red"
    console.print(f"[{style}]Error:[/{style}] {error.message}")
    if error.remediation:
        console.print(f"[dim]{error.remediation}[/dim]")
    if stale:
        console.print("[dim]Showing cached data.[/dim]")
