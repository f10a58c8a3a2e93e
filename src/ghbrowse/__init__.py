"""ghbrowse: browse GitHub through a local cache kept in step with the API."""

from __future__ import annotations

__version__ = "0.1.0"

from ghbrowse.client import GithubBrowser
from ghbrowse.livedata import LiveData, await_value
from ghbrowse.models import AccessToken, Contributor, Owner, Repo, RepoSearchResult, User
from ghbrowse.resource import Resource, Status

__all__ = [
    "__version__",
    "AccessToken",
    "Contributor",
    "GithubBrowser",
    "LiveData",
    "Owner",
    "Repo",
    "RepoSearchResult",
    "Resource",
    "Status",
    "User",
    "await_value",
]


def main() -> None:
    """Entry point for the ghbrowse CLI."""
    from ghbrowse.cli.app import run_app

    run_app()
