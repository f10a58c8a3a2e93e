"""Data models for ghbrowse.

The structs decode straight from GitHub REST API JSON (unknown fields are
ignored) and are what the local store hands back to observers.
"""

from __future__ import annotations

from typing import ClassVar

import msgspec


class Owner(msgspec.Struct, frozen=True):
    """Repository owner as embedded in repo payloads."""

    login: str
    url: str | None = None


class Repo(msgspec.Struct, frozen=True):
    """A GitHub repository."""

    UNKNOWN_ID: ClassVar[int] = -1

    id: int
    name: str
    full_name: str
    description: str | None
    owner: Owner
    stars: int = msgspec.field(default=0, name="stargazers_count")

    @classmethod
    def placeholder(cls, owner: str, name: str) -> Repo:
        """Row standing in for a repo we only know by owner/name."""
        return cls(
            id=cls.UNKNOWN_ID,
            name=name,
            full_name=f"{owner}/{name}",
            description="",
            owner=Owner(login=owner),
            stars=0,
        )


class Contributor(msgspec.Struct, frozen=True):
    """A contributor to a repository.

    The API does not send repo_owner/repo_name; they are stamped on before
    the contributor is saved.
    """

    login: str
    contributions: int
    avatar_url: str | None = None
    repo_owner: str = ""
    repo_name: str = ""


class User(msgspec.Struct, frozen=True):
    """A GitHub user profile."""

    login: str
    avatar_url: str | None = None
    name: str | None = None
    company: str | None = None
    repos_url: str | None = None
    blog: str | None = None


class RepoSearchResponse(msgspec.Struct, frozen=True):
    """Body of a repository search call.

    next_page is not part of the payload; it is copied over from the Link
    header once the response has been received.
    """

    total: int = msgspec.field(name="total_count")
    items: list[Repo] = msgspec.field(default_factory=list)
    next_page: int | None = None

    @property
    def repo_ids(self) -> list[int]:
        return [repo.id for repo in self.items]


class RepoSearchResult(msgspec.Struct, frozen=True):
    """Persisted search cursor: matched ids in order plus the next page."""

    query: str
    repo_ids: list[int]
    total_count: int
    next: int | None = None


class AccessToken(msgspec.Struct, frozen=True):
    """OAuth/personal access token used to authenticate API calls."""

    value: str
