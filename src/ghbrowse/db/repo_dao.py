"""Queries for repositories, contributors and search cursors."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import msgspec

from ghbrowse.livedata import LiveData
from ghbrowse.models import Contributor, Owner, Repo, RepoSearchResult

if TYPE_CHECKING:
    from ghbrowse.db.database import GithubDb

_UPSERT_REPO = """
INSERT INTO repo (id, name, full_name, description, owner_login, owner_url, stars)
VALUES (?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (name, owner_login) DO UPDATE SET
    id = excluded.id,
    full_name = excluded.full_name,
    description = excluded.description,
    owner_url = excluded.owner_url,
    stars = excluded.stars
"""

_INSERT_REPO_IF_MISSING = """
INSERT OR IGNORE INTO repo (id, name, full_name, description, owner_login, owner_url, stars)
VALUES (?, ?, ?, ?, ?, ?, ?)
"""

_UPSERT_CONTRIBUTOR = """
INSERT OR REPLACE INTO contributor (repo_name, repo_owner, login, contributions, avatar_url)
VALUES (?, ?, ?, ?, ?)
"""

_UPSERT_SEARCH_RESULT = """
INSERT OR REPLACE INTO repo_search_result (query, repo_ids, total_count, next)
VALUES (?, ?, ?, ?)
"""

_ids_decoder = msgspec.json.Decoder(list[int])


def _repo_params(repo: Repo) -> tuple:
    return (
        repo.id,
        repo.name,
        repo.full_name,
        repo.description,
        repo.owner.login,
        repo.owner.url,
        repo.stars,
    )


def _repo_from_row(row: sqlite3.Row) -> Repo:
    return Repo(
        id=row["id"],
        name=row["name"],
        full_name=row["full_name"],
        description=row["description"],
        owner=Owner(login=row["owner_login"], url=row["owner_url"]),
        stars=row["stars"],
    )


def _contributor_from_row(row: sqlite3.Row) -> Contributor:
    return Contributor(
        login=row["login"],
        contributions=row["contributions"],
        avatar_url=row["avatar_url"],
        repo_owner=row["repo_owner"],
        repo_name=row["repo_name"],
    )


def _search_result_from_row(row: sqlite3.Row) -> RepoSearchResult:
    return RepoSearchResult(
        query=row["query"],
        repo_ids=_ids_decoder.decode(row["repo_ids"]),
        total_count=row["total_count"],
        next=row["next"],
    )


class RepoDao:
    """Data access for the repo, contributor and repo_search_result tables.

    Methods returning LiveData are observable reads; the rest run
    synchronously on the calling thread.
    """

    def __init__(self, db: GithubDb) -> None:
        self._db = db

    # Writes

    def insert(self, repo: Repo) -> None:
        self._db.execute("repo", _UPSERT_REPO, _repo_params(repo))

    def insert_repos(self, repos: Iterable[Repo]) -> None:
        self._db.execute_many("repo", _UPSERT_REPO, [_repo_params(r) for r in repos])

    def create_repo_if_not_exists(self, repo: Repo) -> bool:
        """Insert ``repo`` unless a row for its owner/name exists; True if inserted."""
        return self._db.execute("repo", _INSERT_REPO_IF_MISSING, _repo_params(repo)) > 0

    def insert_contributors(self, contributors: Iterable[Contributor]) -> None:
        self._db.execute_many(
            "contributor",
            _UPSERT_CONTRIBUTOR,
            [
                (c.repo_name, c.repo_owner, c.login, c.contributions, c.avatar_url)
                for c in contributors
            ],
        )

    def insert_search_result(self, result: RepoSearchResult) -> None:
        self._db.execute(
            "repo_search_result",
            _UPSERT_SEARCH_RESULT,
            (
                result.query,
                msgspec.json.encode(result.repo_ids).decode(),
                result.total_count,
                result.next,
            ),
        )

    # Synchronous reads

    def get(self, owner: str, name: str) -> Repo | None:
        row = self._db.query_one(
            "SELECT * FROM repo WHERE owner_login = ? AND name = ?", (owner, name)
        )
        return _repo_from_row(row) if row is not None else None

    def get_repositories(self, owner: str) -> list[Repo]:
        rows = self._db.query(
            "SELECT * FROM repo WHERE owner_login = ? ORDER BY stars DESC", (owner,)
        )
        return [_repo_from_row(row) for row in rows]

    def get_contributors(self, owner: str, name: str) -> list[Contributor]:
        rows = self._db.query(
            "SELECT * FROM contributor WHERE repo_owner = ? AND repo_name = ?"
            " ORDER BY contributions DESC",
            (owner, name),
        )
        return [_contributor_from_row(row) for row in rows]

    def find_search_result(self, query: str) -> RepoSearchResult | None:
        row = self._db.query_one(
            "SELECT * FROM repo_search_result WHERE query = ?", (query,)
        )
        return _search_result_from_row(row) if row is not None else None

    def get_ordered(self, repo_ids: Sequence[int]) -> list[Repo]:
        """Repos with the given ids, in the order of ``repo_ids``.

        Ids without a stored row are skipped.
        """
        if not repo_ids:
            return []
        by_id: dict[int, Repo] = {}
        unique = list(dict.fromkeys(repo_ids))
        # Stay under SQLite's bound-parameter limit
        for start in range(0, len(unique), 500):
            chunk = unique[start : start + 500]
            placeholders = ", ".join("?" * len(chunk))
            for row in self._db.query(
                f"SELECT * FROM repo WHERE id IN ({placeholders})", chunk
            ):
                by_id[row["id"]] = _repo_from_row(row)
        return [by_id[repo_id] for repo_id in repo_ids if repo_id in by_id]

    # Observable reads

    def load(self, owner: str, name: str) -> LiveData[Repo | None]:
        return self._db.create_live_data(["repo"], lambda: self.get(owner, name))

    def load_repositories(self, owner: str) -> LiveData[list[Repo]]:
        return self._db.create_live_data(
            ["repo"], lambda: self.get_repositories(owner)
        )

    def load_contributors(self, owner: str, name: str) -> LiveData[list[Contributor]]:
        return self._db.create_live_data(
            ["contributor"], lambda: self.get_contributors(owner, name)
        )

    def search(self, query: str) -> LiveData[RepoSearchResult | None]:
        return self._db.create_live_data(
            ["repo_search_result"], lambda: self.find_search_result(query)
        )

    def load_ordered(self, repo_ids: Sequence[int]) -> LiveData[list[Repo]]:
        ids = list(repo_ids)
        return self._db.create_live_data(["repo"], lambda: self.get_ordered(ids))
