"""Queries for users."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ghbrowse.livedata import LiveData
from ghbrowse.models import User

if TYPE_CHECKING:
    from ghbrowse.db.database import GithubDb

_USER_COLUMNS = ("login", "avatar_url", "name", "company", "repos_url", "blog")


class UserDao:
    """Data access for the user table."""

    def __init__(self, db: GithubDb) -> None:
        self._db = db

    def insert(self, user: User) -> None:
        self._db.execute(
            "user",
            f"INSERT OR REPLACE INTO user ({', '.join(_USER_COLUMNS)})"
            f" VALUES ({', '.join('?' * len(_USER_COLUMNS))})",
            tuple(getattr(user, column) for column in _USER_COLUMNS),
        )

    def get(self, login: str) -> User | None:
        row = self._db.query_one("SELECT * FROM user WHERE login = ?", (login,))
        if row is None:
            return None
        return User(**{column: row[column] for column in _USER_COLUMNS})

    def find_by_login(self, login: str) -> LiveData[User | None]:
        return self._db.create_live_data(["user"], lambda: self.get(login))
