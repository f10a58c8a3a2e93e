"""Local SQLite store for ghbrowse."""

from ghbrowse.db.database import GithubDb, QueryLiveData
from ghbrowse.db.repo_dao import RepoDao
from ghbrowse.db.user_dao import UserDao

__all__ = [
    "GithubDb",
    "QueryLiveData",
    "RepoDao",
    "UserDao",
]
