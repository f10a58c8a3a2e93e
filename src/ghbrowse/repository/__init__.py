"""Repositories: the public loading API of ghbrowse."""

from ghbrowse.repository.repo import RepoRepository
from ghbrowse.repository.token import AccessTokenRepository
from ghbrowse.repository.user import UserRepository

__all__ = [
    "AccessTokenRepository",
    "RepoRepository",
    "UserRepository",
]
