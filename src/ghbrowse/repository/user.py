"""Repository for user profiles."""

from __future__ import annotations

from ghbrowse.api.service import ApiCallLiveData, GithubService
from ghbrowse.core.bound_resource import NetworkBoundResource
from ghbrowse.db.database import GithubDb
from ghbrowse.executors import AppExecutors
from ghbrowse.livedata import LiveData
from ghbrowse.models import User
from ghbrowse.resource import Resource


class UserRepository:
    """Loads user profiles; a cached profile is never refetched."""

    def __init__(
        self, executors: AppExecutors, db: GithubDb, service: GithubService
    ) -> None:
        self._executors = executors
        self._dao = db.user_dao
        self._service = service

    def load_user(self, login: str) -> LiveData[Resource[User]]:
        return NetworkBoundResource(
            self._executors,
            load_from_db=lambda: self._dao.find_by_login(login),
            should_fetch=lambda data: data is None,
            create_call=lambda: ApiCallLiveData(
                self._executors, lambda: self._service.get_user(login)
            ),
            save_call_result=self._dao.insert,
            name=f"user {login}",
        ).as_live_data()
