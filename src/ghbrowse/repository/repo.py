"""Repository for repos, contributors and searches."""

from __future__ import annotations

import logging

import msgspec

from ghbrowse.api.response import ApiSuccessResponse
from ghbrowse.api.service import ApiCallLiveData, GithubService
from ghbrowse.core.bound_resource import NetworkBoundResource
from ghbrowse.core.next_page import FetchNextSearchPageTask
from ghbrowse.core.rate_limiter import RateLimiter
from ghbrowse.db.database import GithubDb
from ghbrowse.executors import AppExecutors
from ghbrowse.livedata import LiveData, MutableLiveData, absent, switch_map
from ghbrowse.models import Contributor, Repo, RepoSearchResponse, RepoSearchResult
from ghbrowse.resource import Resource

logger = logging.getLogger(__name__)


class RepoRepository:
    """Loads repositories through the local store.

    Every ``load_*`` and ``search`` call returns a fresh observable of
    Resource envelopes; see NetworkBoundResource for the protocol.

    Args:
        executors: Execution lanes
        db: Local store
        service: Remote API
        rate_limiter: Cooldown for refetching an owner's repo list
    """

    def __init__(
        self,
        executors: AppExecutors,
        db: GithubDb,
        service: GithubService,
        rate_limiter: RateLimiter[str] | None = None,
    ) -> None:
        self._executors = executors
        self._db = db
        self._dao = db.repo_dao
        self._service = service
        self._repo_list_rate_limit = rate_limiter or RateLimiter()

    def load_repos(self, owner: str) -> LiveData[Resource[list[Repo]]]:
        """An owner's repositories, most starred first.

        Refetched when nothing is cached or the owner's cooldown has passed.
        """

        def should_fetch(data: list[Repo] | None) -> bool:
            return not data or self._repo_list_rate_limit.should_fetch(owner)

        return NetworkBoundResource(
            self._executors,
            load_from_db=lambda: self._dao.load_repositories(owner),
            should_fetch=should_fetch,
            create_call=lambda: ApiCallLiveData(
                self._executors, lambda: self._service.get_repos(owner)
            ),
            save_call_result=self._dao.insert_repos,
            on_fetch_failed=lambda: self._repo_list_rate_limit.reset(owner),
            name=f"repos of {owner}",
        ).as_live_data()

    def load_repo(self, owner: str, name: str) -> LiveData[Resource[Repo]]:
        return NetworkBoundResource(
            self._executors,
            load_from_db=lambda: self._dao.load(owner, name),
            should_fetch=lambda data: data is None,
            create_call=lambda: ApiCallLiveData(
                self._executors, lambda: self._service.get_repo(owner, name)
            ),
            save_call_result=self._dao.insert,
            name=f"repo {owner}/{name}",
        ).as_live_data()

    def load_contributors(
        self, owner: str, name: str
    ) -> LiveData[Resource[list[Contributor]]]:
        """Contributors of a repo, biggest contributors first."""

        def save(items: list[Contributor]) -> None:
            stamped = [
                msgspec.structs.replace(item, repo_owner=owner, repo_name=name)
                for item in items
            ]
            # Contributors reference their repo row
            with self._db.transaction():
                self._dao.create_repo_if_not_exists(Repo.placeholder(owner, name))
                self._dao.insert_contributors(stamped)

        return NetworkBoundResource(
            self._executors,
            load_from_db=lambda: self._dao.load_contributors(owner, name),
            should_fetch=lambda data: not data,
            create_call=lambda: ApiCallLiveData(
                self._executors,
                lambda: self._service.get_contributors(owner, name),
            ),
            save_call_result=save,
            name=f"contributors of {owner}/{name}",
        ).as_live_data()

    def search(self, query: str) -> LiveData[Resource[list[Repo]]]:
        """First page of a repository search, then whatever pages are stored.

        Only fetched when the query has never been searched; further pages
        come from ``search_next_page``.
        """

        def load_from_db() -> LiveData[list[Repo] | None]:
            def rows_for(result: RepoSearchResult | None) -> LiveData[list[Repo] | None]:
                if result is None:
                    return absent()
                return self._dao.load_ordered(result.repo_ids)

            return switch_map(self._dao.search(query), rows_for)

        def save(item: RepoSearchResponse) -> None:
            result = RepoSearchResult(
                query=query,
                repo_ids=item.repo_ids,
                total_count=item.total,
                next=item.next_page,
            )
            with self._db.transaction():
                self._dao.insert_repos(item.items)
                self._dao.insert_search_result(result)

        def with_next_page(
            response: ApiSuccessResponse[RepoSearchResponse],
        ) -> RepoSearchResponse:
            return msgspec.structs.replace(response.body, next_page=response.next_page)

        return NetworkBoundResource(
            self._executors,
            load_from_db=load_from_db,
            should_fetch=lambda data: data is None,
            create_call=lambda: ApiCallLiveData(
                self._executors, lambda: self._service.search_repos(query)
            ),
            save_call_result=save,
            process_response=with_next_page,
            name=f"search {query!r}",
        ).as_live_data()

    def search_next_page(self, query: str) -> LiveData[Resource[bool]]:
        """Fetch the next page of a search already started with ``search``.

        The returned LiveData receives a single value once the task is done.
        """
        task = FetchNextSearchPageTask(query, self._service, self._db)
        live_data: MutableLiveData[Resource[bool]] = MutableLiveData()

        def on_error(error: BaseException) -> None:
            logger.error("next page task for %r crashed: %s", query, error)
            live_data.set_value(Resource.error(str(error) or type(error).__name__))

        self._executors.run_coroutine(task.run, live_data.set_value, on_error)
        return live_data
