"""GitHub REST API client."""

from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import httpx
import msgspec

from ghbrowse.api.response import (
    ApiErrorResponse,
    ApiResponse,
    api_error_from_exception,
    create_api_response,
)
from ghbrowse.core.http import get_http_client
from ghbrowse.executors import AppExecutors
from ghbrowse.livedata import LiveData
from ghbrowse.models import Contributor, Repo, RepoSearchResponse, User

if TYPE_CHECKING:
    from ghbrowse.repository.token import AccessTokenRepository

T = TypeVar("T")

logger = logging.getLogger(__name__)


class GithubService:
    """Typed calls against the GitHub REST API.

    Every method resolves to an ApiResponse; HTTP errors, transport failures
    and undecodable bodies all come back as ApiErrorResponse instead of
    being raised.

    Args:
        client: Client to use; defaults to the shared pooled client, whose
            base URL comes from the configuration
        tokens: Source of the access token sent with each request
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        tokens: AccessTokenRepository | None = None,
    ) -> None:
        self._client = client
        self._tokens = tokens
        # Most recent failed call, kept for diagnostics
        self.last_error: ApiErrorResponse | None = None

    async def get_user(self, login: str) -> ApiResponse[User]:
        return await self._get(f"users/{login}", User)

    async def get_repos(self, owner: str) -> ApiResponse[list[Repo]]:
        return await self._get(f"users/{owner}/repos", list[Repo])

    async def get_repo(self, owner: str, name: str) -> ApiResponse[Repo]:
        return await self._get(f"repos/{owner}/{name}", Repo)

    async def get_contributors(
        self, owner: str, name: str
    ) -> ApiResponse[list[Contributor]]:
        return await self._get(f"repos/{owner}/{name}/contributors", list[Contributor])

    async def search_repos(
        self, query: str, page: int | None = None
    ) -> ApiResponse[RepoSearchResponse]:
        params: dict[str, str | int] = {"q": query}
        if page is not None:
            params["page"] = page
        return await self._get("search/repositories", RepoSearchResponse, params)

    def _headers(self) -> dict[str, str]:
        if self._tokens is None:
            return {}
        token = self._tokens.load()
        if token is None:
            return {}
        return {"Authorization": f"token {token.value}"}

    async def _get(
        self,
        path: str,
        body_type: type[T],
        params: dict[str, str | int] | None = None,
    ) -> ApiResponse[T]:
        response = await self._request(path, body_type, params)
        if isinstance(response, ApiErrorResponse):
            self.last_error = response
        return response

    async def _request(
        self,
        path: str,
        body_type: type[T],
        params: dict[str, str | int] | None,
    ) -> ApiResponse[T]:
        logger.debug("GET %s params=%s", path, params)
        try:
            if self._client is not None:
                response = await self._client.get(
                    path, params=params, headers=self._headers()
                )
            else:
                async with get_http_client() as client:
                    response = await client.get(
                        path, params=params, headers=self._headers()
                    )
        except httpx.HTTPError as e:
            logger.warning("GET %s failed: %s", path, e)
            return api_error_from_exception(e)

        logger.debug("GET %s -> %s", path, response.status_code)
        try:
            return create_api_response(response, body_type)
        except (msgspec.DecodeError, msgspec.ValidationError) as e:
            logger.warning("GET %s returned an unexpected body: %s", path, e)
            return ApiErrorResponse(
                error_message=f"Failed to parse response: {e}",
                status_code=response.status_code,
            )


class ApiCallLiveData(LiveData[ApiResponse[T]]):
    """Runs a remote call when first observed and holds its response.

    The call starts once, on the first observer. If every observer goes
    away before it finishes, the call is cancelled and the next observer
    starts it again.
    """

    def __init__(
        self,
        executors: AppExecutors,
        call: Callable[[], Awaitable[ApiResponse[T]]],
    ) -> None:
        super().__init__()
        self._executors = executors
        self._call = call
        self._started = False
        self._future: concurrent.futures.Future | None = None

    def _on_active(self) -> None:
        if self._started:
            return
        self._started = True
        self._future = self._executors.run_coroutine(
            self._call, self._set_value, self._on_error
        )

    def _on_inactive(self) -> None:
        if self._future is None or self._future.done():
            return
        if self._future.cancel():
            # A cancelled call reports nothing, so it must be rerun
            self._started = False
            self._future = None

    def _on_error(self, error: BaseException) -> None:
        self._set_value(api_error_from_exception(error))
