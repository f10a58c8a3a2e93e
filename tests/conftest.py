"""Pytest configuration and shared fixtures for ghbrowse tests."""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Generator

import httpx
import pytest

from ghbrowse.api.response import ApiResponse
from ghbrowse.config import settings
from ghbrowse.config.settings import Config
from ghbrowse.db.database import GithubDb
from ghbrowse.models import Contributor, Owner, Repo, RepoSearchResult, User


class InstantExecutor:
    """Runs every callable straight away on the calling thread."""

    def execute(self, fn: Callable[[], Any]) -> None:
        fn()


class InstantAppExecutors:
    """AppExecutors stand-in where every lane is synchronous.

    Coroutines are run to completion in a private event loop, so the whole
    load protocol completes inside the call that starts it.
    """

    def __init__(self) -> None:
        self.disk_io = InstantExecutor()
        self.main_thread = InstantExecutor()

    def run_coroutine(
        self,
        factory: Callable[[], Awaitable[Any]],
        on_result: Callable[[Any], None],
        on_error: Callable[[BaseException], None] | None = None,
    ) -> concurrent.futures.Future:
        future: concurrent.futures.Future = concurrent.futures.Future()
        try:
            result = asyncio.run(_await(factory))
        except Exception as e:
            future.set_exception(e)
            if on_error is not None:
                on_error(e)
        else:
            future.set_result(result)
            on_result(result)
        return future

    def shutdown(self) -> None:
        pass


async def _await(factory: Callable[[], Awaitable[Any]]) -> Any:
    return await factory()


class QueuedExecutor:
    """Holds work until ``drain`` is called."""

    def __init__(self) -> None:
        self.pending: list[Callable[[], Any]] = []

    def execute(self, fn: Callable[[], Any]) -> None:
        self.pending.append(fn)

    def drain(self) -> None:
        while self.pending:
            self.pending.pop(0)()


class QueuedAppExecutors(InstantAppExecutors):
    """AppExecutors stand-in where disk work and remote calls wait for ``drain``.

    Lets a test look at what observers hold before the local store has
    answered or the remote call has returned.
    """

    def __init__(self) -> None:
        super().__init__()
        self.disk_io = QueuedExecutor()

    def run_coroutine(
        self,
        factory: Callable[[], Awaitable[Any]],
        on_result: Callable[[Any], None],
        on_error: Callable[[BaseException], None] | None = None,
    ) -> concurrent.futures.Future:
        future: concurrent.futures.Future = concurrent.futures.Future()

        def run() -> None:
            if future.cancelled():
                return
            try:
                result = asyncio.run(_await(factory))
            except Exception as e:
                future.set_exception(e)
                if on_error is not None:
                    on_error(e)
            else:
                future.set_result(result)
                on_result(result)

        self.disk_io.execute(run)
        return future

    def drain(self) -> None:
        self.disk_io.drain()


class Recorder:
    """Observer that keeps everything it receives."""

    def __init__(self) -> None:
        self.values: list[Any] = []

    def __call__(self, value: Any) -> None:
        self.values.append(value)

    @property
    def last(self) -> Any:
        return self.values[-1]


class StubService:
    """GithubService stand-in whose calls answer with canned responses.

    Each method records its arguments and returns whatever is queued under
    its name; responses are reused once the queue has one element left.
    """

    def __init__(self) -> None:
        self.responses: dict[str, list[ApiResponse]] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.last_error = None

    def respond(self, method: str, *responses: ApiResponse) -> None:
        self.responses[method] = list(responses)

    async def _answer(self, method: str, *args: Any) -> ApiResponse:
        self.calls.append((method, args))
        queue = self.responses[method]
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def calls_to(self, method: str) -> list[tuple]:
        return [args for name, args in self.calls if name == method]

    async def get_user(self, login):
        return await self._answer("get_user", login)

    async def get_repos(self, owner):
        return await self._answer("get_repos", owner)

    async def get_repo(self, owner, name):
        return await self._answer("get_repo", owner, name)

    async def get_contributors(self, owner, name):
        return await self._answer("get_contributors", owner, name)

    async def search_repos(self, query, page=None):
        return await self._answer("search_repos", query, page)


@pytest.fixture
def executors() -> InstantAppExecutors:
    return InstantAppExecutors()


@pytest.fixture
def db(executors: InstantAppExecutors) -> Generator[GithubDb, None, None]:
    """In-memory local store on instant executors."""
    database = GithubDb(executors)
    yield database
    database.close()


@pytest.fixture
def queued_executors() -> QueuedAppExecutors:
    return QueuedAppExecutors()


@pytest.fixture
def queued_db(queued_executors: QueuedAppExecutors) -> Generator[GithubDb, None, None]:
    """In-memory local store whose observable reads wait for ``drain``."""
    database = GithubDb(queued_executors)
    yield database
    database.close()


@pytest.fixture
def service() -> StubService:
    return StubService()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture(autouse=True)
def config_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point config and cache directories at a temp dir for every test."""
    monkeypatch.setenv("GHBROWSE_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("GHBROWSE_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.delenv("GHBROWSE_BASE_URL", raising=False)
    monkeypatch.delenv("GHBROWSE_RATE_LIMIT_MINUTES", raising=False)
    settings._config = None
    yield tmp_path
    settings._config = None


@pytest.fixture
def default_config() -> Config:
    return Config()


def _make_repo(
    owner: str = "foo",
    name: str = "bar",
    repo_id: int = 1,
    stars: int = 3,
    description: str | None = "some desc",
) -> Repo:
    return Repo(
        id=repo_id,
        name=name,
        full_name=f"{owner}/{name}",
        description=description,
        owner=Owner(login=owner, url=None),
        stars=stars,
    )


def _make_repos(count: int, owner: str = "foo", start_id: int = 1) -> list[Repo]:
    return [
        _make_repo(owner=owner, name=f"repo{i}", repo_id=i, stars=count - i)
        for i in range(start_id, start_id + count)
    ]


def _make_contributor(
    login: str = "alice",
    contributions: int = 10,
    owner: str = "",
    name: str = "",
) -> Contributor:
    return Contributor(
        login=login,
        contributions=contributions,
        avatar_url=f"https://avatars/{login}",
        repo_owner=owner,
        repo_name=name,
    )


def _make_user(login: str = "octocat", name: str | None = "The Octocat") -> User:
    return User(
        login=login,
        avatar_url=f"https://avatars/{login}",
        name=name,
        company=None,
        repos_url=f"https://api.github.com/users/{login}/repos",
        blog=None,
    )


def _make_search_result(
    query: str = "python", repo_ids: list[int] | None = None, next: int | None = 2
) -> RepoSearchResult:
    ids = repo_ids if repo_ids is not None else [1, 2]
    return RepoSearchResult(query=query, repo_ids=ids, total_count=len(ids), next=next)


def _json_response(
    status_code: int = 200,
    json: Any = None,
    headers: dict[str, str] | None = None,
    content: bytes | None = None,
) -> httpx.Response:
    """httpx.Response with a request attached, as returned by a client."""
    request = httpx.Request("GET", "https://api.github.com/test")
    if content is not None:
        return httpx.Response(status_code, content=content, headers=headers, request=request)
    if json is None:
        return httpx.Response(status_code, headers=headers, request=request)
    return httpx.Response(status_code, json=json, headers=headers, request=request)


@pytest.fixture
def make_repo() -> Callable[..., Repo]:
    return _make_repo


@pytest.fixture
def make_repos() -> Callable[..., list[Repo]]:
    return _make_repos


@pytest.fixture
def make_contributor() -> Callable[..., Contributor]:
    return _make_contributor


@pytest.fixture
def make_user() -> Callable[..., User]:
    return _make_user


@pytest.fixture
def make_search_result() -> Callable[..., RepoSearchResult]:
    return _make_search_result


@pytest.fixture
def json_response() -> Callable[..., httpx.Response]:
    return _json_response


@pytest.fixture
def new_recorder() -> type[Recorder]:
    """Recorder class, for tests that need more than one observer."""
    return Recorder
