"""Top-level entry point wiring the library together."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from pathlib import Path

import httpx

from ghbrowse.api.service import GithubService
from ghbrowse.config.settings import Config, get_config
from ghbrowse.core import http
from ghbrowse.core.rate_limiter import RateLimiter
from ghbrowse.db.database import GithubDb
from ghbrowse.executors import AppExecutors
from ghbrowse.repository.repo import RepoRepository
from ghbrowse.repository.token import AccessTokenRepository
from ghbrowse.repository.user import UserRepository

logger = logging.getLogger(__name__)


class GithubBrowser:
    """Owns the executors, local store, API client and repositories.

    Create it on the event loop that should deliver values, preferably
    with ``async with``::

        async with GithubBrowser() as browser:
            resource = await await_value(
                browser.repos.load_repos("python"), lambda r: r.is_terminal
            )

    Args:
        config: Settings to use; defaults to the loaded configuration
        client: HTTP client; defaults to the shared pooled client
        database: Database path, overriding the configured one
        token_path: Token file, overriding the default location
        executors: Execution lanes; defaults to lanes on the running loop
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        database: str | Path | None = None,
        token_path: Path | None = None,
        executors: AppExecutors | None = None,
    ) -> None:
        self.config = config or get_config()
        self.executors = executors or AppExecutors()
        self.db = GithubDb(
            self.executors, database or self.config.cache.database_path()
        )
        self.tokens = AccessTokenRepository(token_path)
        self.service = GithubService(client, self.tokens)
        self._owns_client = client is None

        rate_limiter: RateLimiter[str] = RateLimiter(
            timedelta(minutes=self.config.cache.rate_limit_minutes)
        )
        self.repos = RepoRepository(self.executors, self.db, self.service, rate_limiter)
        self.users = UserRepository(self.executors, self.db, self.service)
        self._closed = False

    async def __aenter__(self) -> GithubBrowser:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Wait for pending writes, then release the store and the HTTP client."""
        if self._closed:
            return
        self._closed = True
        await asyncio.to_thread(self.executors.shutdown)
        self.db.close()
        if self._owns_client:
            await http.cleanup()
        logger.debug("browser closed")
