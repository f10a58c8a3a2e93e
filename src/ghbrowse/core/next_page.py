"""Fetching further pages of a repository search."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import TYPE_CHECKING

import httpx

from ghbrowse.api.response import (
    ApiEmptyResponse,
    ApiErrorResponse,
    ApiSuccessResponse,
)
from ghbrowse.models import RepoSearchResponse, RepoSearchResult
from ghbrowse.resource import Resource

if TYPE_CHECKING:
    from ghbrowse.api.service import GithubService
    from ghbrowse.db.database import GithubDb

logger = logging.getLogger(__name__)


class FetchNextSearchPageTask:
    """Reads the stored search cursor for a query and fetches its next page.

    ``run`` resolves to:

    - NOT_STARTED when the query has never been searched
    - Success(False) when there is no further page
    - Success(True/False) after a page was saved, depending on whether
      another page follows it
    - Error(message, True) when the call or the local store failed; the
      True marks the failure as worth retrying
    """

    def __init__(self, query: str, service: GithubService, db: GithubDb) -> None:
        self.query = query
        self._service = service
        self._db = db

    async def run(self) -> Resource[bool]:
        try:
            current = await asyncio.to_thread(
                self._db.repo_dao.find_search_result, self.query
            )
        except sqlite3.Error as e:
            logger.warning("reading search cursor for %r failed: %s", self.query, e)
            return Resource.error(str(e) or "local store failure", True)

        if current is None:
            return Resource.not_started()
        if current.next is None:
            return Resource.success(False)

        logger.debug("fetching page %d for %r", current.next, self.query)
        try:
            response = await self._service.search_repos(self.query, current.next)
            if isinstance(response, ApiSuccessResponse):
                await asyncio.to_thread(self._save_page, current, response)
                return Resource.success(response.next_page is not None)
        except (OSError, sqlite3.Error, httpx.HTTPError) as e:
            logger.warning("next page for %r failed: %s", self.query, e)
            return Resource.error(str(e) or type(e).__name__, True)

        if isinstance(response, ApiEmptyResponse):
            return Resource.success(False)
        if isinstance(response, ApiErrorResponse):
            logger.warning(
                "next page for %r failed: %s", self.query, response.error_message
            )
            return Resource.error(response.error_message, True)
        raise TypeError(f"unexpected API response: {response!r}")

    def _save_page(
        self,
        current: RepoSearchResult,
        response: ApiSuccessResponse[RepoSearchResponse],
    ) -> None:
        body = response.body
        # Ids of every page fetched so far, in page order
        merged = RepoSearchResult(
            query=self.query,
            repo_ids=[*current.repo_ids, *body.repo_ids],
            total_count=body.total,
            next=response.next_page,
        )
        with self._db.transaction():
            self._db.repo_dao.insert_search_result(merged)
            self._db.repo_dao.insert_repos(body.items)
