"""Tests for core/next_page.py (FetchNextSearchPageTask)."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from ghbrowse.api.response import ApiEmptyResponse, ApiErrorResponse, ApiSuccessResponse
from ghbrowse.core.next_page import FetchNextSearchPageTask
from ghbrowse.models import RepoSearchResponse
from ghbrowse.resource import Resource, Status


def page(items, total=10, next_page=None):
    links = {"next": f"https://api.github.com/search/repositories?q=foo&page={next_page}"}
    return ApiSuccessResponse(
        body=RepoSearchResponse(total=total, items=items),
        links=links if next_page is not None else {},
    )


class TestFetchNextSearchPageTask:
    """Tests for FetchNextSearchPageTask.run."""

    @pytest.mark.asyncio
    async def test_no_cursor_is_not_started(self, db, service):
        """Without a previous search the result is NOT_STARTED, not an error."""
        result = await FetchNextSearchPageTask("foo", service, db).run()

        assert result == Resource.not_started()
        assert result.status == Status.NOT_STARTED
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_cursor_without_next_page(self, db, service, make_search_result):
        """A cursor with no next page reports Success(False) without a call."""
        db.repo_dao.insert_search_result(make_search_result("foo", next=None))

        result = await FetchNextSearchPageTask("foo", service, db).run()

        assert result == Resource.success(False)
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_fetches_and_merges_ids(self, db, service, make_repos, make_search_result):
        """The next page is fetched, ids appended in order and repos saved."""
        db.repo_dao.insert_search_result(make_search_result("foo", [1, 2], next=2))
        new_repos = make_repos(2, start_id=3)
        service.respond("search_repos", page(new_repos, total=6, next_page=3))

        result = await FetchNextSearchPageTask("foo", service, db).run()

        assert result == Resource.success(True)
        assert service.calls_to("search_repos") == [("foo", 2)]
        cursor = db.repo_dao.find_search_result("foo")
        assert cursor.repo_ids == [1, 2, 3, 4]
        assert cursor.total_count == 6
        assert cursor.next == 3
        assert db.repo_dao.get_ordered([3, 4]) == new_repos

    @pytest.mark.asyncio
    async def test_last_page(self, db, service, make_repos, make_search_result):
        """A page without a next link reports that no pages are left."""
        db.repo_dao.insert_search_result(make_search_result("foo", [1], next=2))
        service.respond("search_repos", page(make_repos(1, start_id=2)))

        result = await FetchNextSearchPageTask("foo", service, db).run()

        assert result == Resource.success(False)
        assert db.repo_dao.find_search_result("foo").next is None

    @pytest.mark.asyncio
    async def test_empty_response(self, db, service, make_search_result):
        """An empty response means there is nothing more."""
        db.repo_dao.insert_search_result(make_search_result("foo", next=2))
        service.respond("search_repos", ApiEmptyResponse())

        result = await FetchNextSearchPageTask("foo", service, db).run()

        assert result == Resource.success(False)

    @pytest.mark.asyncio
    async def test_api_error(self, db, service, make_search_result):
        """An error response becomes Error and leaves the cursor alone."""
        original = make_search_result("foo", [1, 2], next=2)
        db.repo_dao.insert_search_result(original)
        service.respond(
            "search_repos", ApiErrorResponse(error_message="rate limited", status_code=403)
        )

        result = await FetchNextSearchPageTask("foo", service, db).run()

        assert result == Resource.error("rate limited", True)
        assert db.repo_dao.find_search_result("foo") == original

    @pytest.mark.asyncio
    async def test_transport_failure(self, db, service, make_search_result):
        """An exception from the call is reported as Error."""
        db.repo_dao.insert_search_result(make_search_result("foo", next=2))

        async def broken(query, page=None):
            raise httpx.ConnectError("connection refused")

        with patch.object(service, "search_repos", broken):
            result = await FetchNextSearchPageTask("foo", service, db).run()

        assert result.status == Status.ERROR
        assert result.message == "connection refused"
        assert result.data is True

    @pytest.mark.asyncio
    async def test_save_is_atomic(self, db, service, make_repos, make_search_result):
        """If saving the repos fails, the merged cursor is not kept either."""
        original = make_search_result("foo", [1], next=2)
        db.repo_dao.insert_search_result(original)
        service.respond("search_repos", page(make_repos(1, start_id=2), next_page=3))

        with patch.object(
            db.repo_dao, "insert_repos", side_effect=OSError("disk full")
        ):
            result = await FetchNextSearchPageTask("foo", service, db).run()

        assert result == Resource.error("disk full", True)
        assert db.repo_dao.find_search_result("foo") == original
