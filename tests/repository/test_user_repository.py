"""Tests for repository/user.py (UserRepository)."""

from __future__ import annotations

from ghbrowse.api.response import ApiErrorResponse, ApiSuccessResponse
from ghbrowse.repository.user import UserRepository
from ghbrowse.resource import Resource


class TestLoadUser:
    """Tests for UserRepository.load_user."""

    def test_from_network(self, queued_executors, queued_db, service, recorder, make_user):
        """An unknown user is fetched and served after saving."""
        user = make_user()
        service.respond("get_user", ApiSuccessResponse(body=user))

        UserRepository(queued_executors, queued_db, service).load_user("octocat").observe(recorder)
        queued_executors.drain()

        assert recorder.values == [Resource.loading(None), Resource.success(user)]
        assert queued_db.user_dao.get("octocat") == user

    def test_cached_user_not_refetched(self, db, executors, service, recorder, make_user):
        """A stored profile is served as is."""
        user = make_user()
        db.user_dao.insert(user)

        UserRepository(executors, db, service).load_user("octocat").observe(recorder)

        assert recorder.last == Resource.success(user)
        assert service.calls == []

    def test_not_found(self, db, executors, service, recorder):
        """A 404 ends in Error without data."""
        service.respond("get_user", ApiErrorResponse(error_message="Not Found", status_code=404))

        UserRepository(executors, db, service).load_user("ghost").observe(recorder)

        assert recorder.last == Resource.error("Not Found", None)
