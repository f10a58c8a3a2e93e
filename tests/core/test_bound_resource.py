"""Tests for core/bound_resource.py (cache-then-network protocol)."""

from __future__ import annotations

import pytest

from ghbrowse.api.response import ApiEmptyResponse, ApiErrorResponse, ApiSuccessResponse
from ghbrowse.core.bound_resource import NetworkBoundResource
from ghbrowse.livedata import MutableLiveData
from ghbrowse.resource import Resource


class Harness:
    """Hand-driven collaborators for one NetworkBoundResource run."""

    def __init__(self, executors, should_fetch=lambda data: data is None, fail_save=False):
        self.db_sources = [MutableLiveData() for _ in range(3)]
        self.db_loads = 0
        self.call = MutableLiveData()
        self.call_count = 0
        self.saved = []
        self.failures = 0
        self.events = []
        self._fail_save = fail_save

        self.resource = NetworkBoundResource(
            executors,
            load_from_db=self._load_from_db,
            should_fetch=should_fetch,
            create_call=self._create_call,
            save_call_result=self._save,
            on_fetch_failed=self._on_fetch_failed,
            name="test",
        )

    @property
    def db(self) -> MutableLiveData:
        """Local source handed out by the first load."""
        return self.db_sources[0]

    @property
    def reloaded_db(self) -> MutableLiveData:
        """Local source handed out by the reload after the call."""
        return self.db_sources[1]

    def _load_from_db(self):
        source = self.db_sources[self.db_loads]
        self.db_loads += 1
        return source

    def _create_call(self):
        self.call_count += 1
        return self.call

    def _save(self, item):
        if self._fail_save:
            raise OSError("disk full")
        self.events.append(("save", item))
        self.saved.append(item)

    def _on_fetch_failed(self):
        self.failures += 1

    def observe(self, recorder):
        def observer(value):
            self.events.append(("emit", value))
            recorder(value)

        return self.resource.as_live_data().observe(observer)


class TestNetworkBoundResource:
    """Tests for NetworkBoundResource."""

    def test_starts_loading_and_waits_for_local(self, executors, recorder):
        """Observers get Loading(None) and nothing else until the store emits."""
        harness = Harness(executors)
        harness.observe(recorder)

        assert recorder.values == [Resource.loading(None)]
        assert harness.call_count == 0

    def test_fetch_success_saves_then_reloads(self, executors, recorder):
        """A successful call is saved and the fresh local read becomes Success."""
        harness = Harness(executors)
        harness.observe(recorder)

        harness.db.set_value(None)
        assert harness.call_count == 1

        harness.call.set_value(ApiSuccessResponse(body="remote"))
        assert harness.saved == ["remote"]

        harness.reloaded_db.set_value("remote")

        assert recorder.values == [Resource.loading(None), Resource.success("remote")]
        assert harness.events.index(("save", "remote")) < harness.events.index(
            ("emit", Resource.success("remote"))
        )

    def test_no_fetch_when_local_is_enough(self, executors, recorder):
        """should_fetch false: local values flow through as Success, no call."""
        harness = Harness(executors)
        harness.observe(recorder)

        harness.db.set_value("cached")
        harness.db.set_value("changed")

        assert harness.call_count == 0
        assert recorder.values == [
            Resource.loading(None),
            Resource.success("cached"),
            Resource.success("changed"),
        ]

    def test_cached_data_shown_while_fetching(self, executors, recorder):
        """During the fetch, local values are mirrored as Loading."""
        harness = Harness(executors, should_fetch=lambda data: True)
        harness.observe(recorder)

        harness.db.set_value("stale")

        assert recorder.values == [Resource.loading(None), Resource.loading("stale")]
        assert harness.call_count == 1

    def test_error_keeps_local_data(self, executors, recorder):
        """A failed call emits Error with the cached data and calls the hook once."""
        harness = Harness(executors, should_fetch=lambda data: True)
        harness.observe(recorder)

        harness.db.set_value("stale")
        harness.call.set_value(ApiErrorResponse(error_message="boom", status_code=500))

        assert harness.failures == 1
        assert harness.saved == []
        assert recorder.last == Resource.error("boom", "stale")

    def test_error_is_not_retried(self, executors, recorder):
        """After an error only local changes produce emissions."""
        harness = Harness(executors, should_fetch=lambda data: True)
        harness.observe(recorder)
        harness.db.set_value("stale")
        harness.call.set_value(ApiErrorResponse(error_message="boom"))

        harness.db.set_value("edited")

        assert harness.call_count == 1
        assert harness.failures == 1
        assert recorder.last == Resource.error("boom", "edited")

    def test_empty_response_reloads_without_saving(self, executors, recorder):
        """An empty response skips saving and reloads the store."""
        harness = Harness(executors)
        harness.observe(recorder)

        harness.db.set_value(None)
        harness.call.set_value(ApiEmptyResponse())
        harness.reloaded_db.set_value(None)

        assert harness.saved == []
        assert recorder.values == [Resource.loading(None), Resource.success(None)]

    def test_pending_call_emissions_ignored(self, executors, recorder):
        """None from the call observable does not move the protocol on."""
        harness = Harness(executors)
        harness.observe(recorder)

        harness.db.set_value(None)
        harness.call.set_value(None)

        assert harness.saved == []
        assert recorder.values == [Resource.loading(None)]

        harness.call.set_value(ApiSuccessResponse(body="late"))
        assert harness.saved == ["late"]

    def test_consecutive_equal_envelopes_collapsed(self, executors, recorder):
        """The same envelope is never emitted twice in a row."""
        harness = Harness(executors)
        harness.observe(recorder)

        harness.db.set_value("cached")
        harness.db.set_value("cached")

        assert recorder.values == [Resource.loading(None), Resource.success("cached")]

    def test_save_failure_becomes_error(self, executors, recorder):
        """A save that raises reports Error and counts as a failed fetch."""
        harness = Harness(executors, fail_save=True)
        harness.observe(recorder)

        harness.db.set_value(None)
        harness.call.set_value(ApiSuccessResponse(body="remote"))
        harness.reloaded_db.set_value(None)

        assert harness.failures == 1
        assert recorder.last == Resource.error("disk full", None)

    def test_process_response_applied_before_save(self, executors):
        """process_response transforms the body that gets saved."""
        db_source = MutableLiveData()
        call = MutableLiveData()
        saved = []
        resource = NetworkBoundResource(
            executors,
            load_from_db=lambda: db_source,
            should_fetch=lambda data: True,
            create_call=lambda: call,
            save_call_result=saved.append,
            process_response=lambda response: response.body.upper(),
        )
        resource.as_live_data().observe(lambda value: None)

        db_source.set_value(None)
        call.set_value(ApiSuccessResponse(body="abc"))

        assert saved == ["ABC"]

    def test_unobserved_resource_does_nothing(self, executors):
        """Without observers the local source is never subscribed."""
        harness = Harness(executors)

        assert not harness.db.has_observers()
        assert harness.call_count == 0

    def test_dispose_detaches_sources(self, executors, recorder):
        """Removing the last observer releases the local and call sources."""
        harness = Harness(executors)
        subscription = harness.observe(recorder)
        harness.db.set_value(None)

        subscription.dispose()

        assert not harness.db.has_observers()
        assert not harness.call.has_observers()

    def test_unexpected_response_type_raises(self, executors):
        """Anything but an ApiResponse from the call is a programming error."""
        harness = Harness(executors)
        harness.observe(lambda value: None)
        harness.db.set_value(None)

        with pytest.raises(TypeError):
            harness.call.set_value("not a response")
