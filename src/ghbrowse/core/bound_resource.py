"""Cache-then-network loading.

NetworkBoundResource serves whatever the local store has while it decides
whether the remote service needs to be asked, saves what comes back and
then keeps serving the local store. The local store stays the single source
of truth: network results are never handed to observers directly, only
after they have been saved and read back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from ghbrowse.api.response import (
    ApiEmptyResponse,
    ApiErrorResponse,
    ApiResponse,
    ApiSuccessResponse,
)
from ghbrowse.executors import AppExecutors
from ghbrowse.livedata import LiveData, MediatorLiveData
from ghbrowse.resource import Resource

ResultT = TypeVar("ResultT")
RequestT = TypeVar("RequestT")

logger = logging.getLogger(__name__)


def _body(response: ApiSuccessResponse[RequestT]) -> RequestT:
    return response.body


def _noop() -> None:
    pass


class NetworkBoundResource(Generic[ResultT, RequestT]):
    """One run of the cache-then-network protocol.

    Build a fresh instance per load call and hand ``as_live_data()`` to the
    observer.

    Args:
        executors: Lanes for saving (disk) and delivering (main)
        load_from_db: Observable read of the locally cached value
        should_fetch: Whether to go to the network given the cached value
        create_call: Starts the remote call; the returned LiveData may emit
            None while the call is pending
        save_call_result: Persists a fetched body; runs on the disk lane
        process_response: Turns a success response into what gets saved
        on_fetch_failed: Called once when the remote call fails
        name: Label used in log messages
    """

    def __init__(
        self,
        executors: AppExecutors,
        *,
        load_from_db: Callable[[], LiveData[ResultT | None]],
        should_fetch: Callable[[ResultT | None], bool],
        create_call: Callable[[], LiveData[ApiResponse[RequestT] | None]],
        save_call_result: Callable[[RequestT], None],
        process_response: Callable[[ApiSuccessResponse[RequestT]], RequestT] = _body,
        on_fetch_failed: Callable[[], None] = _noop,
        name: str = "resource",
    ) -> None:
        self._executors = executors
        self._load_from_db = load_from_db
        self._should_fetch = should_fetch
        self._create_call = create_call
        self._save_call_result = save_call_result
        self._process_response = process_response
        self._on_fetch_failed = on_fetch_failed
        self._name = name

        self._result: MediatorLiveData[Resource[ResultT]] = MediatorLiveData(
            Resource.loading(None)
        )

        db_source = self._load_from_db()

        def on_first_local(data: ResultT | None) -> None:
            self._result.remove_source(db_source)
            if self._should_fetch(data):
                logger.debug("%s: fetching from network", self._name)
                self._fetch_from_network(db_source)
            else:
                logger.debug("%s: serving local data", self._name)
                self._result.add_source(
                    db_source, lambda new_data: self._set_value(Resource.success(new_data))
                )

        self._result.add_source(db_source, on_first_local)

    def as_live_data(self) -> LiveData[Resource[ResultT]]:
        return self._result

    def _set_value(self, new_value: Resource[ResultT]) -> None:
        if self._result.value != new_value:
            self._result.set_value(new_value)

    def _fetch_from_network(self, db_source: LiveData[ResultT | None]) -> None:
        api_response = self._create_call()

        # Re-attach the local source so cached data shows while loading
        self._result.add_source(
            db_source, lambda new_data: self._set_value(Resource.loading(new_data))
        )

        def on_response(response: ApiResponse[RequestT] | None) -> None:
            if response is None:
                # Call still in flight
                return

            self._result.remove_source(api_response)
            self._result.remove_source(db_source)

            if isinstance(response, ApiSuccessResponse):
                item = self._process_response(response)
                self._executors.disk_io.execute(lambda: self._save_and_reload(item))
            elif isinstance(response, ApiEmptyResponse):
                logger.debug("%s: empty response", self._name)
                self._executors.main_thread.execute(self._reload_as_success)
            elif isinstance(response, ApiErrorResponse):
                logger.warning(
                    "%s: fetch failed: %s", self._name, response.error_message
                )
                self._on_fetch_failed()
                self._result.add_source(
                    db_source,
                    lambda new_data: self._set_value(
                        Resource.error(response.error_message, new_data)
                    ),
                )
            else:
                raise TypeError(f"unexpected API response: {response!r}")

        self._result.add_source(api_response, on_response)

    def _save_and_reload(self, item: RequestT) -> None:
        try:
            self._save_call_result(item)
        except Exception as e:
            logger.exception("%s: saving fetched data failed", self._name)
            message = str(e) or type(e).__name__
            self._executors.main_thread.execute(lambda: self._fail_after_save(message))
            return
        # Fresh local read so the saved rows are picked up
        self._executors.main_thread.execute(self._reload_as_success)

    def _reload_as_success(self) -> None:
        self._result.add_source(
            self._load_from_db(),
            lambda new_data: self._set_value(Resource.success(new_data)),
        )

    def _fail_after_save(self, message: str) -> None:
        self._on_fetch_failed()
        self._result.add_source(
            self._load_from_db(),
            lambda new_data: self._set_value(Resource.error(message, new_data)),
        )
