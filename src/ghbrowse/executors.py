"""Execution lanes for ghbrowse.

- ``main_thread``: the event loop that delivers LiveData values to observers
- ``disk_io``: a single worker thread for local store reads and writes
- network: remote calls made with httpx are coroutines, so they run on the
  event loop without blocking it; ``run_coroutine`` schedules them and hands
  the result back on the delivery lane
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class Executor(Protocol):
    """Anything that can run a zero-argument callable."""

    def execute(self, fn: Callable[[], Any]) -> None: ...


class PoolExecutor:
    """Executor backed by a thread pool."""

    def __init__(self, max_workers: int, thread_name_prefix: str) -> None:
        self._pool = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
        )

    def execute(self, fn: Callable[[], Any]) -> None:
        self._pool.submit(fn)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)


class LoopExecutor:
    """Executor that runs callables on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.loop = loop

    def execute(self, fn: Callable[[], Any]) -> None:
        self.loop.call_soon_threadsafe(fn)


class AppExecutors:
    """Executor lanes shared by the whole library.

    Must be created while the delivery loop is running unless ``loop`` is
    given explicitly.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        disk_io: Executor | None = None,
        main_thread: Executor | None = None,
    ) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self.disk_io = disk_io or PoolExecutor(1, "ghbrowse-disk")
        self.main_thread = main_thread or LoopExecutor(self._loop)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def run_coroutine(
        self,
        factory: Callable[[], Awaitable[T]],
        on_result: Callable[[T], None],
        on_error: Callable[[BaseException], None] | None = None,
    ) -> concurrent.futures.Future[T]:
        """Schedule ``factory()`` on the loop; report back on the delivery lane.

        Returns the future so callers can cancel the work. Nothing is
        reported for a cancelled future.
        """

        async def runner() -> T:
            return await factory()

        future = asyncio.run_coroutine_threadsafe(runner(), self._loop)

        def done(fut: concurrent.futures.Future[T]) -> None:
            if fut.cancelled():
                return
            error = fut.exception()
            if error is None:
                result = fut.result()
                self.main_thread.execute(lambda: on_result(result))
            elif on_error is not None:
                self.main_thread.execute(lambda: on_error(error))

        future.add_done_callback(done)
        return future

    def shutdown(self) -> None:
        """Stop the disk worker, waiting for queued writes."""
        if isinstance(self.disk_io, PoolExecutor):
            self.disk_io.shutdown()
