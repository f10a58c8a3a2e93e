"""Per-key refresh cooldown."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Hashable
from datetime import timedelta
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)

DEFAULT_TIMEOUT = timedelta(minutes=10)


class RateLimiter(Generic[K]):
    """Decides whether data for a key is due for a refetch.

    ``should_fetch`` records the time whenever it says yes, so a second call
    inside the cooldown says no. ``reset`` forgets the key, which makes the
    next call say yes again; callers use it after a failed fetch.
    """

    def __init__(
        self,
        timeout: timedelta = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._timeout = timeout.total_seconds()
        self._clock = clock
        self._timestamps: dict[K, float] = {}
        self._lock = threading.Lock()

    @property
    def timeout(self) -> timedelta:
        return timedelta(seconds=self._timeout)

    def should_fetch(self, key: K) -> bool:
        with self._lock:
            now = self._clock()
            last_fetched = self._timestamps.get(key)
            if last_fetched is None or now - last_fetched > self._timeout:
                self._timestamps[key] = now
                return True
            return False

    def reset(self, key: K) -> None:
        with self._lock:
            self._timestamps.pop(key, None)
