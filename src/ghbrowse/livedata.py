"""Observable value holders for ghbrowse.

A LiveData keeps its latest value and hands it to every observer: new
observers get the current value straight away, later changes are broadcast
in registration order. Each observer sees a given value at most once.

Values are expected to be set on the delivery lane (see
``ghbrowse.executors``); producers on other threads hop over with
``executors.main_thread.execute``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")

Observer = Callable[[Any], None]

_NOT_SET: Any = object()


class _ObserverWrapper:
    __slots__ = ("observer", "last_version", "attached")

    def __init__(self, observer: Observer) -> None:
        self.observer = observer
        self.last_version = -1
        self.attached = True


class Subscription:
    """Handle returned by ``LiveData.observe``; ``dispose`` stops delivery."""

    def __init__(self, live_data: LiveData, observer: Observer) -> None:
        self._live_data = live_data
        self._observer = observer

    def dispose(self) -> None:
        self._live_data.remove_observer(self._observer)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class LiveData(Generic[T]):
    """Read-only observable value with replay of the last value."""

    def __init__(self, value: Any = _NOT_SET) -> None:
        self._value = value
        self._version = -1 if value is _NOT_SET else 0
        self._observers: list[_ObserverWrapper] = []
        self._dispatching = False
        self._invalidated = False

    @property
    def value(self) -> T | None:
        """Current value, or None if nothing was set yet."""
        return None if self._value is _NOT_SET else self._value

    def has_value(self) -> bool:
        return self._value is not _NOT_SET

    def has_observers(self) -> bool:
        return bool(self._observers)

    def observe(self, observer: Callable[[T], None]) -> Subscription:
        """Register an observer; it receives the current value if one is set."""
        if any(w.observer == observer for w in self._observers):
            raise ValueError("observer is already registered")

        wrapper = _ObserverWrapper(observer)
        self._observers.append(wrapper)
        if len(self._observers) == 1:
            self._on_active()
        if wrapper.attached:
            self._dispatch(wrapper)
        return Subscription(self, observer)

    def remove_observer(self, observer: Callable[[T], None]) -> None:
        for wrapper in self._observers:
            if wrapper.observer == observer:
                wrapper.attached = False
                self._observers.remove(wrapper)
                if not self._observers:
                    self._on_inactive()
                return

    def _set_value(self, value: T) -> None:
        self._value = value
        self._version += 1
        self._dispatch(None)

    def _dispatch(self, initiator: _ObserverWrapper | None) -> None:
        if self._dispatching:
            self._invalidated = True
            return

        self._dispatching = True
        try:
            while True:
                self._invalidated = False
                if initiator is not None:
                    self._consider_notify(initiator)
                    initiator = None
                else:
                    for wrapper in list(self._observers):
                        self._consider_notify(wrapper)
                        if self._invalidated:
                            break
                if not self._invalidated:
                    break
        finally:
            self._dispatching = False

    def _consider_notify(self, wrapper: _ObserverWrapper) -> None:
        if not wrapper.attached or self._value is _NOT_SET:
            return
        if wrapper.last_version >= self._version:
            return
        wrapper.last_version = self._version
        wrapper.observer(self._value)

    def _on_active(self) -> None:
        """Called when the number of observers goes from 0 to 1."""

    def _on_inactive(self) -> None:
        """Called when the number of observers goes from 1 to 0."""


class MutableLiveData(LiveData[T]):
    """LiveData whose value can be set by anyone holding it."""

    def set_value(self, value: T) -> None:
        self._set_value(value)


class _Source:
    __slots__ = ("live_data", "on_changed", "plugged")

    def __init__(self, live_data: LiveData, on_changed: Observer) -> None:
        self.live_data = live_data
        self.on_changed = on_changed
        self.plugged = False

    def plug(self) -> None:
        # The flag goes up first: observe() may deliver synchronously and
        # the callback may unplug us before observe() returns.
        if not self.plugged:
            self.plugged = True
            self.live_data.observe(self._deliver)

    def unplug(self) -> None:
        if self.plugged:
            self.plugged = False
            self.live_data.remove_observer(self._deliver)

    def _deliver(self, value: Any) -> None:
        self.on_changed(value)


class MediatorLiveData(MutableLiveData[T]):
    """LiveData that listens to other LiveData objects while it is observed.

    Sources are only subscribed to while this object has observers, so
    dropping the last observer releases everything upstream.
    """

    def __init__(self, value: Any = _NOT_SET) -> None:
        super().__init__(value)
        self._sources: dict[int, _Source] = {}

    def add_source(self, source: LiveData[R], on_changed: Callable[[R], None]) -> None:
        existing = self._sources.get(id(source))
        if existing is not None:
            if existing.on_changed != on_changed:
                raise ValueError("source already added with a different callback")
            return

        entry = _Source(source, on_changed)
        self._sources[id(source)] = entry
        if self.has_observers():
            entry.plug()

    def remove_source(self, source: LiveData) -> None:
        entry = self._sources.pop(id(source), None)
        if entry is not None:
            entry.unplug()

    def _on_active(self) -> None:
        for entry in list(self._sources.values()):
            # A source delivering on plug may have swapped out a later one
            if self._sources.get(id(entry.live_data)) is entry:
                entry.plug()

    def _on_inactive(self) -> None:
        for entry in list(self._sources.values()):
            entry.unplug()


def absent() -> LiveData[Any]:
    """LiveData that holds None and never changes."""
    return LiveData(None)


def switch_map(
    source: LiveData[T],
    transform: Callable[[T], LiveData[R]],
) -> MediatorLiveData[R]:
    """Mirror the LiveData produced by ``transform`` for the latest source value."""
    result: MediatorLiveData[R] = MediatorLiveData()
    current: list[LiveData[R] | None] = [None]

    def on_source(value: T) -> None:
        new_live_data = transform(value)
        if current[0] is new_live_data:
            return
        if current[0] is not None:
            result.remove_source(current[0])
        current[0] = new_live_data
        if new_live_data is not None:
            result.add_source(new_live_data, result.set_value)

    result.add_source(source, on_source)
    return result


async def await_value(
    live_data: LiveData[T],
    predicate: Callable[[T], bool] = lambda value: True,
) -> T:
    """Observe ``live_data`` until a value satisfies ``predicate``.

    Must be awaited on the loop that delivers the LiveData's values.
    """
    future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

    def on_value(value: T) -> None:
        if not future.done() and predicate(value):
            future.set_result(value)

    subscription = live_data.observe(on_value)
    try:
        return await future
    finally:
        subscription.dispose()
