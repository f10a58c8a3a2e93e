"""Load-progress envelope passed to observers."""

from __future__ import annotations

from enum import StrEnum
from typing import Generic, TypeVar

import msgspec

T = TypeVar("T")


class Status(StrEnum):
    """Status of a resource that is provided to observers.

    NOT_STARTED is only produced by the next-page search task when no search
    for the query has been run yet, to keep that case apart from a search
    that matched nothing.
    """

    SUCCESS = "success"
    ERROR = "error"
    LOADING = "loading"
    NOT_STARTED = "not_started"


class Resource(msgspec.Struct, Generic[T], frozen=True):
    """A value that holds data together with its loading status."""

    status: Status
    data: T | None = None
    message: str | None = None

    @classmethod
    def success(cls, data: T | None) -> Resource[T]:
        return cls(status=Status.SUCCESS, data=data)

    @classmethod
    def error(cls, message: str, data: T | None = None) -> Resource[T]:
        if not message:
            raise ValueError("error resources need a message")
        return cls(status=Status.ERROR, data=data, message=message)

    @classmethod
    def loading(cls, data: T | None = None) -> Resource[T]:
        return cls(status=Status.LOADING, data=data)

    @classmethod
    def not_started(cls) -> Resource[T]:
        return cls(status=Status.NOT_STARTED)

    @property
    def is_terminal(self) -> bool:
        """True once the load has settled (anything but LOADING)."""
        return self.status != Status.LOADING
