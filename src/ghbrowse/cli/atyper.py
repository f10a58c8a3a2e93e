"""Typer with support for ``async def`` commands."""

import asyncio
import inspect
from functools import wraps
from typing import Any, Callable

import typer
from typer.core import TyperCommand


def _run_sync(f: Callable) -> Callable:
    """Wrap a coroutine function so click can call it like a plain function."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        coro = f(*args, **kwargs)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)
        # Called from inside a loop (tests awaiting a command): let the
        # caller await it
        return coro

    return wrapper


class ATyper(typer.Typer):
    """Typer whose ``command`` decorator also accepts coroutine functions.

    Each async command gets its own event loop through ``asyncio.run``.
    """

    def command(  # type: ignore[override]
        self,
        name: str | None = None,
        *,
        cls: type[TyperCommand] | None = None,
        **kwargs: Any,
    ) -> Any:
        def decorator(f: Callable) -> Callable:
            if inspect.iscoroutinefunction(f):
                f = _run_sync(f)
            return typer.Typer.command(self, name, cls=cls, **kwargs)(f)

        return decorator
