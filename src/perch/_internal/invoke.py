"""Invoke helpers — call sync or async actions uniformly.

Perch actions can be ``def`` or ``async def``. The console runs one
action per process with no event loop of its own, so async actions are
driven to completion with ``anyio.run``. This module keeps the
sync/async check in exactly one place.

Usage::

    from perch._internal.invoke import invoke

    result = invoke(action, *args, **kwargs)
"""

import functools
import inspect
from collections.abc import Awaitable
from typing import Any

import anyio


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler, running it on an event loop if it's a coroutine.

    Works with both sync and async callables::

        def action_index(self):
            return 0

        async def action_sync(self):
            await fetch_all()
            return 0
    """
    if inspect.iscoroutinefunction(handler):
        return anyio.run(functools.partial(handler, *args, **kwargs))
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = anyio.run(_await, result)
    return result
