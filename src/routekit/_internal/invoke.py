"""Invoke helpers: call sync or async handlers uniformly.

Handlers can be ``def`` or ``async def``. Any code that calls a
user-provided handler must handle both cases. This module provides
a single helper so the sync/async check lives in exactly one place.

Usage::

    from routekit._internal.invoke import invoke

    result = await invoke(handler, request)
"""

import functools
import inspect
from typing import Any

import anyio.to_thread


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result.

    Coroutine functions are awaited on the event loop. Plain functions
    run in a worker thread so a blocking handler cannot stall sibling
    requests::

        # sync: runs in a worker thread
        def report(request):
            return RawResponse(200, body=build_report())

        # async: awaited directly
        async def report(request):
            return RawResponse(200, body=await fetch_report())
    """
    if inspect.iscoroutinefunction(handler):
        return await handler(*args, **kwargs)
    result = await anyio.to_thread.run_sync(
        functools.partial(handler, *args, **kwargs),
        abandon_on_cancel=True,
    )
    if inspect.isawaitable(result):
        result = await result
    return result
