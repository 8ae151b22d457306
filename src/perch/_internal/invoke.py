"""Invoke helpers — call sync or async callables uniformly.

Filters, error handlers, and lifecycle hooks can be ``def`` or
``async def``. This module keeps the sync/async check in one place.

Usage::

    from perch._internal.invoke import invoke

    result = await invoke(route_filter, request)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        def add_trace(request):
            return request.with_header("X-Trace", "1")

        async def check_quota(request):
            if await over_quota(request):
                return Response("slow down", status=429)
            return request
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
