"""Filter protocol and result type alias.

A filter is any callable matching::

    def my_filter(request: Request) -> Request | Response: ...
    async def my_filter(request: Request) -> Request | Response: ...

Returning a ``Request`` passes it on to the next filter; returning a
``Response`` short-circuits the chain. No base class required.
"""

from collections.abc import Awaitable
from typing import Protocol, TypeAlias

from perch.http.request import Request
from perch.http.response import Response

# What a filter hands back to the chain
FilterResult: TypeAlias = Request | Response


class Filter(Protocol):
    """Protocol for route filters.

    Accepts both functions and callable objects::

        # Function filter
        def tag(request: Request) -> Request:
            return request.with_header("X-Gateway", "perch")

        # Class filter with fixed configuration
        class RequireToken:
            def __call__(self, request: Request) -> Request | Response:
                if "authorization" not in request.headers:
                    return Response("unauthorized", status=401)
                return request
    """

    def __call__(self, request: Request) -> FilterResult | Awaitable[FilterResult]: ...


def filter_name(f: object) -> str:
    """Human-readable name for logs and errors."""
    return getattr(f, "__name__", None) or type(f).__name__
