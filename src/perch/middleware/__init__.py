"""Middleware — gateway-wide wrappers around routing, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Route filters apply to one route; middleware applies to every request,
including those that match no route.

Built-in middleware:
    AccessLog -- One log line per request with status and latency
"""

from perch.middleware.access_log import AccessLog
from perch.middleware.protocol import Middleware, Next

__all__ = ["AccessLog", "Middleware", "Next"]
