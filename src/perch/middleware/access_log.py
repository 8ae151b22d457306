"""Access log middleware."""

import logging
import time

from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next


class AccessLog:
    """Log ``METHOD host/path -> status (ms)`` for every request.

    Errors raised further down are logged with their status and then
    re-raised so the normal error handling still applies.

    Usage::

        gateway.add_middleware(AccessLog())
    """

    __slots__ = ("level", "logger")

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.logger = logger or logging.getLogger("perch.access")
        self.level = level

    async def __call__(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        try:
            response = await next(request)
        except HTTPError as exc:
            self._log(request, exc.status, start)
            raise
        except Exception:
            self._log(request, 500, start)
            raise
        self._log(request, response.status, start)
        return response

    def _log(self, request: Request, status: int, start: float) -> None:
        elapsed_ms = (time.perf_counter() - start) * 1000
        self.logger.log(
            self.level,
            "%s %s%s -> %d (%.1fms)",
            request.method,
            request.host,
            request.url,
            status,
            elapsed_ms,
        )
