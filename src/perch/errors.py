"""Perch exception hierarchy.

Shared across the matcher, filter chain, upstream client, and ASGI
handler so every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when gateway configuration or a route file is invalid.

    Typically surfaced during ``Gateway._freeze()`` or ``load_routes()``.
    """


class FilterError(PerchError):
    """A route filter raised or returned something unusable.

    The original exception, if any, is chained as ``__cause__``.
    Maps to a 500 response.
    """

    def __init__(self, filter_name: str, detail: str) -> None:
        self.filter_name = filter_name
        self.detail = detail
        super().__init__(f"filter {filter_name!r} failed: {detail}")


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, filters, middleware, or the upstream client.
    The ASGI handler catches these and dispatches to the matching
    ``@gateway.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request host and path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class BadGateway(HTTPError):  # noqa: N818
    """502 — the upstream could not be reached or broke the connection."""

    def __init__(self, detail: str = "Bad Gateway") -> None:
        super().__init__(status=502, detail=detail)


class GatewayTimeout(HTTPError):  # noqa: N818
    """504 — the upstream did not answer within the configured timeout."""

    def __init__(self, detail: str = "Gateway Timeout") -> None:
        super().__init__(status=504, detail=detail)
