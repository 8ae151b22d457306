"""Filters that answer directly instead of forwarding."""

from dataclasses import dataclass

from perch.http.request import Request
from perch.http.response import Response


@dataclass(frozen=True, slots=True)
class ShortCircuit:
    """Always respond with a fixed status and body; the upstream is never called.

    Usage::

        # Maintenance window for one route
        filters=[ShortCircuit(503, "back soon")]
    """

    status: int = 503
    body: str = ""
    content_type: str = "text/plain; charset=utf-8"

    def __call__(self, request: Request) -> Response:
        return Response(body=self.body, status=self.status, content_type=self.content_type)
