"""Ordered route matcher.

Routes are evaluated in registration order and the first one whose
host, path and predicates all hold wins. Overlapping routes are not
reported: order them deliberately.
"""

from collections.abc import Iterable

from perch.http.request import Request
from perch.routing.route import Route, RouteMatch


class RouteMatcher:
    """Immutable, ordered route table.

    Usage::

        matcher = RouteMatcher([
            Route.create("api", "**.example.com", "/api/**", "http://api:8000"),
            Route.create("web", "**.example.com", "/**", "http://web:8000"),
        ])
        match = matcher.match(request)
    """

    __slots__ = ("_routes",)

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self._routes: tuple[Route, ...] = tuple(routes)

    @property
    def routes(self) -> tuple[Route, ...]:
        """Registered routes, in evaluation order."""
        return self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def match(self, request: Request) -> RouteMatch | None:
        """Return the first matching route, or ``None``."""
        for route in self._routes:
            params = route.match(request)
            if params is not None:
                return RouteMatch(route=route, path_params=params)
        return None
