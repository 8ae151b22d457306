"""Router — matcher, filter chain, and upstream forward in one call.

Collaborators are passed in explicitly; the router holds no mutable
state of its own, so any number of requests can be routed at once.
"""

import logging

from perch.errors import NotFound
from perch.filters.chain import apply_filters
from perch.http.request import Request
from perch.http.response import Response
from perch.routing.matcher import RouteMatcher
from perch.upstream.client import UpstreamClient

logger = logging.getLogger("perch.gateway")


class Router:
    """Route one request end to end.

    Usage::

        router = Router(RouteMatcher(routes), UpstreamClient(timeout=10.0))
        response = await router.route(request)
    """

    __slots__ = ("matcher", "upstream")

    def __init__(self, matcher: RouteMatcher, upstream: UpstreamClient) -> None:
        self.matcher = matcher
        self.upstream = upstream

    async def route(self, request: Request) -> Response:
        """Match, filter, and forward *request*.

        Raises ``NotFound`` when no route matches; no filter runs in
        that case. A short-circuiting filter's response is returned
        as-is and the upstream is never contacted.
        """
        match = self.matcher.match(request)
        if match is None:
            raise NotFound(f"No route matches {request.method} {request.host}{request.path}")

        route = match.route
        logger.debug("Route %s matched %s %s", route.id, request.method, request.url)

        outcome = await apply_filters(route.filters, request.with_path_params(match.path_params))
        if isinstance(outcome, Response):
            return outcome

        return await self.upstream.forward(outcome, route.target_uri)
