"""Tests for perch.routing.router — match, filter, forward."""

import pytest

from perch.errors import NotFound
from perch.filters import PrefixPath, ShortCircuit, modify_request
from perch.http.request import Request
from perch.routing.matcher import RouteMatcher
from perch.routing.route import Route
from perch.routing.router import Router
from perch.testing import upstream_transport
from perch.upstream.client import UpstreamClient


def _router(*routes: Route, **transport_kwargs: object) -> tuple[Router, list]:
    transport, seen = upstream_transport(**transport_kwargs)  # type: ignore[arg-type]
    return Router(RouteMatcher(routes), UpstreamClient(transport=transport)), seen


class TestRouterRoute:
    async def test_no_match_raises_not_found(self) -> None:
        calls: list[Request] = []

        def spy(request: Request) -> Request:
            calls.append(request)
            return request

        router, seen = _router(Route.create("r1", "**.example.com", "/shop", "http://x", [spy]))
        with pytest.raises(NotFound) as exc_info:
            await router.route(Request.build("GET", "http://www.example.org/shop"))

        assert "www.example.org/shop" in exc_info.value.detail
        assert calls == []
        assert seen == []

    async def test_forwards_filtered_request(self) -> None:
        router, seen = _router(
            Route.create(
                "r1", "**.example.com", "/shop", "http://shop.internal", modify_request("en-US")
            ),
        )
        request = Request.build("GET", "http://www.example.com/shop?locale=fr-FR")
        response = await router.route(request)

        assert response.status == 200
        assert seen[0].host == "shop.internal"
        assert seen[0].headers["accept-language"] == "fr-FR"
        assert seen[0].query == ""

    async def test_prefix_route(self) -> None:
        router, seen = _router(
            Route.create("r1", "**.example.com", "/shop", "http://shop.internal"),
            Route.create(
                None,
                "**.example.com",
                "/other/**",
                "http://othersite.internal",
                [PrefixPath("/myPrefix")],
            ),
        )
        await router.route(Request.build("GET", "http://example.com/other/page"))

        assert seen[0].host == "othersite.internal"
        assert seen[0].path == "/myPrefix/other/page"

    async def test_short_circuit_skips_upstream(self) -> None:
        router, seen = _router(
            Route.create("maint", None, "/**", "http://x", [ShortCircuit(503, "maintenance")])
        )
        response = await router.route(Request.build("GET", "/anything"))

        assert response.status == 503
        assert response.text == "maintenance"
        assert seen == []

    async def test_path_params_visible_to_filters(self) -> None:
        captured: dict[str, str] = {}

        def grab(request: Request) -> Request:
            captured.update(request.path_params)
            return request

        router, _ = _router(Route.create("u", None, "/users/{id}", "http://users.internal", [grab]))
        await router.route(Request.build("GET", "/users/42"))
        assert captured == {"id": "42"}

    async def test_upstream_status_relayed(self) -> None:
        router, _ = _router(Route.create("r", None, None, "http://x"), status=503, body=b"busy")
        response = await router.route(Request.build("GET", "/"))
        assert response.status == 503
        assert response.body_bytes == b"busy"
