"""Tests for perch.routing — Route, RouteMatcher, first match wins."""

import uuid

import pytest

from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.routing.matcher import RouteMatcher
from perch.routing.predicates import Method
from perch.routing.route import Route


def _req(url: str, method: str = "GET") -> Request:
    return Request.build(method, url)


class TestRouteCreate:
    def test_patterns_parsed(self) -> None:
        route = Route.create("r1", "**.example.com", "/shop", "http://shop.internal")
        assert route.host is not None and route.host.source == "**.example.com"
        assert route.path is not None and route.path.source == "/shop"

    def test_missing_id_gets_uuid(self) -> None:
        route = Route.create(None, "**.example.com", "/other/**", "http://othersite.internal")
        assert uuid.UUID(route.id)

    def test_filters_frozen_as_tuple(self) -> None:
        route = Route.create("r1", None, None, "http://x", filters=[lambda r: r])
        assert isinstance(route.filters, tuple)

    def test_bad_pattern_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            Route.create("r1", "a..b", "/", "http://x")


class TestRouteMatch:
    def test_host_and_path(self) -> None:
        route = Route.create("r1", "**.example.com", "/shop", "http://shop.internal")
        assert route.match(_req("http://www.example.com/shop")) == {}
        assert route.match(_req("http://www.example.org/shop")) is None
        assert route.match(_req("http://www.example.com/cart")) is None

    def test_none_patterns_match_anything(self) -> None:
        route = Route.create("any", None, None, "http://x")
        assert route.match(_req("http://whatever.test/a/b")) == {}

    def test_path_params(self) -> None:
        route = Route.create("u", None, "/users/{id}", "http://x")
        assert route.match(_req("/users/7")) == {"id": "7"}

    def test_predicates_must_hold(self) -> None:
        route = Route.create("w", None, "/items", "http://x", predicates=[Method("POST")])
        assert route.match(_req("/items", "POST")) == {}
        assert route.match(_req("/items", "GET")) is None


class TestRouteMatcher:
    def _matcher(self) -> RouteMatcher:
        return RouteMatcher(
            [
                Route.create("r1", "**.example.com", "/shop", "http://shop.internal"),
                Route.create("r2", "**.example.com", "/other/**", "http://othersite.internal"),
                Route.create("catchall", "**.example.com", "/**", "http://web.internal"),
            ]
        )

    def test_first_match_wins(self) -> None:
        match = self._matcher().match(_req("http://www.example.com/shop"))
        assert match is not None
        assert match.route.id == "r1"

    def test_order_decides_overlap(self) -> None:
        match = self._matcher().match(_req("http://www.example.com/other/page"))
        assert match is not None
        assert match.route.id == "r2"

    def test_later_route_when_earlier_misses(self) -> None:
        match = self._matcher().match(_req("http://example.com/about"))
        assert match is not None
        assert match.route.id == "catchall"

    def test_no_match(self) -> None:
        assert self._matcher().match(_req("http://unknown.org/shop")) is None

    def test_empty_matcher(self) -> None:
        matcher = RouteMatcher()
        assert len(matcher) == 0
        assert matcher.match(_req("/")) is None

    def test_routes_in_order(self) -> None:
        assert [r.id for r in self._matcher().routes] == ["r1", "r2", "catchall"]

    def test_path_params_on_match(self) -> None:
        matcher = RouteMatcher([Route.create("u", None, "/users/{id}/posts/{post}", "http://x")])
        match = matcher.match(_req("/users/1/posts/9"))
        assert match is not None
        assert match.path_params == {"id": "1", "post": "9"}
