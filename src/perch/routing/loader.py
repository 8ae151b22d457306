"""Route files — declare routes and filters in TOML.

Example ``gateway.toml``::

    [gateway]
    port = 8080
    upstream_timeout = 10.0

    [[routes]]
    id = "r1"
    host = "**.example.com"
    path = "/shop"
    uri = "http://shop.internal"
    filters = [{ name = "ModifyRequest", default_locale = "en-US" }]

    [[routes]]
    host = "**.example.com"
    path = "/other/**"
    uri = "http://othersite.internal"
    methods = ["GET", "HEAD"]
    filters = [{ name = "PrefixPath", prefix = "/myPrefix" }]

Routes keep file order. Every problem is reported as
``ConfigurationError`` naming the offending route.
"""

import dataclasses
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from perch.config import GatewayConfig
from perch.errors import ConfigurationError
from perch.filters.registry import build_filters
from perch.routing.predicates import Method, Predicate
from perch.routing.route import Route
from perch.upstream.client import check_target_uri

_ROUTE_KEYS = frozenset({"id", "host", "path", "uri", "methods", "filters"})


def read_file(path: str | Path) -> dict[str, Any]:
    """Parse a TOML route file."""
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except OSError as exc:
        msg = f"Cannot read route file {str(path)!r}: {exc}"
        raise ConfigurationError(msg) from exc
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {str(path)!r}: {exc}"
        raise ConfigurationError(msg) from exc


def route_from_table(table: Mapping[str, Any], index: int) -> Route:
    """Build one Route from a ``[[routes]]`` table."""
    label = table.get("id") or f"routes[{index}]"
    unknown = set(table) - _ROUTE_KEYS
    if unknown:
        msg = f"Route {label!r}: unknown keys {sorted(unknown)}"
        raise ConfigurationError(msg)

    uri = table.get("uri")
    if not isinstance(uri, str):
        msg = f"Route {label!r}: 'uri' is required"
        raise ConfigurationError(msg)
    check_target_uri(uri)

    for key in ("host", "path"):
        if not isinstance(table.get(key, ""), str):
            msg = f"Route {label!r}: '{key}' must be a string"
            raise ConfigurationError(msg)

    predicates: list[Predicate] = []
    methods = table.get("methods", [])
    if not isinstance(methods, list) or not all(isinstance(m, str) for m in methods):
        msg = f"Route {label!r}: 'methods' must be an array of strings, got {methods!r}"
        raise ConfigurationError(msg)
    if methods:
        predicates.append(Method(*methods))

    specs = table.get("filters", [])
    if not isinstance(specs, list) or not all(isinstance(s, Mapping) for s in specs):
        msg = f"Route {label!r}: 'filters' must be an array of tables, got {specs!r}"
        raise ConfigurationError(msg)
    try:
        filters = build_filters(specs)
    except ConfigurationError as exc:
        msg = f"Route {label!r}: {exc}"
        raise ConfigurationError(msg) from exc

    return Route.create(
        table.get("id"),
        table.get("host"),
        table.get("path"),
        uri,
        filters,
        predicates,
    )


def load_routes(path: str | Path) -> list[Route]:
    """Read every ``[[routes]]`` entry from a TOML file, in order."""
    data = read_file(path)
    tables = data.get("routes", [])
    if not isinstance(tables, list) or not all(isinstance(t, Mapping) for t in tables):
        msg = f"{str(path)!r}: 'routes' must be an array of tables"
        raise ConfigurationError(msg)
    return [route_from_table(table, i) for i, table in enumerate(tables)]


def load_config(path: str | Path, base: GatewayConfig | None = None) -> GatewayConfig:
    """Apply a route file's ``[gateway]`` table on top of *base*."""
    data = read_file(path)
    overrides = data.get("gateway", {})
    known = {f.name for f in dataclasses.fields(GatewayConfig)}
    unknown = set(overrides) - known
    if unknown:
        msg = f"{str(path)!r}: unknown [gateway] keys {sorted(unknown)}"
        raise ConfigurationError(msg)
    return dataclasses.replace(base or GatewayConfig(), **overrides)
