"""Perch — a small HTTP gateway.

Matches requests against ordered host/path routes, runs each route's
filter chain, and forwards what is left to the route's upstream.

Basic usage::

    from perch import Gateway
    from perch.filters import PrefixPath, modify_request

    gateway = Gateway()
    gateway.add_route("shop", "**.example.com", "/shop", "http://shop.internal",
                      filters=modify_request("en-US"))
    gateway.add_route(None, "**.example.com", "/other/**", "http://othersite.internal",
                      filters=[PrefixPath("/myPrefix")])

    gateway.run()

Route files (``perch run --routes gateway.toml``)::

    from perch import Gateway
    gateway = Gateway.from_file("gateway.toml")
"""

__version__ = "0.1.0"
__all__ = [
    "BadGateway",
    "ConfigurationError",
    "FilterError",
    "Gateway",
    "GatewayConfig",
    "GatewayTimeout",
    "HTTPError",
    "Middleware",
    "Next",
    "NotFound",
    "PerchError",
    "Request",
    "Response",
    "Route",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "Gateway":
        from perch.app import Gateway

        return Gateway

    if name == "GatewayConfig":
        from perch.config import GatewayConfig

        return GatewayConfig

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name == "Route":
        from perch.routing.route import Route

        return Route

    if name in ("Middleware", "Next"):
        from perch.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in (
        "BadGateway",
        "ConfigurationError",
        "FilterError",
        "GatewayTimeout",
        "HTTPError",
        "NotFound",
        "PerchError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
