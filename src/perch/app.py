"""Perch gateway class.

Mutable during setup (route registration, middleware, error handlers).
Frozen at runtime when ``handle()``, ``run()`` or ``__call__()`` is
first invoked.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeAlias

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.config import GatewayConfig
from perch.filters.protocol import Filter
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Middleware, Next
from perch.routing.matcher import RouteMatcher
from perch.routing.predicates import Predicate
from perch.routing.route import Route
from perch.routing.router import Router
from perch.server.handler import build_pipeline, dispatch, handle_request
from perch.upstream.client import UpstreamClient, check_target_uri

logger = logging.getLogger("perch.gateway")

# Error handler: receives (request, error?) and returns a Response or str
ErrorHandler: TypeAlias = Callable[..., Any]


class Gateway:
    """The perch gateway.

    Routes are evaluated in the order they were added; the first one
    whose host, path and predicates all match handles the request.

    Usage::

        gateway = Gateway()
        gateway.add_route("r1", "**.example.com", "/shop", "http://shop.internal",
                          filters=modify_request("en-US"))
        gateway.add_route(None, "**.example.com", "/other/**", "http://othersite.internal",
                          filters=[PrefixPath("/myPrefix")])

    Thread safety:
        The setup phase is single-threaded. The freeze transition uses a
        Lock + double-check so exactly one thread compiles the route
        table, even when several workers receive their first request
        at the same time.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_pipeline",
        # Compiled state (populated by _freeze)
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_upstream",
        "config",
    )

    def __init__(
        self,
        config: GatewayConfig | None = None,
        *,
        upstream: UpstreamClient | None = None,
    ) -> None:
        self.config: GatewayConfig = config or GatewayConfig()
        self._pending_routes: list[Route] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._upstream: UpstreamClient = upstream or UpstreamClient(
            timeout=self.config.upstream_timeout,
            connect_timeout=self.config.connect_timeout,
            max_connections=self.config.max_connections,
            forwarded=self.config.forwarded_headers,
        )

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Middleware, ...] = ()
        self._pipeline: Next | None = None

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        config: GatewayConfig | None = None,
        *,
        upstream: UpstreamClient | None = None,
    ) -> "Gateway":
        """Build a gateway from a TOML route file.

        The file's ``[gateway]`` table overrides *config*; its
        ``[[routes]]`` are registered in file order.
        """
        from perch.routing.loader import load_config, load_routes

        gateway = cls(load_config(path, config), upstream=upstream)
        for route in load_routes(path):
            gateway._register(route)
        return gateway

    # -- Route registration --

    def add_route(
        self,
        id: str | None,
        host_pattern: str | None,
        path_pattern: str | None,
        target_uri: str,
        filters: Sequence[Filter] = (),
        *,
        predicates: Sequence[Predicate] = (),
    ) -> Route:
        """Register a route. Routes are matched in registration order.

        Args:
            id: Route identifier. ``None`` generates a UUID.
            host_pattern: Host glob (``**.example.com``); ``None`` matches any host.
            path_pattern: Path pattern (``/api/**``); ``None`` matches any path.
            target_uri: Upstream base URI (``http://backend:8000``).
            filters: Filters applied in order before forwarding.
            predicates: Extra conditions that must also hold
                (e.g. ``Method("POST")``).

        Returns:
            The frozen ``Route``.
        """
        self._check_not_frozen()
        check_target_uri(target_uri)
        route = Route.create(id, host_pattern, path_pattern, target_uri, filters, predicates)
        return self._register(route)

    def _register(self, route: Route) -> Route:
        self._check_not_frozen()
        self._pending_routes.append(route)
        return route

    @property
    def routes(self) -> tuple[Route, ...]:
        """Registered routes, in evaluation order."""
        if self._router is not None:
            return self._router.matcher.routes
        return tuple(self._pending_routes)

    @property
    def upstream(self) -> UpstreamClient:
        return self._upstream

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        Usage::

            @gateway.error(404)
            def not_found(request):
                return Response("nothing here", status=404)
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a gateway-wide middleware. The first added runs outermost."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        after the upstream connection pool has been opened.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order during ASGI lifespan shutdown,
        before the upstream connection pool is closed.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Runtime --

    async def handle(self, request: Request) -> Response:
        """Route *request* and return a response. Never raises for HTTP errors.

        No matching route gives 404, a failing filter 500, an
        unreachable upstream 502 and a slow one 504.

        Outside an ASGI server, wrap calls in ``startup()`` and
        ``shutdown()`` so the upstream pool for this loop gets closed.
        """
        self._ensure_frozen()
        assert self._pipeline is not None
        return await dispatch(
            request,
            pipeline=self._pipeline,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Compile the route table and serve with pounce.

        Requires the ``server`` extra (``pip install perch[server]``).
        """
        self._ensure_frozen()

        from perch.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            workers=self.config.workers,
            reload=self.config.debug,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan and per-worker lifecycle scopes directly,
        then delegates HTTP scopes to the request pipeline.
        """
        kind = scope["type"]
        if kind == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        # pounce runs one event loop per worker; each gets its own pool
        if kind == "pounce.worker.startup":
            await self._upstream.open()
            return
        if kind == "pounce.worker.shutdown":
            await self._upstream.aclose()
            return

        self._ensure_frozen()
        assert self._pipeline is not None

        await handle_request(
            scope,
            receive,
            send,
            pipeline=self._pipeline,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def startup(self) -> None:
        """Compile routes, open the upstream pool, then run startup hooks."""
        self._ensure_frozen()
        await self._upstream.open()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks, then close the upstream pool."""
        try:
            for hook in self._shutdown_hooks:
                await invoke(hook)
        finally:
            await self._upstream.aclose()

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Answer ``lifespan.startup`` / ``lifespan.shutdown`` until shutdown."""
        while True:
            event = (await receive())["type"]
            if event == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Gateway startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif event == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the gateway into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        matcher = RouteMatcher(self._pending_routes)
        self._router = Router(matcher, self._upstream)
        self._middleware = tuple(self._middleware_list)
        self._pipeline = build_pipeline(self._router, self._middleware)
        self._frozen = True

        for route in matcher.routes:
            logger.info(
                "Route %s: host=%s path=%s -> %s (%d filters)",
                route.id,
                route.host.source if route.host else "*",
                route.path.source if route.path else "*",
                route.target_uri,
                len(route.filters),
            )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the gateway after it has started serving requests. "
                "Register routes, middleware, and error handlers before the first request."
            )
            raise RuntimeError(msg)
