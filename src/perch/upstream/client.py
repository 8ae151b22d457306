"""Upstream client — forwards a filtered request and relays the answer.

Wraps ``httpx.AsyncClient``, one per event loop. The response body is relayed as raw
bytes (no decompression), so ``Content-Encoding`` stays truthful.
Nothing is retried: a transport failure becomes ``BadGateway`` and a
timeout becomes ``GatewayTimeout``. Cancellation of the calling task
propagates into the in-flight httpx call.
"""

import asyncio
import logging
import threading
import weakref
from urllib.parse import urlsplit, urlunsplit

import httpx

from perch.errors import BadGateway, ConfigurationError, GatewayTimeout
from perch.http.request import Request
from perch.http.response import Response, status_allows_body

logger = logging.getLogger("perch.upstream")

# RFC 9110 §7.6.1 connection-specific headers, plus Host (set from the target)
HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)

SUPPORTED_SCHEMES = frozenset({"http", "https"})


def check_target_uri(target_uri: str) -> None:
    """Raise ``ConfigurationError`` unless *target_uri* can be forwarded to."""
    parts = urlsplit(target_uri if "://" in target_uri else f"http://{target_uri}")
    if parts.scheme not in SUPPORTED_SCHEMES:
        msg = f"Unsupported target scheme {parts.scheme!r} in {target_uri!r}."
        raise ConfigurationError(msg)
    if not parts.netloc:
        msg = f"Target URI {target_uri!r} has no host."
        raise ConfigurationError(msg)


def build_target_url(target_uri: str, request: Request) -> str:
    """Join the route target with the (filtered) request path and query.

    The path is sent percent-encoded as received, so ``%3F``, ``%23``
    and ``%2F`` reach the upstream as data rather than URL syntax.

    The scheme comes from *target_uri*, or from the request when the
    target has none. A path on the target is prepended::

        build_target_url("http://backend:8000/v2", GET /users?page=2)
        -> "http://backend:8000/v2/users?page=2"
    """
    if "://" not in target_uri:
        target_uri = f"{request.scheme}://{target_uri}"
    parts = urlsplit(target_uri)
    path = parts.path.rstrip("/") + request.target_path
    return urlunsplit((parts.scheme, parts.netloc, path or "/", request.query.query_string, ""))


def _connection_tokens(values: list[str]) -> set[str]:
    """Header names listed in ``Connection`` are hop-by-hop too."""
    tokens = (token.strip().lower() for value in values for token in value.split(","))
    return {token for token in tokens if token}


def outgoing_headers(request: Request, *, forwarded: bool = True) -> list[tuple[str, str]]:
    """Request headers minus hop-by-hop ones, plus ``X-Forwarded-*``."""
    drop = HOP_BY_HOP | {"host"} | _connection_tokens(request.headers.get_list("connection"))
    headers = [(name, value) for name, value in request.headers.items_list() if name not in drop]
    if forwarded:
        if request.client is not None:
            prior = request.headers.get("x-forwarded-for")
            chain = f"{prior}, {request.client[0]}" if prior else request.client[0]
            headers = [(n, v) for n, v in headers if n != "x-forwarded-for"]
            headers.append(("x-forwarded-for", chain))
        if "x-forwarded-proto" not in request.headers:
            headers.append(("x-forwarded-proto", request.scheme))
        host = request.headers.get("host")
        if host and "x-forwarded-host" not in request.headers:
            headers.append(("x-forwarded-host", host))
    return headers


def relay_response(
    upstream: httpx.Response, body: bytes, *, keep_length: bool = False
) -> Response:
    """Translate an httpx response into a perch Response, unchanged.

    ``Content-Length`` is dropped (the sender recomputes it) unless
    *keep_length* is set: the answer to a HEAD, or a status without a
    body, declares the length of content that is never sent.
    """
    drop = HOP_BY_HOP | _connection_tokens(upstream.headers.get_list("connection"))
    if not keep_length:
        drop = drop | {"content-length"}
    content_type: str | None = None
    headers: list[tuple[str, str]] = []
    for name, value in upstream.headers.multi_items():
        lowered = name.lower()
        if lowered == "content-type" and content_type is None:
            content_type = value
        elif lowered not in drop:
            headers.append((lowered, value))
    return Response(
        body=body,
        status=upstream.status_code,
        content_type=content_type,
        headers=tuple(headers),
    )


class UpstreamClient:
    """Forwards requests to route targets.

    httpx binds its connection pool to the event loop it was created
    on, so one ``httpx.AsyncClient`` is kept per running loop (one per
    pounce worker). Pools are created on first use or by ``open()``.
    Call ``aclose()`` on every loop that used the client; a pool left
    open is only dropped, unclosed, once its loop is garbage collected.

    Usage::

        client = UpstreamClient(timeout=10.0)
        response = await client.forward(request, "http://backend:8000")
        await client.aclose()

    Args:
        timeout: Read/write/pool timeout in seconds.
        connect_timeout: Connection establishment timeout in seconds.
        max_connections: Connection pool size, per event loop.
        forwarded: Add ``X-Forwarded-For`` / ``-Proto`` / ``-Host``.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``
            in tests).
    """

    __slots__ = (
        "_clients",
        "_connect_timeout",
        "_forwarded",
        "_lock",
        "_max_connections",
        "_timeout",
        "_transport",
    )

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        connect_timeout: float = 5.0,
        max_connections: int = 100,
        forwarded: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._connect_timeout = connect_timeout
        self._max_connections = max_connections
        self._forwarded = forwarded
        self._transport = transport
        self._clients: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, httpx.AsyncClient] = (
            weakref.WeakKeyDictionary()
        )
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        """True if a pool exists for the running event loop."""
        return asyncio.get_running_loop() in self._clients

    def _ensure_client(self) -> httpx.AsyncClient:
        loop = asyncio.get_running_loop()
        with self._lock:
            client = self._clients.get(loop)
            if client is None:
                client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self._timeout, connect=self._connect_timeout),
                    limits=httpx.Limits(max_connections=self._max_connections),
                    headers={"accept-encoding": "identity"},
                    follow_redirects=False,
                    trust_env=False,
                    transport=self._transport,
                )
                self._clients[loop] = client
        return client

    async def open(self) -> None:
        """Create the pool for the running event loop."""
        self._ensure_client()

    async def aclose(self) -> None:
        """Close the running loop's pool. Safe to call more than once."""
        loop = asyncio.get_running_loop()
        with self._lock:
            client = self._clients.pop(loop, None)
        if client is not None:
            await client.aclose()

    async def __aenter__(self) -> "UpstreamClient":
        await self.open()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def forward(self, request: Request, target_uri: str) -> Response:
        """Send *request* to *target_uri* and return the upstream response.

        Raises:
            GatewayTimeout: The upstream did not answer in time.
            BadGateway: The upstream could not be reached or broke off.
        """
        url = build_target_url(target_uri, request)
        body = await request.body()
        client = self._ensure_client()
        outgoing = client.build_request(
            request.method,
            url,
            headers=outgoing_headers(request, forwarded=self._forwarded),
            content=body or None,
        )

        logger.debug("Forwarding %s %s -> %s", request.method, request.url, url)
        try:
            upstream = await client.send(outgoing, stream=True)
            try:
                payload = b"".join([chunk async for chunk in upstream.aiter_raw()])
            finally:
                await upstream.aclose()
        except httpx.TimeoutException as exc:
            logger.warning("Upstream timed out: %s %s (%s)", request.method, url, exc)
            raise GatewayTimeout(f"Upstream {url} timed out") from exc
        except httpx.TransportError as exc:
            logger.warning("Upstream unreachable: %s %s (%s)", request.method, url, exc)
            raise BadGateway(f"Upstream {url} unreachable: {exc}") from exc

        keep_length = request.method == "HEAD" or not status_allows_body(upstream.status_code)
        return relay_response(upstream, payload, keep_length=keep_length)
