"""Immutable HTTP request.

Frozen metadata with async body access. Filters never mutate a request:
every ``with_*()`` / ``without_*()`` call returns a new one, so the
caller's value stays exactly as it was received.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import quote, unquote, urlsplit

from perch._internal.asgi import Receive
from perch.http.headers import Headers
from perch.http.query import QueryParams


def split_host(value: str) -> tuple[str, int | None]:
    """Split a ``Host`` header value into (hostname, port).

    Handles bracketed IPv6 literals (``[::1]:8080``). The hostname is
    lowercased; a missing or non-numeric port yields ``None``.
    """
    value = value.strip()
    if value.startswith("["):
        end = value.find("]")
        if end != -1:
            host = value[1:end]
            rest = value[end + 1 :]
            port = rest[1:] if rest.startswith(":") else ""
            return host.lower(), int(port) if port.isdigit() else None
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit():
        return value.lower(), None
    return host.lower(), int(port)


# RFC 3986 path characters besides the unreserved set (always kept)
_PATH_SAFE = "/:@!$&'()*+,;="


def quote_path(path: str) -> str:
    """Percent-encode a decoded path for use in a URL."""
    return quote(path, safe=_PATH_SAFE)


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, query) is frozen at creation.
    Body is accessed asynchronously via ``.body()`` or ``.stream()``.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    scheme: str = "http"
    path_params: Mapping[str, str] = field(default_factory=dict)
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None
    # Percent-encoded path as received, None when unknown
    raw_path: str | None = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: body cache shared by every copy of this request
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def host(self) -> str:
        """Lowercased hostname from the ``Host`` header, port stripped.

        Falls back to the ASGI server address when the header is absent.
        """
        value = self.headers.get("host")
        if value:
            return split_host(value)[0]
        if self.server is not None:
            return self.server[0].lower()
        return ""

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Request target: path plus query string."""
        qs = self.query.query_string
        if qs:
            return f"{self.path}?{qs}"
        return self.path

    @property
    def target_path(self) -> str:
        """Path to forward upstream, percent-encoded.

        The received encoding is kept (so ``%2F`` stays inside its
        segment); a path set by a filter is encoded from its decoded form.
        """
        if self.raw_path is not None:
            return self.raw_path
        return quote_path(self.path)

    @property
    def absolute_url(self) -> str:
        """Scheme, Host header and encoded target: ``http://shop.example.com/cart?x=1``."""
        qs = self.query.query_string
        target = f"{self.target_path}?{qs}" if qs else self.target_path
        return f"{self.scheme}://{self.headers.get('host', self.host)}{target}"

    # -- Copy-on-write transformations --

    def with_header(self, name: str, value: str) -> Request:
        """Return a new Request where *name* is set to a single *value*."""
        return replace(self, headers=self.headers.with_header(name, value))

    def with_added_header(self, name: str, value: str) -> Request:
        """Return a new Request with an extra value for *name*."""
        return replace(self, headers=self.headers.with_added(name, value))

    def without_header(self, *names: str) -> Request:
        """Return a new Request with the given headers removed."""
        return replace(self, headers=self.headers.without(*names))

    def with_path(self, path: str, raw_path: str | None = None) -> Request:
        """Return a new Request with a different (decoded) path.

        Pass *raw_path* to keep a specific encoding for forwarding.
        """
        return replace(self, path=path, raw_path=raw_path)

    def with_query(self, query: QueryParams | str) -> Request:
        """Return a new Request with a different query string."""
        if isinstance(query, str):
            query = QueryParams(query)
        return replace(self, query=query)

    def without_query(self) -> Request:
        """Return a new Request with every query parameter removed."""
        return replace(self, query=QueryParams())

    def with_path_params(self, path_params: Mapping[str, str]) -> Request:
        """Return a new Request carrying the matched route's path params."""
        return replace(self, path_params=dict(path_params))

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls and by every
        copy of this request.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        if "_body" in self._cache:
            if self._cache["_body"]:
                yield self._cache["_body"]
            return
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    # -- Factories --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        raw_path = scope.get("raw_path")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            scheme=scope.get("scheme", "http"),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            raw_path=raw_path.decode("latin-1").partition("?")[0] if raw_path else None,
            _receive=receive,
        )

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
        client: tuple[str, int] | None = None,
    ) -> Request:
        """Create a Request without an ASGI server.

        *url* may be a bare target (``/path?q=1``) or absolute
        (``https://api.example.com/path``); an absolute URL supplies
        the scheme and, unless *headers* already has one, the Host.

        Usage::

            req = Request.build("GET", "http://shop.example.com/cart?locale=fr-FR")
        """
        parts = urlsplit(url)
        pairs = list((headers or {}).items())
        if parts.netloc and not any(name.lower() == "host" for name, _ in pairs):
            pairs.insert(0, ("host", parts.netloc))
        request = cls(
            method=method.upper(),
            path=unquote(parts.path) or "/",
            headers=Headers.from_pairs(pairs),
            query=QueryParams(parts.query),
            scheme=parts.scheme or "http",
            client=client,
            raw_path=parts.path or None,
        )
        request._cache["_body"] = body
        return request
