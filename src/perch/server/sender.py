"""ASGI response sending — translates perch Responses to ASGI messages."""

from perch._internal.asgi import Send
from perch.http.response import Response, status_allows_body


async def send_response(response: Response, send: Send) -> None:
    """Translate a perch Response into ASGI send() calls.

    ``Content-Length`` is computed from the body, except for an empty
    body that declares one: a relayed HEAD or 304 keeps the upstream's.
    """
    raw_headers: list[tuple[bytes, bytes]] = []
    if response.content_type is not None:
        raw_headers.append((b"content-type", response.content_type.encode("latin-1")))
    for name, value in response.headers:
        lowered = name.lower()
        if lowered in ("content-length", "content-type"):
            continue
        raw_headers.append((lowered.encode("latin-1"), value.encode("latin-1")))

    body = response.body_bytes if status_allows_body(response.status) else b""

    length = response.header("content-length") if not body else None
    if length is None:
        length = str(len(body))
    raw_headers.append((b"content-length", length.encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
