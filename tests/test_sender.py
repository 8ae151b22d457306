"""Tests for perch.server.sender — Response to ASGI messages."""

from typing import Any

from perch.http.response import Response
from perch.server.sender import send_response


async def _send(response: Response) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)

    await send_response(response, send)
    return messages


class TestSendResponse:
    async def test_start_and_body(self) -> None:
        start, body = await _send(Response("hello"))
        assert start["type"] == "http.response.start"
        assert start["status"] == 200
        assert (b"content-type", b"text/plain; charset=utf-8") in start["headers"]
        assert (b"content-length", b"5") in start["headers"]
        assert body == {"type": "http.response.body", "body": b"hello"}

    async def test_no_content_type_when_none(self) -> None:
        start, _ = await _send(Response(b"raw", content_type=None))
        names = [name for name, _ in start["headers"]]
        assert b"content-type" not in names

    async def test_headers_lowercased(self) -> None:
        start, _ = await _send(Response().with_header("X-Upstream", "shop"))
        assert (b"x-upstream", b"shop") in start["headers"]

    async def test_stale_content_length_replaced(self) -> None:
        start, _ = await _send(Response(b"abc", headers=(("content-length", "999"),)))
        lengths = [value for name, value in start["headers"] if name == b"content-length"]
        assert lengths == [b"3"]

    async def test_no_body_for_304(self) -> None:
        start, body = await _send(Response(b"ignored", status=304))
        assert (b"content-length", b"0") in start["headers"]
        assert body["body"] == b""

    async def test_no_body_for_204(self) -> None:
        _, body = await _send(Response(b"ignored", status=204))
        assert body["body"] == b""

    async def test_repeated_headers_kept(self) -> None:
        response = Response(headers=(("set-cookie", "a=1"), ("set-cookie", "b=2")))
        start, _ = await _send(response)
        cookies = [value for name, value in start["headers"] if name == b"set-cookie"]
        assert cookies == [b"a=1", b"b=2"]

    async def test_declared_length_kept_without_body(self) -> None:
        start, body = await _send(Response(b"", headers=(("content-length", "1234"),)))
        lengths = [value for name, value in start["headers"] if name == b"content-length"]
        assert lengths == [b"1234"]
        assert body["body"] == b""

    async def test_declared_length_kept_for_304(self) -> None:
        start, _ = await _send(Response(b"", status=304, headers=(("Content-Length", "88"),)))
        lengths = [value for name, value in start["headers"] if name == b"content-length"]
        assert lengths == [b"88"]
