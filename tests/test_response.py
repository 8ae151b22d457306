"""Tests for perch.http.response — chainable Response."""

from perch.http.response import Response


class TestResponse:
    def test_defaults(self) -> None:
        response = Response()
        assert response.status == 200
        assert response.body_bytes == b""
        assert response.content_type == "text/plain; charset=utf-8"

    def test_with_status_returns_new(self) -> None:
        original = Response("hi")
        changed = original.with_status(503)
        assert changed.status == 503
        assert original.status == 200

    def test_with_header_chains(self) -> None:
        response = Response().with_header("X-A", "1").with_header("X-B", "2")
        assert response.headers == (("X-A", "1"), ("X-B", "2"))

    def test_with_headers(self) -> None:
        response = Response().with_headers({"X-A": "1", "X-B": "2"})
        assert response.header("x-b") == "2"

    def test_header_lookup_case_insensitive(self) -> None:
        response = Response(headers=(("Cache-Control", "no-store"),))
        assert response.header("cache-control") == "no-store"
        assert response.header("x-missing", "none") == "none"

    def test_header_content_type(self) -> None:
        response = Response(content_type="application/json")
        assert response.header("Content-Type") == "application/json"

    def test_content_type_none(self) -> None:
        response = Response(b"\x00", content_type=None)
        assert response.header("content-type") is None

    def test_text_and_bytes(self) -> None:
        assert Response("olá").body_bytes == "olá".encode()
        assert Response("olá".encode()).text == "olá"

    def test_json(self) -> None:
        response = Response(b'{"ok": true}', content_type="application/json")
        assert response.json() == {"ok": True}
