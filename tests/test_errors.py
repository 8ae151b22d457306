"""Tests for perch.errors and perch.server.errors — hierarchy and error responses."""

import pytest

from perch.errors import (
    BadGateway,
    ConfigurationError,
    FilterError,
    GatewayTimeout,
    HTTPError,
    NotFound,
    PerchError,
)
from perch.http.request import Request
from perch.http.response import Response
from perch.server.errors import call_error_handler, handle_http_error, handle_internal_error


class TestHierarchy:
    def test_statuses(self) -> None:
        assert NotFound().status == 404
        assert BadGateway().status == 502
        assert GatewayTimeout().status == 504

    def test_default_details(self) -> None:
        assert NotFound().detail == "Not Found"
        assert str(GatewayTimeout()) == "504: Gateway Timeout"

    def test_all_are_perch_errors(self) -> None:
        for exc in (NotFound(), BadGateway(), ConfigurationError("x"), FilterError("f", "d")):
            assert isinstance(exc, PerchError)

    def test_http_error_without_detail(self) -> None:
        assert str(HTTPError(status=418)) == "418"

    def test_filter_error_message(self) -> None:
        exc = FilterError("LocaleNormalizer", "bad tag")
        assert str(exc) == "filter 'LocaleNormalizer' failed: bad tag"
        assert exc.filter_name == "LocaleNormalizer"

    def test_http_error_is_raisable(self) -> None:
        with pytest.raises(HTTPError) as exc_info:
            raise BadGateway("upstream gone")
        assert exc_info.value.detail == "upstream gone"


def _req() -> Request:
    return Request.build("GET", "/x")


class TestCallErrorHandler:
    async def test_zero_args(self) -> None:
        response = await call_error_handler(lambda: "plain", _req(), NotFound())
        assert response.text == "plain"

    async def test_request_and_exc(self) -> None:
        def handler(request: Request, exc: Exception) -> Response:
            return Response(f"{request.path} {exc}")

        response = await call_error_handler(handler, _req(), NotFound())
        assert response.text == "/x 404: Not Found"

    async def test_async_handler(self) -> None:
        async def handler(request: Request) -> bytes:
            return b"async"

        response = await call_error_handler(handler, _req(), NotFound())
        assert response.body_bytes == b"async"

    async def test_bad_return_type(self) -> None:
        with pytest.raises(TypeError, match="expected Response or str"):
            await call_error_handler(lambda: 42, _req(), NotFound())


class TestHandleHTTPError:
    async def test_default_body(self) -> None:
        response = await handle_http_error(BadGateway(), _req(), {}, debug=False)
        assert response.status == 502
        assert response.text == "Bad Gateway"

    async def test_debug_body(self) -> None:
        response = await handle_http_error(GatewayTimeout(), _req(), {}, debug=True)
        assert response.text == "504: Gateway Timeout"

    async def test_empty_detail(self) -> None:
        response = await handle_http_error(HTTPError(status=429), _req(), {}, debug=False)
        assert response.text == "Error 429"

    async def test_handler_own_status_kept(self) -> None:
        handlers = {404: lambda: Response("moved", status=410)}
        response = await handle_http_error(NotFound(), _req(), handlers, debug=False)
        assert response.status == 410


class TestHandleInternalError:
    async def test_plain_500(self) -> None:
        response = await handle_internal_error(RuntimeError("x"), _req(), {}, debug=False)
        assert response.status == 500
        assert response.text == "Internal Server Error"

    async def test_filter_error_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        exc = FilterError("broken", "boom")
        await handle_internal_error(exc, _req(), {}, debug=False)
        assert "filter 'broken' failed: boom" in caplog.text

    async def test_handler_by_type(self) -> None:
        handlers = {FilterError: lambda request, exc: f"filter {exc.filter_name}"}
        response = await handle_internal_error(FilterError("f", "d"), _req(), handlers, debug=False)
        assert response.status == 500
        assert response.text == "filter f"
