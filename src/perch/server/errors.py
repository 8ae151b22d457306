"""Error responses for the gateway pipeline.

Every failure ends as a Response: a registered ``@gateway.error()``
handler wins, otherwise a plain-text default is produced.
"""

import inspect
import logging
import traceback
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from perch.errors import FilterError, HTTPError
from perch.http.request import Request
from perch.http.response import Response

logger = logging.getLogger("perch.server")

ErrorHandlers: TypeAlias = Mapping[int | type, Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Call *handler* with as many of ``(request, exc)`` as it accepts.

    Sync and async handlers both work. ``str``/``bytes`` results are
    wrapped in a plain-text Response.
    """
    arity = len(inspect.signature(handler).parameters)
    result = handler(*(request, exc)[: min(arity, 2)])
    if inspect.isawaitable(result):
        result = await result

    if isinstance(result, Response):
        return result
    if isinstance(result, (str, bytes)):
        return Response(body=result)
    msg = f"Error handler {handler!r} returned {type(result).__name__}, expected Response or str"
    raise TypeError(msg)


def _find_handler(
    error_handlers: ErrorHandlers, exc: Exception, status: int
) -> Callable[..., Any] | None:
    return error_handlers.get(type(exc)) or error_handlers.get(status)


async def _from_handler(
    handler: Callable[..., Any], request: Request, exc: Exception, status: int
) -> Response:
    response = await call_error_handler(handler, request, exc)
    # A bare 200 from the handler means "use the error's status"
    if response.status == 200:
        return response.with_status(status)
    return response


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Response for a 404/502/504 (or any other ``HTTPError``)."""
    level = logging.WARNING if exc.status >= 500 else logging.DEBUG
    logger.log(
        level, "%d %s %s%s (%s)", exc.status, request.method, request.host, request.path, exc.detail
    )

    handler = _find_handler(error_handlers, exc, exc.status)
    if handler is not None:
        return await _from_handler(handler, request, exc, exc.status)

    if not exc.detail:
        body = f"Error {exc.status}"
    elif debug:
        body = str(exc)
    else:
        body = exc.detail
    return Response(body=body, status=exc.status, headers=exc.headers)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """500 for a failing filter or any unexpected exception."""
    if isinstance(exc, FilterError):
        logger.error(
            "500 %s %s%s (%s)", request.method, request.host, request.path, exc, exc_info=exc
        )
    else:
        logger.exception("500 %s %s%s", request.method, request.host, request.path)

    handler = _find_handler(error_handlers, exc, 500)
    if handler is not None:
        return await _from_handler(handler, request, exc, 500)

    if debug:
        return Response(body="".join(traceback.format_exception(exc)), status=500)
    return Response(body="Internal Server Error", status=500)
