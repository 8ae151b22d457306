"""Request pipeline — middleware, routing, and error mapping.

``dispatch`` is the total entry point: every request produces a
Response, never an exception. ``handle_request`` is the only function
that touches raw ASGI; it converts the scope into a Request, runs
``dispatch``, and sends the Response back through ASGI ``send()``.
"""

from collections.abc import Callable
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.routing.router import Router
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.sender import send_response


def build_pipeline(router: Router, middleware: tuple[Callable[..., Any], ...]) -> Next:
    """Wrap middleware around ``router.route``, first-added outermost."""
    handler: Next = router.route
    for mw in reversed(middleware):
        outer = handler
        mw_ref = mw

        async def make_next(req: Request, _mw: Any = mw_ref, _next: Next = outer) -> Response:
            return await _mw(req, _next)

        handler = make_next
    return handler


async def dispatch(
    request: Request,
    *,
    pipeline: Next,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Run one request through the pipeline and map failures to responses.

    ``HTTPError`` (404, 502, 504, or any raised by a filter) keeps its
    status; ``FilterError`` and unexpected exceptions become 500.
    """
    try:
        return await pipeline(request)
    except HTTPError as exc:
        return await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        return await handle_internal_error(exc, request, error_handlers, debug)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    pipeline: Next,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    """Process a single ASGI HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = await dispatch(
        request,
        pipeline=pipeline,
        error_handlers=error_handlers,
        debug=debug,
    )
    await send_response(response, send)
