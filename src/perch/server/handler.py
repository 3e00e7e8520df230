"""ASGI handler — translates ASGI scope/messages to perch types.

The only component that touches raw ASGI directly. Converts the scope
to a typed Request, walks the router's matches running each route's
handler chain, and sends the resulting Response through ASGI send().
"""

import logging
from collections.abc import Callable
from contextvars import Token
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch.context import g, request_var
from perch.errors import HTTPError, NotFound
from perch.http.request import Request
from perch.http.response import Response
from perch.routing.chain import Failure, Terminal, run_chain
from perch.routing.router import Router
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.sender import send_response

logger = logging.getLogger("perch.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    token: Token[Request] = request_var.set(request)
    g._reset()
    try:
        response = await dispatch(
            router,
            request,
            error_handlers=error_handlers,
            debug=debug,
        )
    finally:
        g._reset()
        request_var.reset(token)

    await send_response(response, send, head=request.method == "HEAD")


async def dispatch(
    router: Router,
    request: Request,
    *,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool = False,
) -> Response:
    """Find the response for *request*.

    Walks matching routes in precedence order. Each route's chain runs
    with a request carrying that route's parameters. A chain that ends
    in ``CONTINUE`` or ``SKIP_ROUTE`` passes the request on to the next
    matching route; when none is left the result is a 404.
    """
    current = request
    try:
        for found in router.iter_matches(request.method, request.path):
            current = request.with_match(found)
            outcome = await run_chain(found.handlers, current)
            match outcome:
                case Terminal(response=response):
                    return response
                case Failure(error=error):
                    raise error
        raise NotFound(f"Cannot {request.method} {request.path}")
    except HTTPError as exc:
        return await handle_http_error(exc, current, error_handlers, debug)
    except Exception as exc:
        return await handle_internal_error(exc, current, error_handlers, debug)
