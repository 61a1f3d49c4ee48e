"""Per-request dispatch: scope in, exactly one response (or none) out.

Builds the Request, runs middleware then the matched handler, routes
failures through the fallback policy in ``wren.server.errors``, and
writes the result with ``send_response``. An ``Abort`` writes nothing
and surfaces as ``ConnectionAbortedError``.
"""

import logging
from collections.abc import Callable
from typing import Any

from kida import Environment

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import bind_arguments, invoke
from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Abort, Response
from wren.routing.body import JsonBody
from wren.routing.router import Router
from wren.server.errors import handle_http_error, handle_internal_error, respond_not_found
from wren.server.lifecycle import RequestLifecycle, RequestState
from wren.server.negotiation import negotiate
from wren.server.sender import send_response

logger = logging.getLogger("wren.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    kida_env: Environment | None = None,
) -> None:
    """Serve one ``http`` scope. Other scope types are ignored."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    lifecycle = RequestLifecycle(request.method, request.path)

    try:
        response = await _dispatch(request, lifecycle, router, middleware, kida_env)
    except HTTPError as exc:
        response = await handle_http_error(
            exc, request, lifecycle, router.not_found_handler, kida_env
        )
    except Exception as exc:
        response = await handle_internal_error(
            exc, request, lifecycle, router.error_handler, kida_env
        )

    if isinstance(response, Abort):
        lifecycle.advance(RequestState.ABORTED)
        logger.warning("Aborting %s %s: %s", request.method, request.path, response.reason)
        raise ConnectionAbortedError(response.reason or "request aborted")

    if request.response_headers:
        response = response.with_headers(request.response_headers)
    await send_response(response, send)
    lifecycle.advance(RequestState.RESPONSE_SENT)


async def _dispatch(
    request: Request,
    lifecycle: RequestLifecycle,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    kida_env: Environment | None,
) -> Response | Abort:
    """Middleware, lookup, binding and handler call. Faults propagate."""
    lifecycle.advance(RequestState.MIDDLEWARE)
    for mw in middleware:
        await invoke(mw, request)

    lifecycle.advance(RequestState.ROUTE_MATCH)
    match = router.find(request.method, request.path)
    if match is None:
        lifecycle.advance(RequestState.NOT_FOUND)
        return await respond_not_found(request, lifecycle, router.not_found_handler, kida_env)

    lifecycle.advance(RequestState.PARAM_BIND)
    request.path_params.update(match.path_params)
    handler = match.handler

    if isinstance(handler, JsonBody):
        lifecycle.advance(RequestState.BODY_PARSE)
        outcome = await handler.read(request)
        if isinstance(outcome, (Response, Abort)):
            return outcome
        lifecycle.advance(RequestState.HANDLER_EXEC)
        result = await handler.call(request, outcome[0])
    else:
        kwargs = bind_arguments(handler, request, request.path_params)
        lifecycle.advance(RequestState.HANDLER_EXEC)
        result = await invoke(handler, **kwargs)

    return negotiate(result, kida_env=kida_env)
