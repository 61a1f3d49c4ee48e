"""Fallback policy — not-found and error responses.

Maps unmatched requests, intentional HTTPErrors and unexpected faults
to Responses, using the router's registered handlers or the defaults.
A fallback handler that itself fails gets the default 500.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from kida import Environment

from wren.errors import HTTPError, NotFound
from wren.http.request import Request
from wren.http.response import Abort, Response, text_response
from wren.server.lifecycle import RequestLifecycle, RequestState
from wren.server.negotiation import negotiate

logger = logging.getLogger("wren.server")

NOT_FOUND_BODY = "Route Not Found"
INTERNAL_ERROR_BODY = "Internal Server Error"


async def call_fallback_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    kida_env: Environment | None,
    *,
    status: int,
) -> Response:
    """Invoke a not-found or error handler with introspected arguments.

    Handlers may accept zero, one (request), or two (request, exc) args
    and may be sync or async. A returned ``Response`` or
    ``(value, status)`` tuple keeps its own status; anything else is
    sent with *status*.
    """
    sig = inspect.signature(handler)
    params = list(sig.parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    if isinstance(result, Response):
        return result
    response = negotiate(result, kida_env=kida_env)
    if isinstance(response, Abort):
        msg = "Not-found and error handlers cannot abort the connection."
        raise TypeError(msg)
    if isinstance(result, tuple):
        return response
    return response.with_status(status)


def default_internal_error() -> Response:
    return text_response(INTERNAL_ERROR_BODY, 500)


async def respond_not_found(
    request: Request,
    lifecycle: RequestLifecycle,
    handler: Callable[..., Any] | None,
    kida_env: Environment | None,
    exc: HTTPError | None = None,
) -> Response:
    """Answer a request that ended in NOT_FOUND."""
    logger.debug("404 %s %s", request.method, request.path)

    if handler is None:
        if exc is None:
            return text_response(NOT_FOUND_BODY, 404)
        return text_response(exc.detail or NOT_FOUND_BODY, 404).with_headers(list(exc.headers))

    try:
        return await call_fallback_handler(
            handler, request, exc or NotFound(), kida_env, status=404
        )
    except Exception:
        logger.exception("Not-found handler failed for %s %s", request.method, request.path)
        lifecycle.advance(RequestState.ERROR)
        lifecycle.advance(RequestState.DEFAULT_500)
        return default_internal_error()


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    lifecycle: RequestLifecycle,
    not_found_handler: Callable[..., Any] | None,
    kida_env: Environment | None,
) -> Response:
    """Map an intentionally raised HTTPError to a Response.

    404s share the not-found policy. Other statuses are sent as plain
    text carrying the error's detail and headers.
    """
    if exc.status == 404:
        lifecycle.advance(RequestState.NOT_FOUND)
        return await respond_not_found(request, lifecycle, not_found_handler, kida_env, exc)

    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    body = exc.detail or f"Error {exc.status}"
    return text_response(body, exc.status).with_headers(list(exc.headers))


async def handle_internal_error(
    exc: Exception,
    request: Request,
    lifecycle: RequestLifecycle,
    error_handler: Callable[..., Any] | None,
    kida_env: Environment | None,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)
    lifecycle.advance(RequestState.ERROR)

    if error_handler is not None:
        lifecycle.advance(RequestState.CUSTOM_ERROR_HANDLER)
        try:
            return await call_fallback_handler(error_handler, request, exc, kida_env, status=500)
        except Exception:
            logger.exception("Error handler failed for %s %s", request.method, request.path)

    lifecycle.advance(RequestState.DEFAULT_500)
    return default_internal_error()
