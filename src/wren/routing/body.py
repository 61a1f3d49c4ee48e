"""JSON payload routes — content type and size checks before the handler runs.

``Router.post()`` stores a ``JsonBody`` in the route tree instead of the
user's function. The dispatcher reads the body through ``read()`` and
only calls the user handler once the payload parsed cleanly::

    @router.post("/items", max_body_size=64 * 1024)
    async def create_item(body: dict) -> dict:
        return {"created": body["name"]}

Rejections are answered here and never reach the central error guard:

- wrong ``Content-Type``            -> 415, body left unread
- declared ``Content-Length`` > cap -> 413
- streamed bytes > cap              -> ``Abort`` (connection dropped)
- unparseable JSON                  -> 400
"""

import json as json_module
import logging
from collections.abc import Callable
from typing import Any

from wren._internal.invoke import bind_arguments, invoke
from wren.config import DEFAULT_MAX_BODY_SIZE
from wren.errors import HTTPError, MalformedBody, PayloadTooLarge, UnsupportedMediaType
from wren.http.request import Request
from wren.http.response import Abort, Response, text_response

logger = logging.getLogger("wren.routing")

JSON_CONTENT_TYPE = "application/json"


def _reject(exc: HTTPError) -> Response:
    return text_response(exc.detail, exc.status)


class JsonBody:
    """A payload-route handler that parses a capped JSON body.

    Callable like any handler (``await wrapper(request)``); the
    dispatcher uses ``read()`` and ``call()`` separately so it can
    report body parsing as its own lifecycle step.
    """

    def __init__(self, handler: Callable[..., Any], max_size: int = DEFAULT_MAX_BODY_SIZE) -> None:
        if max_size < 0:
            msg = f"max_body_size must be >= 0, got {max_size}"
            raise ValueError(msg)
        self.handler = handler
        self.max_size = max_size
        self.__name__ = getattr(handler, "__name__", type(handler).__name__)
        self.__qualname__ = getattr(handler, "__qualname__", self.__name__)
        self.__doc__ = getattr(handler, "__doc__", None)

    async def read(self, request: Request) -> Any:
        """Read and parse the body.

        Returns ``(payload,)`` on success, or the ``Response``/``Abort``
        that answers the request instead.
        """
        content_type = (request.content_type or "").lower()
        if not content_type.startswith(JSON_CONTENT_TYPE):
            logger.warning(
                "415 %s %s: content-type %r", request.method, request.path, request.content_type
            )
            return _reject(UnsupportedMediaType())

        declared = request.content_length
        if declared is not None and declared > self.max_size:
            logger.warning(
                "413 %s %s: declared %d bytes, limit %d",
                request.method,
                request.path,
                declared,
                self.max_size,
            )
            return _reject(PayloadTooLarge())

        cached = request.buffered_body
        if cached is not None:
            # Middleware already drained the stream; the bytes are all here
            if len(cached) > self.max_size:
                logger.warning(
                    "413 %s %s: body %d bytes, limit %d",
                    request.method,
                    request.path,
                    len(cached),
                    self.max_size,
                )
                return _reject(PayloadTooLarge())
            raw = cached
        else:
            outcome = await self._read_capped(request)
            if isinstance(outcome, Abort):
                return outcome
            raw = outcome

        try:
            payload = json_module.loads(raw)
        except (ValueError, RecursionError) as exc:
            logger.warning("400 %s %s: invalid JSON (%s)", request.method, request.path, exc)
            return _reject(MalformedBody())

        return (payload,)

    async def _read_capped(self, request: Request) -> bytes | Abort:
        """Stream the body, giving up with ``Abort`` once it passes the cap."""
        chunks: list[bytes] = []
        received = 0
        async for chunk in request.stream():
            received += len(chunk)
            if received > self.max_size:
                logger.warning(
                    "Dropping %s %s: body passed %d bytes, limit %d",
                    request.method,
                    request.path,
                    received,
                    self.max_size,
                )
                return Abort(reason="request body exceeds limit")
            chunks.append(chunk)

        raw = b"".join(chunks)
        # Later request.body() calls see the bytes already consumed here
        request._keep_body(raw)
        return raw

    async def call(self, request: Request, payload: Any) -> Any:
        """Invoke the user handler with *payload* bound to ``body``."""
        kwargs = bind_arguments(self.handler, request, request.path_params, body=payload)
        return await invoke(self.handler, **kwargs)

    async def __call__(self, request: Request) -> Any:
        outcome = await self.read(request)
        if isinstance(outcome, (Response, Abort)):
            return outcome
        return await self.call(request, outcome[0])

    def __repr__(self) -> str:
        return f"JsonBody({self.__qualname__}, max_size={self.max_size})"


def json_body(
    handler: Callable[..., Any], max_size: int = DEFAULT_MAX_BODY_SIZE
) -> JsonBody:
    """Wrap *handler* as a JSON payload route capped at *max_size* bytes."""
    return JsonBody(handler, max_size)
