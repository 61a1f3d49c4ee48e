"""The request object handed to middleware and handlers.

What the client sent is frozen: method, path, headers, query string,
addresses. The body stays on the wire until someone asks for it and is
then kept, so a middleware reading it does not starve the handler.
Two fields are deliberately writable: ``state`` for middleware to pass
values along, and ``response_headers`` for headers that must land on
whatever response goes out.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from wren._internal.asgi import Receive, Scope
from wren.http.headers import Headers
from wren.http.query import QueryParams


def _address(value: Any) -> tuple[str, int] | None:
    return (value[0], value[1]) if value else None


@dataclass(frozen=True, slots=True)
class Request:
    """One HTTP request.

    ``path_params`` starts empty and is filled by the dispatcher with the
    raw capture strings of the matched route.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str]
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None
    _receive: Receive

    state: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
    response_headers: list[tuple[str, str]] = field(
        default_factory=list, repr=False, compare=False
    )
    # "_body" holds the bytes once the body has been drained
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            http_version=scope.get("http_version", "1.1"),
            server=_address(scope.get("server")),
            client=_address(scope.get("client")),
            _receive=receive,
        )

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """Declared Content-Length; ``None`` when missing or not a number."""
        raw = self.headers.get("content-length")
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    @property
    def url(self) -> str:
        """Path plus ``?query`` when there is one."""
        if not self.query.raw:
            return self.path
        return self.path + "?" + self.query.raw.decode("latin-1")

    @property
    def buffered_body(self) -> bytes | None:
        """The body if it has already been read, else ``None``. Never reads."""
        return self._cache.get("_body")

    def _keep_body(self, raw: bytes) -> None:
        self._cache["_body"] = raw

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield non-empty body chunks until the last one or a disconnect.

        Does not buffer; use ``body()`` if the bytes are needed twice.
        """
        more = True
        while more:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            more = message.get("more_body", False)

    async def body(self) -> bytes:
        """All of the body. Drains ``receive`` on the first call only."""
        kept = self.buffered_body
        if kept is None:
            kept = b"".join([chunk async for chunk in self.stream()])
            self._keep_body(kept)
        return kept

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        return json.loads(await self.body())
