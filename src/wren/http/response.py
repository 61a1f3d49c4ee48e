"""Responses, and the ``Abort`` marker for dropping a connection instead.

A ``Response`` never changes; ``with_status``, ``with_header`` and
friends hand back a modified copy::

    Response("created").with_status(201).with_header("Location", "/items/4")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

HTML = "text/html; charset=utf-8"
PLAIN = "text/plain; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Response:
    body: str | bytes = ""
    status: int = 200
    content_type: str = HTML
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    def with_header(self, name: str, value: str) -> Response:
        """Copy with one more header. Existing headers of that name stay."""
        return self.with_headers(((name, value),))

    def with_headers(self, extra: Mapping[str, str] | Iterable[tuple[str, str]]) -> Response:
        pairs = extra.items() if isinstance(extra, Mapping) else extra
        return replace(self, headers=self.headers + tuple(pairs))

    @property
    def body_bytes(self) -> bytes:
        """The body as it goes on the wire; ``str`` bodies are UTF-8."""
        body = self.body
        return body.encode("utf-8") if isinstance(body, str) else body

    @property
    def text(self) -> str:
        body = self.body
        return body.decode("utf-8") if isinstance(body, bytes) else body

    def header(self, name: str) -> str | None:
        """First value of header *name*, compared case-insensitively."""
        wanted = name.lower()
        return next((value for key, value in self.headers if key.lower() == wanted), None)


def text_response(body: str, status: int) -> Response:
    """``text/plain`` response, as the built-in 404/413/415/400/500 use."""
    return Response(body, status, PLAIN)


@dataclass(frozen=True, slots=True)
class Abort:
    """Returned instead of a Response when nothing should be written.

    The dispatcher sends no ASGI message for it and raises
    ``ConnectionAbortedError`` so the server drops the socket. The JSON
    body wrapper uses it once a body grows past its cap.
    """

    reason: str = ""
