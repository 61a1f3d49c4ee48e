"""Wren exception hierarchy.

Shared across the route tree, router, body wrapper, and dispatcher so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when a route registration or composition is invalid.

    Always raised at setup time, before the app serves a request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by middleware or handlers on purpose. The dispatcher turns
    it into a response with the same status instead of treating it as
    a fault.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched, or a matched resource is gone."""

    def __init__(self, detail: str = "Route Not Found") -> None:
        super().__init__(status=404, detail=detail)


class UnsupportedMediaType(HTTPError):  # noqa: N818
    """415 — a payload route received the wrong ``Content-Type``."""

    def __init__(self, detail: str = "Unsupported Media Type") -> None:
        super().__init__(status=415, detail=detail)


class PayloadTooLarge(HTTPError):  # noqa: N818
    """413 — the declared body size exceeds the route's cap."""

    def __init__(self, detail: str = "Request Entity Too Large") -> None:
        super().__init__(status=413, detail=detail)


class MalformedBody(HTTPError):  # noqa: N818
    """400 — the body could not be parsed as JSON."""

    def __init__(self, detail: str = "Invalid JSON") -> None:
        super().__init__(status=400, detail=detail)
