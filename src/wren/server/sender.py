"""Turn a finished Response into the two ASGI messages that carry it."""

from collections.abc import Iterable

from wren._internal.asgi import Send
from wren.http.response import Response

# 1xx responses are bodyless as well; see ``_carries_body``.
_BODYLESS = frozenset({204, 304})


def _carries_body(status: int) -> bool:
    return status >= 200 and status not in _BODYLESS


def encode_headers(
    content_type: str, headers: Iterable[tuple[str, str]], length: int
) -> list[tuple[bytes, bytes]]:
    """ASGI header list: content type first, then *headers*, then the length.

    Names are lower-cased; everything is latin-1 as ASGI requires.
    """
    encoded = [(b"content-type", content_type.encode("latin-1"))]
    encoded.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers
    )
    encoded.append((b"content-length", b"%d" % length))
    return encoded


async def send_response(response: Response, send: Send) -> None:
    """Send ``http.response.start`` and a single ``http.response.body``.

    A status that forbids a body gets an empty one and a zero length,
    whatever the Response held.
    """
    payload = response.body_bytes if _carries_body(response.status) else b""
    start = {
        "type": "http.response.start",
        "status": response.status,
        "headers": encode_headers(response.content_type, response.headers, len(payload)),
    }
    await send(start)
    await send({"type": "http.response.body", "body": payload})
