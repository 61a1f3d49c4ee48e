"""Tests for wren.server.sender — Response to ASGI messages."""

import pytest

from wren.http.response import Response
from wren.server.sender import encode_headers, send_response


async def _capture(response: Response) -> list[dict]:
    sent: list[dict] = []

    async def send(message: dict) -> None:
        sent.append(message)

    await send_response(response, send)
    return sent


class TestSendResponse:
    async def test_start_then_body(self) -> None:
        sent = await _capture(Response("hi").with_header("X-A", "1"))
        assert [m["type"] for m in sent] == ["http.response.start", "http.response.body"]
        start, body = sent
        assert start["status"] == 200
        assert (b"content-type", b"text/html; charset=utf-8") in start["headers"]
        assert (b"x-a", b"1") in start["headers"]
        assert (b"content-length", b"2") in start["headers"]
        assert body["body"] == b"hi"

    async def test_utf8_length(self) -> None:
        sent = await _capture(Response("é"))
        assert (b"content-length", b"2") in sent[0]["headers"]

    @pytest.mark.parametrize("status", [204, 304, 101])
    async def test_bodyless_statuses(self, status: int) -> None:
        sent = await _capture(Response("ignored").with_status(status))
        assert sent[1]["body"] == b""
        assert (b"content-length", b"0") in sent[0]["headers"]


class TestEncodeHeaders:
    def test_order_and_case(self) -> None:
        encoded = encode_headers("text/plain", [("X-Trace", "abc"), ("Vary", "Accept")], 7)
        assert encoded == [
            (b"content-type", b"text/plain"),
            (b"x-trace", b"abc"),
            (b"vary", b"Accept"),
            (b"content-length", b"7"),
        ]
