"""Tests for perch.server.sender — Response to ASGI messages."""

from typing import Any

from perch.http.response import Response
from perch.server.sender import send_response


async def _capture(response: Response, method: str = "GET") -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)

    await send_response(response, send, method=method)
    return messages


class TestSendResponse:
    async def test_start_and_body(self) -> None:
        start, body = await _capture(Response("hi").with_header("X-A", "1"))
        assert start["type"] == "http.response.start"
        assert start["status"] == 200
        assert (b"x-a", b"1") in start["headers"]
        assert (b"content-length", b"2") in start["headers"]
        assert body == {"type": "http.response.body", "body": b"hi"}

    async def test_no_body_for_204(self) -> None:
        _, body = await _capture(Response("ignored", status=204))
        assert body["body"] == b""

    async def test_head_keeps_content_length(self) -> None:
        start, body = await _capture(Response("hello"), method="HEAD")
        assert (b"content-length", b"5") in start["headers"]
        assert body["body"] == b""
