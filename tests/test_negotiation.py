"""Tests for perch.server.negotiation — handler return values to Responses."""

import json

import pytest

from perch.http.response import Redirect, Response
from perch.server.negotiation import negotiate


class TestNegotiatePassthrough:
    def test_response_is_returned_unchanged(self) -> None:
        original = Response(body="hello", status=201)
        assert negotiate(original) is original

    def test_redirect_sets_location(self) -> None:
        result = negotiate(Redirect("/login"))
        assert result.status == 302
        assert result.location == "/login"

    def test_redirect_keeps_extra_headers(self) -> None:
        result = negotiate(Redirect("/new", status=301, headers=(("X-Why", "moved"),)))
        assert result.status == 301
        assert result.header("X-Why") == "moved"


class TestNegotiateValues:
    def test_str_is_html(self) -> None:
        result = negotiate("<p>hi</p>")
        assert result.status == 200
        assert result.content_type.startswith("text/html")
        assert result.text == "<p>hi</p>"

    def test_bytes_are_octet_stream(self) -> None:
        result = negotiate(b"\x00\x01")
        assert result.content_type == "application/octet-stream"
        assert result.body_bytes == b"\x00\x01"

    def test_dict_is_json(self) -> None:
        result = negotiate({"mounted": True})
        assert result.content_type.startswith("application/json")
        assert json.loads(result.text) == {"mounted": True}

    def test_list_is_json(self) -> None:
        assert json.loads(negotiate([1, 2]).text) == [1, 2]

    def test_none_is_no_content(self) -> None:
        result = negotiate(None)
        assert result.status == 204
        assert result.body_bytes == b""


class TestNegotiateTuples:
    def test_value_and_status(self) -> None:
        result = negotiate(("created", 201))
        assert result.status == 201
        assert result.text == "created"

    def test_value_status_and_headers(self) -> None:
        result = negotiate(({"id": 1}, 201, {"X-Id": "1"}))
        assert result.status == 201
        assert result.header("X-Id") == "1"


class TestNegotiateErrors:
    def test_unsupported_type_raises(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert object"):
            negotiate(object())
