"""Tests for perch.http.headers and perch.http.query."""

import pytest

from perch.http.headers import Headers
from perch.http.query import QueryParams


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"Content-Type", b"text/plain"),))
        assert headers["content-type"] == "text/plain"
        assert headers["CONTENT-TYPE"] == "text/plain"
        assert "Content-Type" in headers

    def test_multiple_values(self) -> None:
        headers = Headers(((b"accept", b"a"), (b"accept", b"b")))
        assert headers["accept"] == "a"
        assert headers.get_list("accept") == ["a", "b"]
        assert len(headers) == 1
        assert list(headers) == ["accept"]

    def test_get_default(self) -> None:
        assert Headers().get("x", "fallback") == "fallback"

    def test_from_mapping(self) -> None:
        headers = Headers.from_mapping({"Host": "example.com"})
        assert headers.raw == ((b"host", b"example.com"),)

    def test_immutable(self) -> None:
        with pytest.raises(AttributeError):
            Headers().x = 1  # type: ignore[attr-defined]

    def test_missing_key(self) -> None:
        with pytest.raises(KeyError):
            Headers()["host"]


class TestQueryParams:
    def test_from_str_and_bytes(self) -> None:
        assert QueryParams("a=1")["a"] == "1"
        assert QueryParams(b"a=1")["a"] == "1"

    def test_raw_preserved(self) -> None:
        assert QueryParams(b"x=%20y&z").raw == "x=%20y&z"

    def test_get_list(self) -> None:
        query = QueryParams("a=1&a=2")
        assert query.get_list("a") == ["1", "2"]
        assert query.get_list("missing") == []

    def test_get_default(self) -> None:
        assert QueryParams().get("a") is None
        assert len(QueryParams()) == 0
