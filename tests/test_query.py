"""Tests for perch.http.query — immutable QueryParams."""

import pytest

from perch.http.query import QueryParams


class TestQueryParams:
    def test_getitem_returns_first_value(self) -> None:
        q = QueryParams(b"tag=a&tag=b")
        assert q["tag"] == "a"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            QueryParams(b"q=1")["missing"]

    def test_get_with_default(self) -> None:
        q = QueryParams("q=hello")
        assert q.get("q") == "hello"
        assert q.get("missing") is None
        assert q.get("missing", "fallback") == "fallback"

    def test_get_list(self) -> None:
        q = QueryParams(b"tag=python&tag=asgi")
        assert q.get_list("tag") == ["python", "asgi"]
        assert q.get_list("missing") == []

    def test_blank_values_kept(self) -> None:
        q = QueryParams(b"flag=")
        assert "flag" in q
        assert q["flag"] == ""

    def test_len_and_iter(self) -> None:
        q = QueryParams(b"a=1&b=2")
        assert len(q) == 2
        assert set(q) == {"a", "b"}

    def test_raw_is_undecoded(self) -> None:
        q = QueryParams(b"next=%2Fwiki%2F&x=1")
        assert q.raw == "next=%2Fwiki%2F&x=1"
        assert q["next"] == "/wiki/"

    def test_empty(self) -> None:
        q = QueryParams()
        assert len(q) == 0
        assert q.raw == ""
