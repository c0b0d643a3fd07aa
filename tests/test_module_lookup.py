"""Tests for request-scoped module lookup of mounted import strings."""

import sys
import types

import pytest

from perch.app import App
from perch.context import request_var
from perch.http.request import Request
from perch.middleware.mount import MountPoint, MountSpec
from perch.reverse import LOOKUP_ENV_KEY, ModuleLookup, lookup_module, unresolved
from perch.testing import TestClient


def _leaf(request):
    return "leaf"


def _point(path: str) -> MountPoint:
    return MountPoint.from_spec(MountSpec.coerce(path), _leaf)


@pytest.fixture
def _fake_modules(monkeypatch: pytest.MonkeyPatch) -> None:
    def report(request: Request) -> str:
        return "|".join(
            [
                lookup_module("_fake_perch_wiki"),
                lookup_module("_fake_perch_blog"),
                lookup_module("_fake_perch_missing"),
            ]
        )

    wiki = types.ModuleType("_fake_perch_wiki")
    wiki.app = report  # type: ignore[attr-defined]
    blog = types.ModuleType("_fake_perch_blog")
    blog.app = _leaf  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_fake_perch_wiki", wiki)
    monkeypatch.setitem(sys.modules, "_fake_perch_blog", blog)


class TestModuleLookup:
    def test_known_identifier(self) -> None:
        lookup = ModuleLookup({"wiki": _point("/wiki")}, "/site")
        assert lookup("wiki") == "/site/wiki/"

    def test_delegates_to_parent(self) -> None:
        parent = ModuleLookup({"blog": _point("/blog")}, "")
        lookup = ModuleLookup({"wiki": _point("/wiki")}, "/site", parent)
        assert lookup("blog") == "/blog/"

    def test_unresolved_placeholder(self) -> None:
        lookup = ModuleLookup({}, "")
        assert lookup("nope") == "/_nope_(unresolved_module)"
        assert unresolved("nope") == "/_nope_(unresolved_module)"

    def test_path_less_mount_delegates(self) -> None:
        parent = ModuleLookup({"api": _point("/api")}, "")
        lookup = ModuleLookup({"api": _point("")}, "/x", parent)
        assert lookup("api") == "/api/"

    def test_result_is_uri_encoded(self) -> None:
        lookup = ModuleLookup({"w": _point("/wiki pages")}, "/site")
        assert lookup("w") == "/site/wiki%20pages/"

    def test_reserved_characters_kept(self) -> None:
        lookup = ModuleLookup({"w": _point("/a;b,c@d")}, "")
        assert lookup("w") == "/a;b,c@d/"


class TestLookupModuleInRequest:
    @pytest.mark.usefixtures("_fake_modules")
    async def test_sees_own_and_enclosing_layers(self) -> None:
        inner = App()
        inner.mount("/wiki", "_fake_perch_wiki")
        root = App()
        root.mount("/blog", "_fake_perch_blog")
        root.mount("/site", inner)

        async with TestClient(root) as client:
            response = await client.get("/site/wiki/Home")

        assert response.text == (
            "/site/wiki/|/blog/|/__fake_perch_missing_(unresolved_module)"
        )

    def test_without_lookup_installed(self) -> None:
        token = request_var.set(Request(method="GET", path="/"))
        try:
            assert lookup_module("x") == unresolved("x")
        finally:
            request_var.reset(token)

    def test_uses_installed_lookup(self) -> None:
        request = Request(method="GET", path="/")
        request.env[LOOKUP_ENV_KEY] = lambda identifier: f"/found/{identifier}"
        token = request_var.set(request)
        try:
            assert lookup_module("x") == "/found/x"
        finally:
            request_var.reset(token)

    def test_outside_request_is_unresolved(self) -> None:
        assert lookup_module("docs.site:app") == unresolved("docs.site:app")
