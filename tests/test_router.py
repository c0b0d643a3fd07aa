"""Tests for perch.routing — path compilation and the router."""

import pytest

from perch.errors import ConfigurationError, MethodNotAllowed, NotFound
from perch.routing.params import convert_param
from perch.routing.route import Route, compile_path
from perch.routing.router import Router


def _handler() -> str:
    return "ok"


def _route(path: str, methods: frozenset[str] | None = None) -> Route:
    return Route(path=path, handler=_handler, methods=methods or frozenset({"GET"}))


def _router(*routes: Route) -> Router:
    router = Router()
    for route in routes:
        router.add(route)
    router.compile()
    return router


class TestCompilePath:
    def test_static(self) -> None:
        pattern, params = compile_path("/users")
        assert pattern.match("/users")
        assert not pattern.match("/users/1")
        assert params == {}

    def test_typed_param(self) -> None:
        pattern, params = compile_path("/users/{id:int}")
        assert params == {"id": "int"}
        assert pattern.match("/users/42").groupdict() == {"id": "42"}
        assert not pattern.match("/users/abc")

    def test_path_param_spans_segments(self) -> None:
        pattern, _ = compile_path("/files/{rest:path}")
        assert pattern.match("/files/a/b/c").group("rest") == "a/b/c"

    def test_special_characters_escaped(self) -> None:
        pattern, _ = compile_path("/a.b")
        assert pattern.match("/a.b")
        assert not pattern.match("/axb")

    def test_rejects_angle_bracket_params(self) -> None:
        with pytest.raises(ConfigurationError, match=r"\{param\}"):
            compile_path("/share/<slug>")

    def test_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown converter"):
            compile_path("/x/{id:uuid}")

    def test_duplicate_param(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate parameter"):
            compile_path("/{id}/{id}")


class TestConvertParam:
    def test_int(self) -> None:
        assert convert_param("42", "int") == 42

    def test_float(self) -> None:
        assert convert_param("1.5", "float") == 1.5

    def test_bad_value(self) -> None:
        with pytest.raises(ValueError):
            convert_param("abc", "int")


class TestRouterMatch:
    def test_root(self) -> None:
        router = _router(_route("/"))
        assert router.match("GET", "/").route.path == "/"

    def test_empty_path_matches_root(self) -> None:
        router = _router(_route("/"))
        assert router.match("GET", "").route.path == "/"

    def test_static_beats_param(self) -> None:
        router = _router(_route("/users/{name}"), _route("/users/me"))
        match = router.match("GET", "/users/me")
        assert match.route.path == "/users/me"
        assert match.path_params == {}

    def test_param_captured(self) -> None:
        router = _router(_route("/users/{name}"))
        assert router.match("GET", "/users/ada").path_params == {"name": "ada"}

    def test_not_found(self) -> None:
        router = _router(_route("/users"))
        with pytest.raises(NotFound):
            router.match("GET", "/posts")

    def test_method_not_allowed(self) -> None:
        router = _router(_route("/users", frozenset({"GET", "POST"})))
        with pytest.raises(MethodNotAllowed) as exc_info:
            router.match("DELETE", "/users")
        assert exc_info.value.headers == (("Allow", "GET, POST"),)

    def test_add_after_compile(self) -> None:
        router = _router()
        with pytest.raises(RuntimeError):
            router.add(_route("/late"))

    def test_routes_listing(self) -> None:
        router = Router()
        router.add(_route("/a"))
        router.add(_route("/b"))
        assert [r.path for r in router.routes] == ["/a", "/b"]
