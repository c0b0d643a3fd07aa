"""Route and RouteMatch frozen dataclasses."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from perch.errors import ConfigurationError
from perch.routing.params import CONVERTERS

_PARAM = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)(?::([a-z]+))?\}")


def compile_path(path: str) -> tuple[re.Pattern[str], dict[str, str]]:
    """Compile a route path into an anchored regex and a param->type map.

    Examples::

        "/users"              -> ^/users$
        "/users/{id:int}"     -> ^/users/(?P<id>\\d+)$
        "/files/{rest:path}"  -> ^/files/(?P<rest>.+)$
    """
    if "<" in path and ">" in path:
        msg = f"Route {path!r} uses <param> syntax; perch expects {{param}}."
        raise ConfigurationError(msg)

    pattern = "^"
    params: dict[str, str] = {}
    pos = 0
    for m in _PARAM.finditer(path):
        name, param_type = m.group(1), m.group(2) or "str"
        if param_type not in CONVERTERS:
            msg = f"Unknown converter {param_type!r} in route {path!r}"
            raise ConfigurationError(msg)
        if name in params:
            msg = f"Duplicate parameter {name!r} in route {path!r}"
            raise ConfigurationError(msg)
        params[name] = param_type
        pattern += re.escape(path[pos : m.start()])
        pattern += f"(?P<{name}>{CONVERTERS[param_type][0]})"
        pos = m.end()
    pattern += re.escape(path[pos:]) + "$"
    return re.compile(pattern), params


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Created during app setup, compiled into the router at freeze time.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)
    param_types: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pattern, param_types = compile_path(self.path)
        object.__setattr__(self, "pattern", pattern)
        object.__setattr__(self, "param_types", param_types)

    @property
    def is_static(self) -> bool:
        return not self.param_types


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
