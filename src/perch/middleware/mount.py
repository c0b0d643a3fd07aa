"""Mount middleware: embed other applications at a path or virtual host.

Each ``App`` owns a :class:`MountRegistry`. ``app.mount()`` adds
entries to it during setup, and a :class:`Mount` middleware consults
it on every request::

    app = App()
    app.mount("/wiki", wiki_app)                  # path prefix
    app.mount({"host": "api.example.com"}, api)   # virtual host suffix
    app.mount("/docs", "docs.site:app")           # import string

A mount matches when the request's ``Host`` ends with its host (if it
has one) and its ``path_info`` is the mount path or lies below it. The
first match in specificity order wins: more ``/`` in the path first,
registration order among equals.

On a match the prefix moves from ``path_info`` to ``script_name``, so
the mounted application sees the same ``path_info`` it would as the
root app. A ``GET`` for the bare prefix (``/wiki``) is redirected to
the trailing-slash form (``/wiki/``) unless the mount was registered
with ``no_redirect=True``. Requests that match nothing fall through
to the rest of the pipeline untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any
from urllib.parse import quote

from perch._internal.invoke import invoke
from perch._internal.types import Application
from perch.errors import MissingSpecError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import AnyResponse, Next
from perch.resolve import as_application, resolve_target
from perch.reverse import (
    LOOKUP_ENV_KEY,
    URI_SAFE,
    ModuleLookup,
    ReverseIndex,
    ReverseLink,
    default_index,
)
from perch.server.negotiation import negotiate

logger = logging.getLogger("perch.mount")


@dataclass(frozen=True, slots=True)
class MountSpec:
    """Where to mount: a path prefix, a host suffix, or both.

    Neither means "everything": a catch-all mount.
    """

    path: str | None = None
    host: str | None = None

    @classmethod
    def coerce(cls, spec: object) -> MountSpec:
        """Normalize the accepted spec shapes into a ``MountSpec``.

        A ``str`` is a path; a mapping may carry ``path`` and ``host``.
        Raises ``MissingSpecError`` for anything else (``None`` included).
        """
        match spec:
            case MountSpec():
                return spec
            case str():
                return cls(path=spec or None)
            case Mapping():
                unknown = set(spec) - {"path", "host"}
                if unknown:
                    raise MissingSpecError(spec)
                if any(not isinstance(spec.get(key) or "", str) for key in ("path", "host")):
                    raise MissingSpecError(spec)
                return cls(path=spec.get("path") or None, host=spec.get("host") or None)
            case _:
                raise MissingSpecError(spec)


@dataclass(frozen=True, slots=True)
class MountPoint:
    """One normalized mount.

    ``path`` never ends with ``/``; ``canonical_path`` is ``path + "/"``.
    Both are ``None`` for host-only and catch-all mounts.
    """

    handler: Application
    path: str | None = None
    canonical_path: str | None = None
    host: str | None = None
    redirect: bool = True
    target: Any = None
    seq: int = 0

    @classmethod
    def from_spec(
        cls,
        spec: MountSpec,
        handler: Application,
        *,
        no_redirect: bool = False,
        target: Any = None,
        seq: int = 0,
    ) -> MountPoint:
        path = canonical = None
        if spec.path:
            raw = spec.path if spec.path.startswith("/") else "/" + spec.path
            if raw.endswith("/"):
                canonical, path = raw, raw[:-1]
            else:
                canonical, path = raw + "/", raw
            if not path:
                # "/" mounts everything
                path = canonical = None
        host = str(spec.host).lower() if spec.host else None
        return cls(
            handler=handler,
            path=path,
            canonical_path=canonical,
            host=host,
            redirect=not no_redirect,
            target=target if target is not None else handler,
            seq=seq,
        )

    @property
    def specificity(self) -> int:
        """Number of ``/`` in the path; 0 for path-less mounts."""
        return (self.path or "").count("/")

    def matches(self, request: Request) -> bool:
        """Host suffix test AND path prefix test."""
        if self.host is not None and not request.host.endswith(self.host):
            return False
        if self.path is None:
            return True
        path = request.path_info or "/"
        return path == self.path or path.startswith(self.canonical_path)

    def describe(self) -> str:
        """Human-readable spec, e.g. ``api.example.com/v1`` or ``*``."""
        return f"{self.host or ''}{self.path or ''}" or "*"


def _most_specific_first(point: MountPoint) -> tuple[int, int]:
    return (-point.specificity, point.seq)


class MountRegistry:
    """Ordered mount table of one application.

    Always sorted most-specific first, registration order breaking ties.
    Written during setup, read-only while serving.
    """

    __slots__ = ("_index", "_modules", "_owner", "_points", "_seq")

    def __init__(self, owner: Any, *, index: ReverseIndex | None = None) -> None:
        self._owner = owner
        self._index = index if index is not None else default_index
        self._points: list[MountPoint] = []
        self._modules: dict[str, MountPoint] = {}
        self._seq = 0

    def register(self, spec: object, target: Any, *, no_redirect: bool = False) -> MountPoint:
        """Add a mount and return its normalized ``MountPoint``.

        Raises:
            MissingSpecError: If *spec* is not a path string or a
                path/host object.
            TargetResolutionError: If *target* is an import string that
                cannot be resolved.
        """
        mount_spec = MountSpec.coerce(spec)
        resolved = resolve_target(target)

        point = MountPoint.from_spec(
            mount_spec,
            as_application(resolved),
            no_redirect=no_redirect,
            target=resolved,
            seq=self._seq,
        )
        self._seq += 1

        self._index.add(resolved, ReverseLink(parent=self._owner, path=point.path, host=point.host))
        if isinstance(target, str):
            self._modules[target] = point

        self._points.append(point)
        self._points.sort(key=_most_specific_first)

        logger.debug(
            "mounted %r at %s (redirect=%s)",
            target,
            point.describe(),
            point.redirect,
        )
        return point

    def match(self, request: Request) -> MountPoint | None:
        """Return the first mount matching *request*, or ``None``."""
        for point in self._points:
            if point.matches(request):
                return point
        return None

    @property
    def modules(self) -> Mapping[str, MountPoint]:
        """Import-string targets registered here, by identifier."""
        return MappingProxyType(self._modules)

    @property
    def index(self) -> ReverseIndex:
        return self._index

    def __iter__(self) -> Iterator[MountPoint]:
        return iter(tuple(self._points))

    def __len__(self) -> int:
        return len(self._points)

    def __bool__(self) -> bool:
        return bool(self._points)


class Mount:
    """Middleware that dispatches to mounted applications.

    Installed automatically by ``App`` when at least one mount is
    registered; usable directly in any middleware pipeline.
    """

    __slots__ = ("redirect_status", "registry")

    def __init__(self, registry: MountRegistry, *, redirect_status: int = 303) -> None:
        self.registry = registry
        self.redirect_status = redirect_status

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Redirect, dispatch to a mount, or fall through."""
        parent_lookup = request.env.get(LOOKUP_ENV_KEY)
        request.env[LOOKUP_ENV_KEY] = ModuleLookup(
            self.registry.modules, request.script_name, parent_lookup
        )

        point = self.registry.match(request)
        if point is None:
            return await next(request)

        if point.redirect and request.path_info == point.path and request.method == "GET":
            return self._redirect(request, point)

        if point.path is not None:
            request.script_name += point.path
            request.path_info = request.path_info[len(point.path) :]

        logger.debug(
            "%s %s -> %s (script_name=%r, path_info=%r)",
            request.method,
            request.path,
            point.describe(),
            request.script_name,
            request.path_info,
        )
        return negotiate(await invoke(point.handler, request))

    def _redirect(self, request: Request, point: MountPoint) -> Response:
        """Send a bare-prefix GET to the trailing-slash form."""
        location = quote(f"{request.script_name}{point.canonical_path}", safe=URI_SAFE)
        if request.query_string:
            location = f"{location}?{request.query_string}"
        logger.debug("%s %s -> %d %s", request.method, request.path, self.redirect_status, location)
        return Response(
            body=f"See other: {location}",
            status=self.redirect_status,
            content_type="text/plain; charset=utf-8",
        ).with_header("Location", location)
