"""HTTP request with mutable path accounting.

Everything about the request is fixed at creation except the
``script_name`` / ``path_info`` split and the ``env`` mapping. Those
change as the request descends through nested mounts: each mount moves
its prefix from ``path_info`` onto ``script_name``, so a mounted
application sees the same ``path_info`` it would see at the root.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from perch._internal.asgi import Receive
from perch.http.headers import Headers
from perch.http.query import QueryParams


async def _empty_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(slots=True)
class Request:
    """An HTTP request passed by reference through the dispatch chain.

    ``path`` is the full path as received and never changes.
    ``script_name`` is the prefix consumed by enclosing mounts and
    ``path_info`` what is left for the current application; the two
    always concatenate back to the mounted portion of ``path``.

    A request instance belongs to exactly one in-flight dispatch.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    script_name: str = ""
    path_info: str | None = None
    path_params: dict[str, str] = field(default_factory=dict)
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # Per-request environment shared by every layer (mount lookups, extensions)
    env: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # Private: ASGI receive callable for body streaming
    _receive: Receive = field(default=_empty_receive, repr=False, compare=False)

    # Private: cache for the body once read
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.path_info is None:
            self.path_info = self.path

    # -- Computed properties --

    @property
    def host(self) -> str:
        """The Host header, lower-cased, without a port. Empty if absent."""
        value = (self.headers.get("host") or "").strip().lower()
        if value.startswith("["):
            # IPv6 literal: "[::1]:8000"
            end = value.find("]")
            return value[: end + 1] if end != -1 else value
        host, _, _port = value.partition(":")
        return host

    @property
    def query_string(self) -> str:
        """The raw query string, without the leading ``?``."""
        return self.query.raw

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Externally visible URL path (script_name + path_info + query)."""
        location = f"{self.script_name}{self.path_info}"
        if self.query_string:
            return f"{location}?{self.query_string}"
        return location

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes, None]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable.

        ASGI's ``root_path`` becomes the initial ``script_name``; the rest
        of ``path`` becomes ``path_info``.
        """
        path = scope["path"]
        root_path = scope.get("root_path", "") or ""
        path_info = path
        if root_path and path.startswith(root_path):
            path_info = path[len(root_path) :]
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=path,
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            script_name=root_path,
            path_info=path_info,
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
