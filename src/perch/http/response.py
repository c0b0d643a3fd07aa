"""Immutable HTTP responses.

Handlers and mounted apps hand these back up the dispatch chain; any
layer that wants to change one derives a copy::

    Response("moved").with_status(303).with_header("Location", "/wiki/")
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TypeAlias

HeaderPairs: TypeAlias = tuple[tuple[str, str], ...]


@dataclass(frozen=True, slots=True)
class Response:
    """Status, body, content type and extra headers.

    ``headers`` keeps insertion order and allows repeats; the sender
    lower-cases names on the wire.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: HeaderPairs = ()

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        return self.with_headers({name: value})

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Copy with *headers* appended after the existing ones."""
        return replace(self, headers=self.headers + tuple(headers.items()))

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    def header(self, name: str, default: str | None = None) -> str | None:
        """First value of header *name*, compared case-insensitively."""
        return next(
            (value for key, value in self.headers if key.lower() == name.lower()),
            default,
        )

    @property
    def location(self) -> str | None:
        return self.header("location")

    @property
    def body_bytes(self) -> bytes:
        """The body encoded as UTF-8 if it was given as text."""
        body = self.body
        return body.encode("utf-8") if isinstance(body, str) else body

    @property
    def text(self) -> str:
        """The body decoded as UTF-8 if it was given as bytes."""
        body = self.body
        return body.decode("utf-8") if isinstance(body, bytes) else body


@dataclass(frozen=True, slots=True)
class Redirect:
    """Return value asking for a redirect to *url* (302 unless told otherwise)."""

    url: str
    status: int = 302
    headers: HeaderPairs = ()
