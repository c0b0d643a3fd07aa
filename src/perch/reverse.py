"""Reverse resolution: from a mounted application back to its URL.

Every ``mount()`` call records a :class:`ReverseLink` saying "this
target was mounted by *parent* at *path*". Walking those links upward
until an application with no links (the root) rebuilds the target's
externally visible path::

    root.mount("/docs", docs)
    docs.mount("/api", api)

    resolve_path(api)        # "/docs/api"
    url_for(api, "v1/users")  # "/docs/api/v1/users"

Links live in a side-table keyed by object identity, so any callable
can be mounted without being modified.

A second, request-scoped mechanism resolves *import strings* instead
of objects: each ``Mount`` layer installs a :class:`ModuleLookup` in
``request.env`` that maps identifiers it mounted to their canonical
URL under the current ``script_name``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from perch.errors import TargetResolutionError

if TYPE_CHECKING:
    from perch.middleware.mount import MountPoint

LOOKUP_ENV_KEY = "perch.lookup_module"

# Characters left alone when quoting mount URLs (the reserved set
# plus the unreserved marks), so paths keep their structure.
URI_SAFE = "/;,?:@&=+$!~*'()#"


@dataclass(frozen=True, slots=True)
class ReverseLink:
    """One place a target has been mounted."""

    parent: Any
    path: str | None = None
    host: str | None = None


class ReverseIndex:
    """Side-table of reverse links, keyed by target identity.

    Entries hold a strong reference to their target, so identities are
    never recycled while the index is alive. Links are only ever
    appended; like mounts themselves they are written during setup.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[int, tuple[Any, list[ReverseLink]]] = {}

    def add(self, target: Any, link: ReverseLink) -> None:
        """Record that *target* has been mounted according to *link*."""
        entry = self._entries.get(id(target))
        if entry is None:
            entry = (target, [])
            self._entries[id(target)] = entry
        entry[1].append(link)

    def links(self, target: Any) -> tuple[ReverseLink, ...]:
        """All links recorded for *target*, in registration order."""
        entry = self._entries.get(id(target))
        if entry is None:
            return ()
        return tuple(entry[1])

    def __contains__(self, target: object) -> bool:
        return id(target) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, target: Any) -> str:
        """Return the accumulated mount path of *target*.

        A target with no links is a root and resolves to ``""``. At each
        level the first link (in registration order) whose parent has not
        been visited yet is followed, so a target mounted in several
        places resolves through its earliest mount. Host-only links add
        nothing to the path. Cycles stop the walk instead of looping.

        Import strings are resolved first; an unresolvable one yields
        ``""``. Never raises.
        """
        if isinstance(target, str):
            from perch.resolve import resolve_target

            try:
                target = resolve_target(target)
            except TargetResolutionError:
                return ""

        links = self.links(target)
        seen = {id(target)}
        path = ""
        while links:
            for link in links:
                if id(link.parent) not in seen:
                    seen.add(id(link.parent))
                    path = (link.path or "") + path
                    links = self.links(link.parent)
                    break
            else:
                break
        return path


default_index = ReverseIndex()
"""Process-wide index used by apps that are not given their own."""


def resolve_path(target: Any, *, index: ReverseIndex | None = None) -> str:
    """Return the URI path *target* is mounted at, or ``""`` for a root."""
    return (index if index is not None else default_index).resolve(target)


def url_for(target: Any, path: str = "", *, index: ReverseIndex | None = None) -> str:
    """Build a URL for *path* inside the mounted application *target*.

    *path* is relative to the target's own root::

        url_for(wiki)            # "/wiki/"
        url_for(wiki, "Home")    # "/wiki/Home"
        url_for(wiki, "/Home")   # "/wiki/Home"
    """
    return f"{resolve_path(target, index=index)}/{path.lstrip('/')}"


class ModuleLookup:
    """Per-request resolver from mounted import strings to URLs.

    Installed into ``request.env[LOOKUP_ENV_KEY]`` by each ``Mount`` layer
    the request passes through. Identifiers this layer mounted resolve to
    ``base + canonical_path``; anything else is delegated to the lookup
    installed by the enclosing layer, and finally reported as unresolved
    with a placeholder path rather than an exception.
    """

    __slots__ = ("_base", "_modules", "_parent")

    def __init__(
        self,
        modules: Mapping[str, MountPoint],
        base: str,
        parent: Callable[[str], str] | None = None,
    ) -> None:
        self._modules = modules
        self._base = base
        self._parent = parent

    def __call__(self, identifier: str) -> str:
        point = self._modules.get(identifier)
        if point is not None and point.canonical_path:
            return quote(self._base + point.canonical_path, safe=URI_SAFE)
        if self._parent is not None:
            return self._parent(identifier)
        return unresolved(identifier)


def unresolved(identifier: str) -> str:
    """Placeholder path rendered for identifiers no layer could resolve."""
    return f"/_{identifier}_(unresolved_module)"


def lookup_module(identifier: str) -> str:
    """Resolve a mounted import string against the current request.

    Outside a request, or before any ``Mount`` has run, the identifier
    is reported as unresolved.
    """
    from perch.context import request_var

    request = request_var.get(None)
    lookup = request.env.get(LOOKUP_ENV_KEY) if request is not None else None
    if lookup is None:
        return unresolved(identifier)
    return lookup(identifier)
