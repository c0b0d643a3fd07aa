"""Perch exception hierarchy.

Shared across the mount registry, router, App, and server pipeline so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when app configuration is invalid.

    Setup-time only: mounts, routes, and middleware are validated as
    they are registered, never while serving.
    """


class MissingSpecError(ConfigurationError):
    """Raised by ``mount()`` when neither a path nor a host is given."""

    def __init__(self, spec: object = None) -> None:
        super().__init__(
            f"Missing mount spec: expected a path string or an object with "
            f"'path' and/or 'host', got {spec!r}"
        )
        self.spec = spec


class TargetResolutionError(ConfigurationError):
    """Raised when a mount target identifier cannot be resolved.

    The original import or lookup failure is chained as ``__cause__``.
    """

    def __init__(self, identifier: str, reason: str = "") -> None:
        msg = f"Error resolving mount target {identifier!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.identifier = identifier


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by the router or handlers. The server pipeline catches these
    and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route or mount matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
