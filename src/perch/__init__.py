"""Perch — an ASGI micro-framework built around mounting.

Compose applications by mounting them at a path prefix or a virtual
host; each mounted app sees only the part of the path below its mount.

Basic usage::

    from perch import App

    wiki = App()

    @wiki.route("/{page}")
    def show(page: str):
        return f"Page {page}"

    app = App()
    app.mount("/wiki", wiki)
    app.mount({"host": "api.example.com"}, "myapi.main:app")

    app.run()

Serving requires ``pip install perch[server]``.
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "App",
    "AppConfig",
    "ConfigurationError",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "MissingSpecError",
    "Mount",
    "MountPoint",
    "MountSpec",
    "Next",
    "NotFound",
    "PerchError",
    "Redirect",
    "Request",
    "Response",
    "TargetResolutionError",
    "get_request",
    "lookup_module",
    "resolve_path",
    "url_for",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from perch.http import response as _resp

        return getattr(_resp, name)

    if name in ("AnyResponse", "Middleware", "Next"):
        from perch.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("Mount", "MountPoint", "MountSpec"):
        from perch.middleware import mount as _mount

        return getattr(_mount, name)

    if name in ("lookup_module", "resolve_path", "url_for"):
        from perch import reverse as _reverse

        return getattr(_reverse, name)

    if name == "get_request":
        from perch.context import get_request

        return get_request

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "MissingSpecError",
        "NotFound",
        "PerchError",
        "TargetResolutionError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
