"""Mount target resolution — turns ``"module:attribute"`` strings into apps.

``mount()`` accepts either an application object or an import string.
Strings are resolved once, at registration, so a bad identifier fails
while the app is being set up rather than on the first request.
"""

import importlib
from typing import Any

from perch._internal.types import Application
from perch.errors import TargetResolutionError


def resolve_target(target: Any) -> Any:
    """Resolve a mount target to the object that gets mounted.

    Accepts:

    - a perch ``App``, returned as-is;
    - any callable application ``(request) -> response``, returned as-is;
    - an import string ``"package.module:attribute"``; the attribute
      defaults to ``app`` when omitted (``"wiki"`` means ``wiki.app``).

    Raises:
        TargetResolutionError: If the string cannot be imported or does
            not name an App or callable.
    """
    if not isinstance(target, str):
        if not callable(target):
            msg = f"expected an App, a callable, or an import string, got {type(target).__name__}"
            raise TargetResolutionError(repr(target), msg)
        return target

    module_path, _, attr_name = target.partition(":")
    if not module_path:
        raise TargetResolutionError(target, "empty module path")
    attr_name = attr_name or "app"

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise TargetResolutionError(target, str(exc)) from exc

    try:
        obj = getattr(module, attr_name)
    except AttributeError as exc:
        msg = f"module {module_path!r} has no attribute {attr_name!r}"
        raise TargetResolutionError(target, msg) from exc

    if not callable(obj):
        msg = f"resolved to {type(obj).__name__}, not an App or callable"
        raise TargetResolutionError(target, msg)
    return obj


def as_application(resolved: Any) -> Application:
    """Return the request entry point of a resolved target.

    Perch ``App`` instances are entered through ``App.handle`` (their ASGI
    ``__call__`` expects scope/receive/send); plain callables already take
    a request.
    """
    from perch.app import App

    if isinstance(resolved, App):
        return resolved.handle
    return resolved
