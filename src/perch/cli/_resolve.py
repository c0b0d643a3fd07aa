"""App import resolution for ``perch mounts`` and ``perch run``."""

from perch.app import App
from perch.resolve import resolve_target


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a perch App instance.

    Accepts ``"module:attribute"``; the attribute defaults to ``app``.
    A callable that is not an App is treated as a factory and called.

    Raises:
        TargetResolutionError: If the module or attribute cannot be found.
        TypeError: If the result is not a perch ``App``.
    """
    obj = resolve_target(import_string)

    if not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a perch.App instance"
        raise TypeError(msg)

    return obj
