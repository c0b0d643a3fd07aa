"""``perch mounts`` — print the mount tree of an app.

Walks the app's mount registry (and those of mounted perch apps) and
prints one row per mount with its host, its externally visible path,
and what is mounted there.
"""

import argparse
import sys

from perch.app import App
from perch.cli._resolve import resolve_app
from perch.errors import TargetResolutionError


def _describe(target: object) -> str:
    if isinstance(target, App):
        return repr(target)
    module = getattr(target, "__module__", None)
    name = getattr(target, "__qualname__", None) or type(target).__qualname__
    return f"{module}:{name}" if module else name


def collect_rows(app: App) -> list[tuple[str, str, str]]:
    """Flatten the mount tree into ``(host, path, target)`` rows.

    Paths are external: each row's path already includes the prefixes
    of the mounts above it. Each perch app is expanded once.
    """
    rows: list[tuple[str, str, str]] = []
    seen: set[int] = {id(app)}

    def walk(current: App, prefix: str, host: str) -> None:
        for point in current.mounts:
            path = prefix + (point.canonical_path or "/")
            point_host = point.host or host
            rows.append((point_host or "*", path, _describe(point.target)))
            target = point.target
            if isinstance(target, App) and id(target) not in seen:
                seen.add(id(target))
                walk(target, prefix + (point.path or ""), point_host)

    walk(app, "", "")
    return rows


def run_mounts(args: argparse.Namespace) -> None:
    """Print a HOST / PATH / TARGET table for ``args.app``."""
    try:
        app = resolve_app(args.app)
    except (TargetResolutionError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    rows = collect_rows(app)
    if not rows:
        print("No mounts registered.")
        return

    max_host = max(4, *(len(r[0]) for r in rows))
    max_path = max(4, *(len(r[1]) for r in rows))

    fmt = f"{{:<{max_host}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("HOST", "PATH", "TARGET"))
    sep_len = max_host + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
