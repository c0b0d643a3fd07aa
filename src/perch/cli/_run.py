"""``perch run`` — serve an app with pounce."""

import argparse
import sys

from perch.cli._resolve import resolve_app
from perch.errors import ConfigurationError, TargetResolutionError


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it; CLI flags override host/port."""
    try:
        app = resolve_app(args.app)
    except (TargetResolutionError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app.run(args.host, args.port, app_path=args.app)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
