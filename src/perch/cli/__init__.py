"""Perch CLI — inspect mount trees and serve apps.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — compose ASGI apps by mounting them.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch mounts -----------------------------------------------------
    mounts_parser = subparsers.add_parser("mounts", help="Show the mount tree")
    mounts_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- perch run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "mounts":
        from perch.cli._mounts import run_mounts

        run_mounts(args)
    elif args.command == "run":
        from perch.cli._run import run_server

        run_server(args)
