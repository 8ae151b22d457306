"""Perch CLI — serve a gateway and inspect its route table.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def _add_target_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "app",
        nargs="?",
        default=None,
        help="Import string (e.g. myproxy:gateway)",
    )
    parser.add_argument(
        "--routes",
        default=None,
        metavar="FILE",
        help="TOML route file to build the gateway from",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — a small HTTP gateway.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve a gateway")
    _add_target_args(run_parser)
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument("--workers", type=int, default=None, help="Worker count")
    run_parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    run_parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Logging level (defaults to the gateway config)",
    )

    # -- perch routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes in evaluation order")
    _add_target_args(routes_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.app is None and args.routes is None:
        parser.error(f"{args.command}: an import string or --routes FILE is required")

    if args.command == "run":
        from perch.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from perch.cli._routes import run_routes

        run_routes(args)
