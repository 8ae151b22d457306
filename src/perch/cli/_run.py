"""``perch run`` — serve a gateway with pounce."""

import argparse
import logging
import sys

from perch.cli._resolve import load_target
from perch.errors import ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Resolve the gateway, configure logging, and start serving.

    CLI flags override the gateway's config for host, port and workers.
    """
    try:
        gateway = load_target(args.app, args.routes)
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    cfg = gateway.config
    level = (args.log_level or cfg.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    gateway._ensure_frozen()

    from perch.server.dev import run_server as serve

    serve(
        gateway,
        args.host or cfg.host,
        args.port or cfg.port,
        workers=args.workers if args.workers is not None else cfg.workers,
        reload=args.reload or cfg.debug,
        app_path=args.app if args.reload else None,
    )
