"""``perch routes`` — list registered routes in evaluation order."""

import argparse
import sys

from perch.cli._resolve import load_target
from perch.errors import ConfigurationError
from perch.filters.protocol import filter_name


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of ID, HOST, PATH, TARGET and FILTERS."""
    try:
        gateway = load_target(args.app, args.routes)
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = gateway.routes
    if not routes:
        print("No routes registered.")
        return

    headers = ("ID", "HOST", "PATH", "TARGET", "FILTERS")
    rows: list[tuple[str, ...]] = [headers]
    for route in routes:
        rows.append(
            (
                route.id,
                route.host.source if route.host else "*",
                route.path.source if route.path else "*",
                route.target_uri,
                ", ".join(filter_name(f) for f in route.filters) or "-",
            )
        )

    widths = [max(len(row[i]) for row in rows) for i in range(len(headers) - 1)]
    for index, row in enumerate(rows):
        cells = [cell.ljust(width) for cell, width in zip(row, widths, strict=False)]
        print("  ".join([*cells, row[-1]]))
        if index == 0:
            print("-" * min(sum(widths) + 2 * len(widths) + len("FILTERS"), 80))
