"""``perch check`` — compile the dispatch table, exit 1 on configuration errors."""

import argparse
import sys

from perch.cli._resolve import resolve_app
from perch.errors import ConfigurationError


def run_check(args: argparse.Namespace) -> None:
    """Compile ``args.app`` and report the outcome."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        table = app.check()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"OK: {len(table)} route(s) compiled.")
