"""``perch routes`` — list compiled routes.

Resolves an import string to a perch App, compiles its dispatch table
and prints every entry in table order.
"""

import argparse
import sys

from perch.cli._resolve import resolve_app
from perch.errors import ConfigurationError


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of VERB, PATH, SOURCE and ENDPOINT."""
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

    if not len(table):
        print("No routes registered.")
        return

    rows = [
        (entry.path_spec.verb, entry.path_spec.path, entry.path_spec.source, entry.name)
        for entry in table
    ]

    max_verb = max(6, *(len(r[0]) for r in rows))
    max_path = max(4, *(len(r[1]) for r in rows))
    max_source = max(6, *(len(r[2]) for r in rows))

    fmt = f"{{:<{max_verb}}}  {{:<{max_path}}}  {{:<{max_source}}}  {{}}"
    print(fmt.format("VERB", "PATH", "SOURCE", "ENDPOINT"))
    sep_len = max_verb + max_path + max_source + 6 + max(len(r[3]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
