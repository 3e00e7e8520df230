"""``perch routes`` — list registered routes.

Resolves an import string to a perch App and prints every route in
precedence order with method, full path, and handler chain.
"""

import argparse
import sys

from perch.cli._resolve import resolve_app
from perch.routing.chain import handler_name


def _full_path(mount_path: str, path: str) -> str:
    if not mount_path:
        return path
    if path == "/":
        return mount_path
    return mount_path + path


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a perch app.

    Resolves ``args.app`` to an App instance, freezes it, and prints
    a table of METHOD, PATH, and HANDLERS.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    app._ensure_frozen()
    routes = app.router.routes
    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str]] = []
    for mount_path, route in routes:
        handlers = " -> ".join(handler_name(h) for h in route.handlers)
        if route.name:
            handlers = f"{handlers} ({route.name})"
        rows.append((str(route.method), _full_path(mount_path, route.path), handlers))

    max_method = max(max(len(r[0]) for r in rows), 6)  # "METHOD" header
    max_path = max(max(len(r[1]) for r in rows), 4)  # "PATH" header

    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "HANDLERS"))
    sep_len = max_method + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for method, path, handlers in rows:
        print(fmt.format(method, path, handlers))
