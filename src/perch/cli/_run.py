"""``perch run`` — development server command."""

import argparse
import sys
from dataclasses import replace

from perch.cli._resolve import is_file_target, resolve_app
from perch.errors import ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it.

    ``--debug`` overrides ``config.debug`` and turns on auto-reload.
    Only import strings are handed to the server for re-importing;
    a file target is served as loaded.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.debug and not app.config.debug:
        app.config = replace(app.config, debug=True)

    app_path = None if is_file_target(args.app) else args.app
    try:
        app.run(args.host, args.port, app_path=app_path)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
