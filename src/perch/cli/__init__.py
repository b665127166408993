"""Perch CLI — run an application's command from an import string.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"

Usage::

    perch myapp:app greet --name=Ada
"""

import argparse
import sys

from perch.cli._resolve import resolve_app
from perch.console.error_handler import render_exception
from perch.errors import ConsoleError


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — run a console application command.",
    )
    parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )
    parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Route, options, and arguments passed to the application",
    )

    args = parser.parse_args(argv)

    try:
        app = resolve_app(args.app)
    except ConsoleError as exc:
        render_exception(exc, sys.stderr)
        raise SystemExit(exc.exit_code) from exc

    sys.exit(app.run(args.args))
