"""The ``wren`` command: ``wren run`` serves an app, ``wren routes`` lists it.

Both subcommands take an import string. ``"pkg.module:name"`` picks an
attribute; a bare ``"pkg.module"`` means ``"pkg.module:app"``. A callable
that is not itself an App is treated as a factory and called once.
"""

import argparse
import importlib
import sys

from wren.app import App
from wren.routing.tree import handler_name

_LOAD_ERRORS = (ModuleNotFoundError, AttributeError, TypeError)


def resolve_app(target: str) -> App:
    """Import *target* and return the App it names.

    Raises ``ModuleNotFoundError``/``AttributeError`` when the lookup
    fails and ``TypeError`` when it finds something that is not an App.
    """
    module_name, _, attribute = target.partition(":")
    found = getattr(importlib.import_module(module_name), attribute or "app")

    if callable(found) and not isinstance(found, App):
        try:
            found = found()
        except Exception as exc:
            msg = f"App factory {target!r} failed: {exc}"
            raise TypeError(msg) from exc

    if isinstance(found, App):
        return found
    msg = f"{target!r} is a {type(found).__name__}, not a wren.App"
    raise TypeError(msg)


def _load(target: str) -> App:
    try:
        return resolve_app(target)
    except _LOAD_ERRORS as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


def _cmd_run(args: argparse.Namespace) -> None:
    # the import string goes along so the reloader can re-import it
    _load(args.app).run(args.host, args.port, app_path=args.app)


def _cmd_routes(args: argparse.Namespace) -> None:
    app = _load(args.app)
    if args.tree:
        print(app.format_tree())
        return

    rows = [("METHOD", "PATH", "HANDLER")]
    rows += [(r.method, r.path, handler_name(r.handler)) for r in app.routes]
    if len(rows) == 1:
        print("No routes registered.")
        return

    widths = [max(len(row[column]) for row in rows) for column in range(3)]
    for index, (method, path, name) in enumerate(rows):
        print(f"{method:<{widths[0]}}  {path:<{widths[1]}}  {name}")
        if index == 0:
            print("-" * min(sum(widths) + 4, 80))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wren",
        description="Wren: a small async router with a segment-trie core.",
    )
    commands = parser.add_subparsers(dest="command")

    run = commands.add_parser("run", help="Serve an app with the development server")
    run.add_argument("app", help="Import string, e.g. myapp:app")
    run.add_argument("--host", default=None, help="Host to bind (default: config.host)")
    run.add_argument("--port", type=int, default=None, help="Port to bind (default: config.port)")
    run.set_defaults(handler=_cmd_run)

    routes = commands.add_parser("routes", help="Print the routes an app registers")
    routes.add_argument("app", help="Import string, e.g. myapp:app")
    routes.add_argument("--tree", action="store_true", help="Show the route tree instead")
    routes.set_defaults(handler=_cmd_routes)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``wren`` console script."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(0)
    args.handler(args)
