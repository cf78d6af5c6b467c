"""The ``strata`` command.

Installed as a console script::

    strata run myapp:app --port 3000
    strata layers myapp:app
"""

import argparse
import sys


def _add_app_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("app", help="App import string, e.g. myapp:app or myapp:create_app")


def main(argv: list[str] | None = None) -> None:
    """Parse *argv* (default ``sys.argv[1:]``) and run the chosen subcommand."""
    parser = argparse.ArgumentParser(
        prog="strata",
        description="strata: ordered middleware dispatch for ASGI.",
    )
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Serve an app with pounce")
    _add_app_argument(run_parser)
    run_parser.add_argument("--host", help="Address to bind (default: app config)")
    run_parser.add_argument("--port", type=int, help="Port to bind (default: app config)")
    run_parser.add_argument(
        "--workers",
        type=int,
        help="Worker processes (default: app config; forced to 1 with reload)",
    )
    run_parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (always on when the app runs with debug=True)",
    )

    layers_parser = subparsers.add_parser("layers", help="Print an app's layer stack")
    _add_app_argument(layers_parser)

    args = parser.parse_args(argv)

    if args.command == "run":
        from strata.cli._run import run_app

        run_app(args)
    elif args.command == "layers":
        from strata.cli._layers import print_layers

        print_layers(args)
    else:
        parser.print_help()
        sys.exit(0)
