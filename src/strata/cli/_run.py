"""``strata run`` — serve an app with pounce."""

import argparse
import sys

from strata.cli._resolve import resolve_app


def run_app(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it. CLI flags override app config."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from strata.server.dev import run_server

    app._ensure_frozen()
    run_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        workers=args.workers if args.workers is not None else app.config.workers,
        reload=args.reload or app.config.debug,
        reload_dirs=app.config.reload_dirs,
        app_path=args.app,
    )
