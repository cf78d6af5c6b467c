"""``strata layers`` — print an app's layer stack, mounted apps indented."""

import argparse
import sys

from strata.app import App
from strata.cli._resolve import resolve_app


def format_layers(app: App, indent: int = 0) -> list[str]:
    """One line per layer: index, kind, mount path, handler name."""
    lines: list[str] = []
    pad = "  " * indent
    for index, layer in enumerate(app.stack):
        name = getattr(layer.handler, "__qualname__", None) or type(layer.handler).__name__
        lines.append(f"{pad}{index:>3}  {layer.kind.value:<6}  {layer.path:<20}  {name}")
        if layer.is_mount and isinstance(layer.handler, App):
            lines.extend(format_layers(layer.handler, indent + 1))
    return lines


def print_layers(args: argparse.Namespace) -> None:
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    lines = format_layers(app)
    if not lines:
        print("(no layers registered)")
        return
    print("\n".join(lines))
