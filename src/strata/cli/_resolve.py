"""Locate the App named by a ``"module:attribute"`` import string."""

import importlib

from strata.app import App


def resolve_app(import_string: str) -> App:
    """Import the module and return the App it names.

    ``"pkg.web"`` is shorthand for ``"pkg.web:app"``. If the attribute
    is a callable other than an App, it is treated as a factory and
    called with no arguments.

    Raises:
        ModuleNotFoundError: The module part does not import.
        AttributeError: The module has no such attribute.
        TypeError: The factory failed, or the result is not an App.
    """
    module_name, _, attribute = import_string.partition(":")
    target = getattr(importlib.import_module(module_name), attribute or "app")

    if isinstance(target, App):
        return target

    if callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc
        if isinstance(target, App):
            return target

    msg = f"{import_string!r} resolved to {type(target).__name__}, not a strata.App instance"
    raise TypeError(msg)
