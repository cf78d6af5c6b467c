"""Strata — ordered middleware dispatch with a separate error track.

Handlers are stacked against path prefixes and visited in registration
order. Signaling an error (``next(error)`` or raising) skips every
normal handler until an error handler takes over. Apps mount inside
apps; whatever the inner app leaves unanswered continues outside.

Basic usage::

    from strata import App

    app = App()

    def hello(request, response, next):
        response.end("Hello, World!")

    def on_error(error, request, response, next):
        response.status = 500
        response.end(f"Something broke: {error}")

    app.use("/hello", hello)
    app.use(on_error)

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "ErrorMiddleware",
    "HTTPError",
    "HandlerKind",
    "Layer",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "ResponseFinished",
    "StrataError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import strata`` fast while providing a clean top-level API.
    """
    if name == "App":
        from strata.app import App

        return App

    if name == "AppConfig":
        from strata.config import AppConfig

        return AppConfig

    if name == "Request":
        from strata.http.request import Request

        return Request

    if name == "Response":
        from strata.http.response import Response

        return Response

    if name in ("HandlerKind", "Layer"):
        from strata.routing import layer as _layer

        return getattr(_layer, name)

    if name in ("ErrorMiddleware", "Middleware", "Next"):
        from strata.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "ResponseFinished",
        "StrataError",
    ):
        from strata import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
