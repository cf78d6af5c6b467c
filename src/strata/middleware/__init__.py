"""Handler protocols. Plain functions satisfy them; no base classes.

A normal middleware is any callable matching:
    def mw(request: Request, response: Response, next: Next) -> None

An error middleware takes the pending error first:
    def on_error(error, request: Request, response: Response, next: Next) -> None
"""

from strata.middleware.protocol import Done, ErrorMiddleware, Middleware, Mountable, Next

__all__ = [
    "Done",
    "ErrorMiddleware",
    "Middleware",
    "Mountable",
    "Next",
]
