"""Handler protocols and the Next continuation type.

A normal middleware is any callable matching::

    def mw(request: Request, response: Response, next: Next) -> None: ...

An error middleware takes the pending error first::

    def on_error(error: object, request: Request, response: Response, next: Next) -> None: ...

Either may be ``async def``. No base class required. The stack checks
the shape, not the lineage.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeAlias, runtime_checkable

from strata.http.request import Request
from strata.http.response import Response

# The continuation handed to every handler: next() resumes normal flow,
# next(error) diverts to error handlers. Only a truthy error counts:
# next(""), next(0) and next(False) behave like next(). Returns the
# scheduled step.
Next: TypeAlias = Callable[..., asyncio.Task[None]]

# Terminal callback invoked with the pending error (or None) when a
# stack is exhausted
Done: TypeAlias = Callable[[Any], Any]


class Middleware(Protocol):
    """Protocol for normal middleware.

    Accepts both functions and callable objects::

        # Function middleware
        def powered_by(request, response, next):
            response.set_header("X-Powered-By", "strata")
            next()

        # Class middleware
        class RequireJSON:
            def __call__(self, request, response, next):
                if request.headers.get("content-type") != "application/json":
                    next(HTTPError(415))
                else:
                    next()
    """

    def __call__(
        self, request: Request, response: Response, next: Next
    ) -> Awaitable[None] | None: ...


class ErrorMiddleware(Protocol):
    """Protocol for error middleware.

    Only runs while an error is pending. Calling ``next()`` with no
    argument clears the error and resumes normal middleware.
    """

    def __call__(
        self, error: Any, request: Request, response: Response, next: Next
    ) -> Awaitable[None] | None: ...


@runtime_checkable
class Mountable(Protocol):
    """Anything exposing the dispatcher entry point can be mounted."""

    def handle(
        self, request: Request, response: Response, done: Done | None = None
    ) -> asyncio.Task[None]: ...
