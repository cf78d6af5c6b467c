"""Terminal handling for requests that fall off the end of the stack.

When the outermost app exhausts its stack, the pending error (if any)
decides the answer: nothing pending means 404, an ``HTTPError`` answers
with its own status, anything else is a 500.
"""

import logging
import traceback
from collections.abc import Callable
from typing import Any

from strata.errors import HTTPError
from strata.http.request import Request
from strata.http.response import Response

logger = logging.getLogger("strata.server")


def final_handler(
    request: Request,
    response: Response,
    *,
    debug: bool = False,
) -> Callable[[Any], None]:
    """Build the ``done`` callback for an outermost traversal."""

    def done(error: Any = None) -> None:
        if response.finished:
            # A handler already answered and still called next()
            return
        if not error:
            handle_not_found(request, response)
        elif isinstance(error, HTTPError):
            handle_http_error(error, request, response, debug=debug)
        else:
            handle_internal_error(error, request, response, debug=debug)

    return done


def handle_not_found(request: Request, response: Response) -> None:
    """Answer 404: no layer ended the response."""
    logger.debug("404 %s %s", request.method, request.full_path)
    response.reset(404)
    response.end("Not Found")


def handle_http_error(
    exc: HTTPError,
    request: Request,
    response: Response,
    *,
    debug: bool = False,
) -> None:
    """Answer with the status carried by an unconsumed ``HTTPError``."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.full_path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    response.reset(exc.status)
    for name, value in exc.headers:
        response.set_header(name, value)
    response.end(detail)


def handle_internal_error(
    error: Any,
    request: Request,
    response: Response,
    *,
    debug: bool = False,
) -> None:
    """Answer 500 for an error no error handler consumed."""
    exc_info = error if isinstance(error, BaseException) else None
    logger.error(
        "500 %s %s: unhandled error %r",
        request.method,
        request.full_path,
        error,
        exc_info=exc_info,
    )

    response.reset(500)
    if not debug:
        response.end("Internal Server Error")
        return

    body = f"Internal Server Error\n\n{error!r}\n"
    if exc_info is not None:
        body += "\n" + "".join(traceback.format_exception(exc_info))
    response.end(body)
