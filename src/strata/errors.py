"""Strata exception hierarchy.

Shared across the layer stack, the app, and the server plumbing so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class StrataError(Exception):
    """Base for all strata-specific errors."""


class ConfigurationError(StrataError):
    """Raised when a layer or app is registered with invalid arguments."""


class ResponseFinished(StrataError):
    """Raised when a handler writes to a response that has already ended."""


@dataclass(frozen=True, slots=True)
class HTTPError(StrataError):
    """An error that maps directly to an HTTP status code.

    Handlers pass these to ``next()`` (or raise them). When no error
    handler consumes one, the terminal handler answers with its status
    instead of a bare 500.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """A ready-made 404 for handlers that want to say so explicitly."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
