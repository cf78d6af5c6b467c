"""Layer — a registered (path prefix, handler) pair with a fixed kind.

Layers are created by ``App.use()`` / ``App.use_error()`` and never
change afterwards. Matching and kind are independent: a request can
match a layer whose kind is wrong for the current phase, in which case
the traversal skips it.
"""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any

from strata.errors import ConfigurationError
from strata.middleware.protocol import Mountable

_SEPARATOR = "/"
_ERROR_HANDLER_ARITY = 4


class HandlerKind(Enum):
    """How a layer's handler is called."""

    NORMAL = "normal"
    ERROR = "error"
    MOUNT = "mount"


@dataclass(frozen=True, slots=True)
class LayerMatch:
    """Result of a successful ``Layer.match()``.

    ``path`` is the layer's mount path, ``remainder`` the sub-path left
    for a mounted app (``"/"`` when the match is exact).
    """

    path: str
    remainder: str


def normalize_path(path: str) -> str:
    """Ensure a leading slash and drop trailing ones (root stays ``"/"``)."""
    if not isinstance(path, str):
        msg = f"Mount path must be a string, got {type(path).__name__}"
        raise ConfigurationError(msg)
    stripped = path.strip(_SEPARATOR)
    return f"{_SEPARATOR}{stripped}" if stripped else _SEPARATOR


def positional_arity(handler: Any) -> int | None:
    """Count the positional parameters *handler* declares.

    Returns ``None`` when the signature cannot be inspected (some
    builtins and C callables).
    """
    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        return None
    return sum(
        1
        for param in sig.parameters.values()
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD)
    )


def is_mountable(handler: Any) -> bool:
    """True when *handler* exposes a callable ``handle()`` entry point."""
    return isinstance(handler, Mountable) and callable(getattr(handler, "handle", None))


def classify(handler: Any) -> HandlerKind:
    """Derive a handler's kind from its shape.

    Objects with a callable ``handle()`` are mounts; callables declaring exactly four
    positional parameters are error handlers; everything else is a
    normal handler.
    """
    if is_mountable(handler):
        return HandlerKind.MOUNT
    if positional_arity(handler) == _ERROR_HANDLER_ARITY:
        return HandlerKind.ERROR
    return HandlerKind.NORMAL


@dataclass(frozen=True, slots=True)
class Layer:
    """A frozen stack entry.

    Usage::

        layer = Layer("/foo", handler)
        layer.match("/foo/bar")   # LayerMatch(path="/foo", remainder="/bar")
        layer.match("/foobar")    # None
    """

    path: str
    handler: Any
    kind: HandlerKind | None = None  # None: classify from the handler's shape

    def __post_init__(self) -> None:
        if not callable(self.handler) and not is_mountable(self.handler):
            msg = f"Layer handler must be callable, got {type(self.handler).__name__}"
            raise ConfigurationError(msg)
        object.__setattr__(self, "path", normalize_path(self.path))
        if self.kind is None:
            object.__setattr__(self, "kind", classify(self.handler))
        elif self.kind is HandlerKind.MOUNT and not is_mountable(self.handler):
            msg = f"Only apps exposing handle() can be mounted, got {type(self.handler).__name__}"
            raise ConfigurationError(msg)

    @property
    def is_error_handler(self) -> bool:
        return self.kind is HandlerKind.ERROR

    @property
    def is_mount(self) -> bool:
        return self.kind is HandlerKind.MOUNT

    def match(self, request_path: str) -> LayerMatch | None:
        """Match *request_path* against this layer's prefix.

        The prefix must end at a segment boundary: ``/foo`` matches
        ``/foo`` and ``/foo/bar`` but not ``/foobar``. The root layer
        matches every path.
        """
        if self.path == _SEPARATOR:
            return LayerMatch(path=self.path, remainder=request_path or _SEPARATOR)

        if not request_path.startswith(self.path):
            return None

        rest = request_path[len(self.path) :]
        if rest and not rest.startswith(_SEPARATOR):
            return None

        return LayerMatch(path=self.path, remainder=rest or _SEPARATOR)
