"""Strata application class — the dispatcher.

Mutable during setup (``use()`` / ``use_error()`` append layers).
Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.
"""

import asyncio
import threading
from collections.abc import Callable
from typing import Any, TypeAlias

from strata._internal.asgi import Receive, Scope, Send
from strata.config import AppConfig
from strata.errors import ConfigurationError
from strata.http.request import Request
from strata.http.response import Response
from strata.middleware.protocol import Done
from strata.routing.layer import HandlerKind, Layer, is_mountable
from strata.routing.traversal import Traversal
from strata.server.errors import final_handler
from strata.server.handler import handle_request

Handler: TypeAlias = Callable[..., Any]


class App:
    """The strata application.

    Holds an ordered stack of layers. Each request walks the stack in
    registration order; normal handlers run until one signals an error,
    after which only error handlers run. Apps can be mounted inside
    other apps, and whatever the inner app leaves unanswered (requests
    or errors) continues in the outer one.

    Usage::

        app = App()

        def hello(request, response, next):
            response.end("hello")

        def oops(error, request, response, next):
            response.status = 500
            response.end(f"failed: {error}")

        app.use("/hello", hello)
        app.use(oops)

    Thread safety:
        The setup phase is single-threaded (registration at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread freezes the app when several workers call ``__call__()``
        on first request.
    """

    __slots__ = ("_freeze_lock", "_frozen", "_layers", "config")

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._layers: list[Layer] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    def __repr__(self) -> str:
        return f"<App layers={len(self._layers)} frozen={self._frozen}>"

    # -- Registration --

    def use(self, path_or_handler: Any, handler: Any = None) -> Any:
        """Append a layer. The path defaults to ``"/"``.

        The handler's kind comes from its shape: apps are mounted,
        four positional parameters make an error handler, anything else
        is a normal handler. Returns the handler, so a bare ``use`` also
        works as a decorator; ``use("/path")`` returns one::

            app.use(log_request)
            app.use("/api", api_app)

            @app.use("/admin")
            def admin(request, response, next): ...
        """
        return self._register(path_or_handler, handler, kind=None)

    def use_error(self, path_or_handler: Any, handler: Any = None) -> Any:
        """Append a layer that is an error handler regardless of its arity.

        Error handlers are called as ``handler(error, request, response, next)``
        and only while an error is pending.
        """
        return self._register(path_or_handler, handler, kind=HandlerKind.ERROR)

    def _register(self, path_or_handler: Any, handler: Any, *, kind: HandlerKind | None) -> Any:
        if handler is None and isinstance(path_or_handler, str):
            path = path_or_handler

            def decorator(func: Handler) -> Handler:
                self._append(path, func, kind)
                return func

            return decorator

        if handler is None:
            path, handler = "/", path_or_handler
        elif isinstance(path_or_handler, str):
            path = path_or_handler
        else:
            msg = f"Mount path must be a string, got {type(path_or_handler).__name__}"
            raise ConfigurationError(msg)

        self._append(path, handler, kind)
        return handler

    def _append(self, path: str, handler: Any, kind: HandlerKind | None) -> None:
        self._check_not_frozen()
        if handler is self:
            msg = "An app cannot be mounted inside itself."
            raise ConfigurationError(msg)
        if kind is HandlerKind.ERROR and is_mountable(handler):
            msg = "Apps can only be mounted with use(), not registered as error handlers."
            raise ConfigurationError(msg)
        self._layers.append(Layer(path, handler, kind))

    @property
    def stack(self) -> tuple[Layer, ...]:
        """The registered layers, in registration order."""
        return tuple(self._layers)

    # -- Dispatch --

    def handle(
        self,
        request: Request,
        response: Response,
        done: Done | None = None,
    ) -> asyncio.Task[None]:
        """Walk the stack for one request.

        ``done(error)`` runs when the stack is exhausted. When omitted,
        the terminal handler answers 404 (nothing pending) or 500 (error
        pending). A parent app passes its own ``next`` here, which is how
        unanswered requests and errors bubble up.

        Must be called from a running event loop. Returns the task of the
        first advance step.
        """
        if done is None:
            done = final_handler(request, response, debug=self.config.debug)
        traversal = Traversal(self.stack, request, response, done)
        return traversal.next()

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with pounce (blocks until the server stops)."""
        from strata.server.dev import run_server

        self._ensure_frozen()
        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            workers=self.config.workers,
            reload=self.config.debug,
            reload_dirs=self.config.reload_dirs,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Acknowledges lifespan scopes directly, then delegates HTTP scopes
        to the request handler.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        await handle_request(scope, receive, send, app=self)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol (freeze at startup, nothing else)."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self._ensure_frozen()
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Stop accepting registrations, here and in every mounted app.

        MUST only be called while holding _freeze_lock.
        """
        self._frozen = True
        for layer in self._layers:
            if layer.is_mount and isinstance(layer.handler, App):
                layer.handler._ensure_frozen()

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register layers before calling app.run()."
            )
            raise RuntimeError(msg)
