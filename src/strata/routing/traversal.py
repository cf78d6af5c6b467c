"""Traversal — the per-request state machine that walks a layer stack.

One ``Traversal`` exists per request per app. It owns the cursor into
the stack and the pending error, and nothing else touches them.

Each call to ``next()`` schedules one advance step as an
``asyncio.Task``:

1. record the error argument as the pending error (a falsy value clears it)
2. walk forward from the cursor, skipping layers that don't match the
   request path or whose kind is wrong for the phase (normal layers
   while an error is pending, error layers otherwise)
3. invoke the first compatible layer with a fresh continuation, or call
   ``done(pending_error)`` once the stack is exhausted

A handler that raises is treated as if it had called ``next(exc)``.
Because every step is a task, ``next`` can be called synchronously,
awaited, or called later from a loop callback.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from strata._internal.invoke import invoke
from strata.http.request import Request
from strata.http.response import Response
from strata.middleware.protocol import Done
from strata.routing.layer import HandlerKind, Layer, LayerMatch

logger = logging.getLogger("strata.routing")

# Pending advance steps of the current request, across every mounted app.
# Tasks inherit the context they are created in, so the set reaches them all.
_request_tasks: ContextVar[set[asyncio.Task[None]] | None] = ContextVar(
    "strata_request_tasks", default=None
)


@contextmanager
def track_request_tasks() -> Iterator[set[asyncio.Task[None]]]:
    """Collect every traversal step scheduled inside the block.

    The server wraps each request in this so that a cancelled request
    can cancel the steps it left running::

        with track_request_tasks() as tasks:
            app.handle(request, response)
            ...
    """
    tasks: set[asyncio.Task[None]] = set()
    token = _request_tasks.set(tasks)
    try:
        yield tasks
    finally:
        _request_tasks.reset(token)


class Continuation:
    """The ``next`` callable handed to a single handler invocation.

    Remembers whether it was used so a fault raised after the handler
    already continued is not routed twice.
    """

    __slots__ = ("_traversal", "called")

    def __init__(self, traversal: Traversal) -> None:
        self._traversal = traversal
        self.called = False

    def __call__(self, error: Any = None) -> asyncio.Task[None]:
        self.called = True
        return self._traversal.next(error)

    def __repr__(self) -> str:
        return f"<Continuation called={self.called}>"


class Traversal:
    """Walks *stack* for one request.

    Usage::

        traversal = Traversal(app.stack, request, response, done)
        traversal.next()  # start at index 0 with no pending error
    """

    __slots__ = (
        "_done",
        "_loop",
        "_stack",
        "_tasks",
        "index",
        "pending_error",
        "request",
        "response",
    )

    def __init__(
        self,
        stack: Sequence[Layer],
        request: Request,
        response: Response,
        done: Done,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._stack = stack
        self.request = request
        self.response = response
        self._done = done
        self._loop = loop or asyncio.get_running_loop()
        # Strong references: the loop only keeps weak ones to running tasks
        self._tasks: set[asyncio.Task[None]] = set()
        self.index = 0
        self.pending_error: Any = None

    def next(self, error: Any = None) -> asyncio.Task[None]:
        """Schedule the next advance step and return its task."""
        task = self._loop.create_task(self._advance(error))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        request_tasks = _request_tasks.get()
        if request_tasks is not None:
            request_tasks.add(task)
            task.add_done_callback(request_tasks.discard)
        return task

    async def _advance(self, error: Any) -> None:
        # Falsy values (None, "", 0, False) signal no error
        self.pending_error = error if error else None

        while self.index < len(self._stack):
            layer = self._stack[self.index]
            self.index += 1

            match = layer.match(self.request.path)
            if match is None:
                continue

            if (self.pending_error is not None) != layer.is_error_handler:
                continue

            await self._run(layer, match)
            return

        await invoke(self._done, self.pending_error)

    async def _run(self, layer: Layer, match: LayerMatch) -> None:
        """Invoke one layer behind a guarded call boundary."""
        step = Continuation(self)
        try:
            if layer.kind is HandlerKind.ERROR:
                await invoke(layer.handler, self.pending_error, self.request, self.response, step)
            elif layer.kind is HandlerKind.MOUNT:
                sub_request = self.request.mounted(match.path, match.remainder)
                await invoke(layer.handler.handle, sub_request, self.response, step)
            else:
                await invoke(layer.handler, self.request, self.response, step)
        except Exception as exc:
            if step.called:
                logger.warning(
                    "Handler %r raised after calling next(); dropping %r",
                    layer.handler,
                    exc,
                    exc_info=exc,
                )
                return
            step(exc)
