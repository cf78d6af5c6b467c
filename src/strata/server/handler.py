"""ASGI handler — translates ASGI scope/messages to strata types.

The only component that touches raw ASGI directly. Builds the Request
and Response, starts a traversal through the app's stack, waits for a
handler (or the terminal handler) to end the response, then sends it.
If the request is cancelled while waiting, every traversal step it
still has pending, in any mounted app, is cancelled with it.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from strata._internal.asgi import Receive, Scope, Send
from strata.http.request import Request
from strata.http.response import Response
from strata.routing.traversal import track_request_tasks
from strata.server.sender import send_response

if TYPE_CHECKING:
    from strata.app import App


async def handle_request(scope: Scope, receive: Receive, send: Send, *, app: App) -> None:
    """Process a single HTTP request through the layer stack."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = Response()

    # The traversal runs as its own chain of tasks; a handler may end the
    # response long after its step returned.
    with track_request_tasks() as tasks:
        app.handle(request, response)
        try:
            await response.wait()
        except asyncio.CancelledError:
            for task in list(tasks):
                task.cancel()
            raise

    await send_response(response, send)
