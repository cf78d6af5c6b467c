"""Outgoing HTTP response.

Unlike the request, the response is mutable: handlers set the status,
add headers, ``write()`` body chunks and finally ``end()`` it. Ending
the response is the side effect that completes a request; the server
waits on ``wait()`` and then sends what was buffered.
"""

import asyncio
from dataclasses import dataclass, field

from strata.errors import ResponseFinished

_DEFAULT_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass(slots=True)
class Response:
    """A buffered, side-effecting HTTP response.

    Usage inside a handler::

        def hello(request, response, next):
            response.status = 201
            response.set_header("X-Greeting", "hi")
            response.end("hello")
    """

    status: int = 200
    content_type: str = _DEFAULT_CONTENT_TYPE
    headers: list[tuple[str, str]] = field(default_factory=list)
    _chunks: list[bytes] = field(default_factory=list, repr=False)
    _finished: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    # -- Headers --

    def set_header(self, name: str, value: str) -> None:
        """Set a header, replacing any earlier value with the same name."""
        self._check_open()
        lowered = name.lower()
        if lowered == "content-type":
            self.content_type = value
            return
        self.headers = [(n, v) for n, v in self.headers if n.lower() != lowered]
        self.headers.append((name, value))

    def get_header(self, name: str) -> str | None:
        """Return the value of *name*, or ``None`` if it was never set."""
        lowered = name.lower()
        if lowered == "content-type":
            return self.content_type
        for header_name, value in self.headers:
            if header_name.lower() == lowered:
                return value
        return None

    def reset(self, status: int = 200) -> None:
        """Discard headers and body written so far and start over with *status*.

        Used when an error answer replaces whatever a failed handler had
        begun to write.
        """
        self._check_open()
        self.status = status
        self.content_type = _DEFAULT_CONTENT_TYPE
        self.headers = []
        self._chunks.clear()

    # -- Body --

    def write(self, chunk: str | bytes) -> None:
        """Append a chunk to the body."""
        self._check_open()
        self._chunks.append(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)

    def end(self, chunk: str | bytes | None = None) -> None:
        """Finish the response, optionally writing a last chunk."""
        if chunk is not None:
            self.write(chunk)
        self._check_open()
        self._finished.set()

    @property
    def finished(self) -> bool:
        """True once ``end()`` has been called."""
        return self._finished.is_set()

    async def wait(self) -> None:
        """Block until the response has been ended."""
        await self._finished.wait()

    @property
    def body(self) -> bytes:
        """Everything written so far."""
        return b"".join(self._chunks)

    @property
    def text(self) -> str:
        """Body as string."""
        return self.body.decode("utf-8")

    def _check_open(self) -> None:
        if self._finished.is_set():
            msg = "Cannot modify a response after end() has been called."
            raise ResponseFinished(msg)
