"""The request as handlers see it.

A ``Request`` never changes once built. Mounting produces a copy whose
``path`` is relative to the mount point and whose ``root_path`` has
grown by it; the parent app keeps matching against its own copy.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import Any

from strata._internal.asgi import Receive, Scope
from strata.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An incoming HTTP request.

    ``path`` is what layers match against. ``full_path`` is the path the
    client asked for, mount prefixes included. The query string stays
    raw bytes; nothing in strata parses it.

    The body is read lazily from the ASGI receive channel, at most once.
    Mounted copies share the read, so a sub-app can ``await
    request.body()`` after the parent did.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None
    root_path: str = ""

    _receive: Receive | None = field(default=None, repr=False, compare=False)
    # Holds the body once read; the same dict object travels into mounted copies
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def full_path(self) -> str:
        """``root_path`` joined with ``path``."""
        if self.path == "/" and self.root_path:
            return self.root_path
        return self.root_path + self.path

    @property
    def url(self) -> str:
        """``full_path`` plus ``?query`` when there is one."""
        if not self.query_string:
            return self.full_path
        return f"{self.full_path}?{self.query_string.decode('latin-1')}"

    def mounted(self, mount_path: str, remainder: str) -> Request:
        """The copy an app mounted at *mount_path* receives.

        Root mounts see the request unchanged.
        """
        if mount_path == "/":
            return self
        return replace(self, path=remainder, root_path=self.root_path + mount_path)

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield body chunks as ``http.request`` messages arrive."""
        if self._receive is None:
            return
        more = True
        while more:
            message = await self._receive()
            if chunk := message.get("body", b""):
                yield chunk
            more = message.get("more_body", False)

    async def body(self) -> bytes:
        """The whole body. Reads the receive channel on first call only."""
        try:
            return self._cache["body"]
        except KeyError:
            data = b"".join([chunk async for chunk in self.stream()])
            self._cache["body"] = data
            return data

    async def text(self) -> str:
        """The body decoded as UTF-8."""
        return (await self.body()).decode("utf-8")

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive | None = None) -> Request:
        """Build a request from an ASGI ``http`` scope.

        Missing keys fall back to a ``GET /`` over HTTP/1.1.
        """
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope.get("method", "GET"),
            path=scope.get("path") or "/",
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            server=(server[0], server[1]) if server else None,
            client=(client[0], client[1]) if client else None,
            root_path=scope.get("root_path", ""),
            _receive=receive,
        )
