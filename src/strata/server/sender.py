"""Write a finished Response out as ASGI ``http.response.*`` messages.

Responses are fully buffered by the time they get here, so every
response is exactly one start message and one body message.
"""

import logging

from strata._internal.asgi import Send
from strata.http.response import Response

logger = logging.getLogger("strata.server")

# Informational, No Content and Not Modified never carry a body
_NO_BODY = frozenset({204, 304})


def _may_have_body(status: int) -> bool:
    return status >= 200 and status not in _NO_BODY


def _encode_headers(response: Response, content_length: int) -> list[tuple[bytes, bytes]]:
    pairs = [("content-type", response.content_type), *response.headers]
    encoded = [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs]
    encoded.append((b"content-length", str(content_length).encode("latin-1")))
    return encoded


async def send_response(response: Response, send: Send) -> None:
    """Send *response* through the ASGI ``send`` callable."""
    body = response.body
    if body and not _may_have_body(response.status):
        logger.debug("Dropping %d body bytes for status %d", len(body), response.status)
        body = b""

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": _encode_headers(response, len(body)),
        }
    )
    await send({"type": "http.response.body", "body": body})
