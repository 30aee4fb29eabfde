"""Response sending — a perch Response as ASGI ``http.response.*`` messages."""

from perch._internal.asgi import Send
from perch.http.response import Response

# Statuses that never carry a message body
_NO_BODY = frozenset({204, 304})


def encode_headers(response: Response, body_length: int) -> list[tuple[bytes, bytes]]:
    """Lower-cased latin-1 header pairs, with content type and length first."""
    headers = [
        (b"content-type", response.content_type.encode("latin-1")),
        (b"content-length", str(body_length).encode("latin-1")),
    ]
    headers.extend((name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in response.headers)
    return headers


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Send *response* in one start message and one body message.

    HEAD requests and bodiless statuses get the headers only.
    """
    body = response.body_bytes
    if response.status in _NO_BODY or response.status < 200:
        body = b""

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(response, len(body)),
        }
    )
    await send({"type": "http.response.body", "body": b"" if method == "HEAD" else body})
