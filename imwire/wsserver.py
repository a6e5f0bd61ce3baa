"""Server side of the WebSocket opening handshake."""

from __future__ import annotations

import base64
import hashlib

from imwire.bufferedio import Reader, Writer
from imwire.wsconn import Conn
from imwire.wsrequest import Request

__all__ = [
    "BadRequestMethodError",
    "NotWebSocketError",
    "BadWebSocketVersionError",
    "ChallengeResponseError",
    "upgrade",
    "compute_accept_key",
]

_KEY_GUID = b"258EAFA5-E914-47DA-95CA-C5AB0DC85B11"


class BadRequestMethodError(ValueError):
    """The handshake request is not a GET."""

    def __init__(self) -> None:
        super().__init__("bad method")


class NotWebSocketError(ValueError):
    """The request does not ask for a WebSocket upgrade."""

    def __init__(self) -> None:
        super().__init__("not websocket protocol")


class BadWebSocketVersionError(ValueError):
    """The requested protocol version is missing or unsupported."""

    def __init__(self) -> None:
        super().__init__("missing or bad WebSocket Version")


class ChallengeResponseError(ValueError):
    """The challenge key is missing."""

    def __init__(self) -> None:
        super().__init__("mismatch challenge/response")


def compute_accept_key(challenge_key: str) -> str:
    """Return the ``Sec-WebSocket-Accept`` value for a challenge key."""
    digest = hashlib.sha1(challenge_key.encode("latin-1") + _KEY_GUID).digest()
    return base64.b64encode(digest).decode("ascii")


def upgrade(rwc, reader: Reader, writer: Writer, req: Request) -> Conn:
    """Validate the handshake request, send the 101 response and return the connection."""
    header = req.header
    if req.method != "GET":
        raise BadRequestMethodError()
    if header.get("Sec-Websocket-Version", "") != "13":
        raise BadWebSocketVersionError()
    if header.get("Upgrade", "").lower() != "websocket":
        raise NotWebSocketError()
    if "upgrade" not in header.get("Connection", "").lower():
        raise NotWebSocketError()
    challenge_key = header.get("Sec-Websocket-Key", "")
    if not challenge_key:
        raise ChallengeResponseError()
    writer.write_string(
        "HTTP/1.1 101 Switching Protocols\r\nUpgrade: websocket\r\nConnection: Upgrade\r\n"
    )
    writer.write_string("Sec-WebSocket-Accept: " + compute_accept_key(challenge_key) + "\r\n\r\n")
    writer.flush()
    return Conn(rwc, reader, writer)