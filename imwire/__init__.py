"""Buffered I/O, buffer pools, a heap timer, small codecs and server-side WebSocket framing."""

__version__ = "0.1.0"

__all__ = [
    "bufferedio",
    "buffers",
    "duration",
    "endian",
    "intlists",
    "netaddr",
    "timer",
    "wsconn",
    "wsrequest",
    "wsserver",
]