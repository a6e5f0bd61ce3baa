"""Parsing of the HTTP request that opens a WebSocket handshake."""

from __future__ import annotations

from dataclasses import dataclass, field

from multidict import CIMultiDict

from imwire.bufferedio import Reader

__all__ = ["Request", "read_request"]

_BLANKS = b" \t"


@dataclass
class Request:
    """Request line and headers of an incoming HTTP request."""

    method: str = ""
    request_uri: str = ""
    proto: str = ""
    host: str = ""
    header: CIMultiDict = field(default_factory=CIMultiDict)


def _read_line(reader: Reader) -> bytes:
    parts = []
    while True:
        chunk, more = reader.read_line()
        parts.append(chunk)
        if not more:
            return b"".join(parts)


def _parse_request_line(line: str) -> tuple[str, str, str]:
    first = line.find(" ")
    second = line.find(" ", first + 1)
    if first < 0 or second < 0:
        raise ValueError(f"malformed HTTP request {line}")
    return line[:first], line[first + 1:second], line[second + 1:]


def _read_header(reader: Reader) -> CIMultiDict:
    header: CIMultiDict = CIMultiDict()
    while True:
        line = _read_line(reader).strip(_BLANKS)
        if not line:
            return header
        colon = line.find(b":")
        if colon <= 0:
            raise ValueError("malformed MIME header line: " + line.decode("latin-1"))
        key = line[:colon].decode("latin-1")
        value = line[colon + 1:].lstrip(_BLANKS).decode("latin-1")
        header.add(key, value)


def read_request(reader: Reader) -> Request:
    """Read and parse a request line and its headers from ``reader``.

    Raises ``ValueError`` on a malformed request and ``EOFError`` when the
    stream ends before the request is complete.
    """
    method, uri, proto = _parse_request_line(_read_line(reader).decode("latin-1"))
    header = _read_header(reader)
    return Request(
        method=method,
        request_uri=uri,
        proto=proto,
        host=header.get("Host", ""),
        header=header,
    )