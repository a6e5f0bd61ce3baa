"""WebSocket frame reading and writing over buffered streams."""

from __future__ import annotations

import enum
import struct
from typing import Protocol, Tuple, Union

from imwire.bufferedio import Reader, Writer

__all__ = [
    "MessageType",
    "CloseMessageError",
    "MaxReadError",
    "FrameError",
    "Conn",
]

_FIN_BIT = 1 << 7
_RSV1_BIT = 1 << 6
_RSV2_BIT = 1 << 5
_RSV3_BIT = 1 << 4
_OP_BITS = 0x0F
_MASK_BIT = 1 << 7
_LEN_BITS = 0x7F
_CONTINUATION_MAX_READ = 100
_NO_STATUS_RECEIVED = 1005


class MessageType(enum.IntEnum):
    """Frame opcodes."""

    CONTINUATION = 0
    TEXT = 1
    BINARY = 2
    CLOSE = 8
    PING = 9
    PONG = 10


class CloseMessageError(Exception):
    """The peer sent a close control frame."""

    def __init__(self) -> None:
        super().__init__("close control message")


class MaxReadError(Exception):
    """Too many frames were read without completing a message."""

    def __init__(self) -> None:
        super().__init__("continuation frame max read")


class FrameError(ValueError):
    """A frame violates the protocol."""


class _Closer(Protocol):
    def close(self) -> object: ...


def _mask(key: bytes, data: bytes) -> bytes:
    n = len(data)
    if n == 0:
        return data
    stream = (key * (n // 4 + 1))[:n]
    return (int.from_bytes(data, "big") ^ int.from_bytes(stream, "big")).to_bytes(n, "big")


def _opcode(op: int) -> Union[MessageType, int]:
    try:
        return MessageType(op)
    except ValueError:
        return op


class Conn:
    """A WebSocket connection on top of a buffered reader and writer."""

    def __init__(self, rwc: _Closer, reader: Reader, writer: Writer) -> None:
        self._rwc = rwc
        self._reader = reader
        self._writer = writer

    def write_message(self, msg_type: int, msg: bytes) -> None:
        """Write a whole unmasked message as one final frame."""
        self.write_header(msg_type, len(msg))
        self.write_body(msg)

    def write_header(self, msg_type: int, length: int) -> None:
        """Write the frame header for a final frame of ``length`` payload bytes."""
        head = self._writer.peek(2)
        head[0] = (_FIN_BIT | int(msg_type)) & 0xFF
        if length <= 125:
            head[1] = length
        elif length < 65536:
            head[1] = 126
            struct.pack_into(">H", self._writer.peek(2), 0, length)
        else:
            head[1] = 127
            struct.pack_into(">Q", self._writer.peek(8), 0, length)

    def write_body(self, data: bytes) -> None:
        """Write payload bytes."""
        if data:
            self._writer.write(data)

    def peek(self, n: int) -> memoryview:
        """Reserve ``n`` bytes in the write buffer."""
        return self._writer.peek(n)

    def flush(self) -> None:
        """Flush the write buffer."""
        self._writer.flush()

    def read_message(self) -> Tuple[Union[MessageType, int], bytes]:
        """Read one data message, joining fragments and answering pings.

        Raises :class:`CloseMessageError` on a close frame, :class:`FrameError`
        on an unknown opcode and :class:`MaxReadError` after too many frames.
        """
        payload = bytearray()
        fin_op = 0
        count = 0
        while True:
            fin, op, part = self._read_frame()
            if op in (MessageType.BINARY, MessageType.TEXT, MessageType.CONTINUATION):
                if fin and not payload:
                    return _opcode(op), part
                payload += part
                if op != MessageType.CONTINUATION:
                    fin_op = op
                if fin:
                    return _opcode(fin_op), bytes(payload)
            elif op == MessageType.PING:
                self.write_message(MessageType.PONG, part)
            elif op == MessageType.PONG:
                pass
            elif op == MessageType.CLOSE:
                raise CloseMessageError()
            else:
                raise FrameError(f"unknown control message, fin={str(fin).lower()}, op={op}")
            if count > _CONTINUATION_MAX_READ:
                raise MaxReadError()
            count += 1

    def _read_frame(self) -> Tuple[bool, int, bytes]:
        first = self._reader.read_byte()
        fin = bool(first & _FIN_BIT)
        if first & (_RSV1_BIT | _RSV2_BIT | _RSV3_BIT):
            raise FrameError(
                f"unexpected reserved bits rsv1={first & _RSV1_BIT}, "
                f"rsv2={first & _RSV2_BIT}, rsv3={first & _RSV3_BIT}"
            )
        op = first & _OP_BITS
        second = self._reader.read_byte()
        masked = bool(second & _MASK_BIT)
        length = second & _LEN_BITS
        if length == 126:
            (length,) = struct.unpack(">H", self._reader.pop(2))
        elif length == 127:
            (length,) = struct.unpack(">Q", self._reader.pop(8))
        key = self._reader.pop(4) if masked else b""
        payload = b""
        if length > 0:
            payload = self._reader.pop(length)
            if masked:
                payload = _mask(key, payload)
        return fin, op, payload

    def close(self) -> None:
        """Close the underlying connection."""
        self._rwc.close()

    def format_close_message(self, code: int, reason: str) -> bytes:
        """Build a close frame payload: a big-endian status code and the reason."""
        if code == _NO_STATUS_RECEIVED:
            return b""
        return struct.pack(">H", code & 0xFFFF) + reason.encode("utf-8")