"""Big-endian signed integer packing into byte buffers."""

from __future__ import annotations

from typing import Union

__all__ = ["int8", "put_int8", "int16", "put_int16", "int32", "put_int32"]

_Readable = Union[bytes, bytearray, memoryview]
_Writable = Union[bytearray, memoryview]


def _check(buf: _Readable, width: int) -> None:
    if len(buf) < width:
        raise IndexError(f"buffer needs {width} bytes, has {len(buf)}")


def _get(buf: _Readable, width: int) -> int:
    _check(buf, width)
    return int.from_bytes(bytes(buf[:width]), "big", signed=True)


def _put(buf: _Writable, value: int, width: int) -> None:
    _check(buf, width)
    buf[:width] = (value & ((1 << (8 * width)) - 1)).to_bytes(width, "big")


def int8(buf: _Readable) -> int:
    """Signed 8-bit value from the first byte."""
    return _get(buf, 1)


def put_int8(buf: _Writable, value: int) -> None:
    """Store ``value`` as one byte."""
    _put(buf, value, 1)


def int16(buf: _Readable) -> int:
    """Signed big-endian 16-bit value from the first two bytes."""
    return _get(buf, 2)


def put_int16(buf: _Writable, value: int) -> None:
    """Store ``value`` as two big-endian bytes."""
    _put(buf, value, 2)


def int32(buf: _Readable) -> int:
    """Signed big-endian 32-bit value from the first four bytes."""
    return _get(buf, 4)


def put_int32(buf: _Writable, value: int) -> None:
    """Store ``value`` as four big-endian bytes."""
    _put(buf, value, 4)