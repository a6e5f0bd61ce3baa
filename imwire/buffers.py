"""Reusable byte buffers: a fixed-size buffer pool and a growable byte writer."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List, Union

__all__ = ["Buffer", "Pool", "ByteWriter"]


@dataclass(eq=False)
class Buffer:
    """A fixed-size slice of memory handed out by a :class:`Pool`."""

    data: memoryview


class Pool:
    """Thread-safe pool of equally sized buffers.

    Buffers are carved out of one block of ``num * size`` bytes. When the pool
    runs dry another block of the same shape is allocated.
    """

    def __init__(self, num: int, size: int) -> None:
        if num < 1:
            raise ValueError("pool needs at least one buffer per block")
        if size < 0:
            raise ValueError("buffer size must not be negative")
        self._num = num
        self._size = size
        self._lock = threading.Lock()
        self._free: List[Buffer] = []
        self._grow()

    def _grow(self) -> None:
        block = memoryview(bytearray(self._num * self._size))
        size = self._size
        # Stored in reverse so the first buffer of the block is handed out first.
        self._free.extend(
            Buffer(block[i * size:(i + 1) * size]) for i in reversed(range(self._num))
        )

    def get(self) -> Buffer:
        """Take a free buffer, allocating a new block if none is left."""
        with self._lock:
            if not self._free:
                self._grow()
            return self._free.pop()

    def put(self, buf: Buffer) -> None:
        """Return a buffer to the pool; it is the next one handed out."""
        with self._lock:
            self._free.append(buf)


class ByteWriter:
    """Append-only byte buffer that doubles its capacity as needed."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("size must not be negative")
        self._buf = bytearray(size)
        self._n = 0

    def __len__(self) -> int:
        return self._n

    def size(self) -> int:
        """Current capacity in bytes."""
        return len(self._buf)

    def reset(self) -> None:
        """Discard the written bytes, keeping the capacity."""
        self._n = 0

    def buffer(self) -> bytes:
        """The bytes written so far."""
        return bytes(self._buf[:self._n])

    def _grow(self, n: int) -> None:
        if self._n + n < len(self._buf):
            return
        buf = bytearray(2 * len(self._buf) + n)
        buf[:self._n] = self._buf[:self._n]
        self._buf = buf

    def peek(self, n: int) -> memoryview:
        """Reserve ``n`` bytes at the end and return them as a writable view."""
        if n < 0:
            raise ValueError("negative count")
        self._grow(n)
        view = memoryview(self._buf)[self._n:self._n + n]
        self._n += n
        return view

    def write(self, data: Union[bytes, bytearray, memoryview]) -> None:
        """Append ``data``."""
        n = len(data)
        self._grow(n)
        self._buf[self._n:self._n + n] = data
        self._n += n