"""Buffered byte-stream reading and writing with peek, pop and line access.

A :class:`Reader` wraps any object with a ``read(n)`` method. That method
returns up to ``n`` bytes, ``b""`` at end of stream, or ``None`` when no data
is available yet. It may also raise, and the error is then reported by the
next operation on the buffered reader.

A :class:`Writer` wraps any object with a ``write(data)`` method that
returns the number of bytes it accepted. ``None`` counts as all of them.
Write errors are sticky: once one occurs, every later write or flush raises
it again until :meth:`Writer.reset` is called.
"""

from __future__ import annotations

from typing import Optional, Protocol, Tuple, Union

DEFAULT_BUF_SIZE = 4096
MIN_READ_BUFFER_SIZE = 16
MAX_CONSECUTIVE_EMPTY_READS = 100

__all__ = [
    "BufferFullError",
    "NegativeCountError",
    "NoProgressError",
    "ShortWriteError",
    "Reader",
    "Writer",
    "new_reader",
    "new_writer",
]


class RawReader(Protocol):
    def read(self, n: int) -> Optional[bytes]: ...


class RawWriter(Protocol):
    def write(self, data: bytes) -> Optional[int]: ...


class BufferFullError(Exception):
    """The requested amount does not fit in the buffer.

    ``data`` holds whatever the operation consumed before giving up.
    """

    def __init__(self, data: bytes = b"") -> None:
        super().__init__("bufio: buffer full")
        self.data = data


class NegativeCountError(ValueError):
    """A negative byte count was requested."""

    def __init__(self) -> None:
        super().__init__("bufio: negative count")


class NoProgressError(OSError):
    """The underlying reader kept returning neither data nor an error."""


class ShortWriteError(OSError):
    """The underlying writer accepted fewer bytes than it was given."""


def _as_bytearray(buf: Union[bytes, bytearray]) -> bytearray:
    return buf if isinstance(buf, bytearray) else bytearray(buf)


class Reader:
    """Buffered reader over a raw byte source."""

    def __init__(self, rd: RawReader, size: int = DEFAULT_BUF_SIZE) -> None:
        self._reset(bytearray(max(size, MIN_READ_BUFFER_SIZE)), rd)

    def _reset(self, buf: bytearray, rd: RawReader) -> None:
        self._buf = buf
        self._rd = rd
        self._r = 0
        self._w = 0
        self._err: Optional[BaseException] = None

    def reset(self, rd: RawReader, buf: Optional[Union[bytes, bytearray]] = None) -> None:
        """Drop buffered data and state and read from ``rd``, optionally into ``buf``."""
        self._reset(self._buf if buf is None else _as_bytearray(buf), rd)

    def _pull(self, n: int) -> Tuple[bytes, Optional[BaseException]]:
        try:
            data = self._rd.read(n)
        except Exception as exc:  # reported later, like any read error
            return b"", exc
        if data is None:
            return b"", None
        if len(data) > n:
            raise ValueError("bufio: reader returned invalid count from read")
        if not data:
            return b"", EOFError("EOF")
        return bytes(data), None

    def _fill(self) -> None:
        if self._r > 0:
            pending = self._w - self._r
            self._buf[:pending] = self._buf[self._r:self._w]
            self._w = pending
            self._r = 0
        if self._w >= len(self._buf):
            raise RuntimeError("bufio: tried to fill full buffer")
        for _ in range(MAX_CONSECUTIVE_EMPTY_READS):
            data, err = self._pull(len(self._buf) - self._w)
            self._buf[self._w:self._w + len(data)] = data
            self._w += len(data)
            if err is not None:
                self._err = err
                return
            if data:
                return
        self._err = NoProgressError("multiple read calls return no data or error")

    def _take_err(self) -> Optional[BaseException]:
        err, self._err = self._err, None
        return err

    def _surface(self) -> bytes:
        err = self._take_err()
        if err is None or isinstance(err, EOFError):
            return b""
        raise err

    def peek(self, n: int) -> bytes:
        """Return the next ``n`` bytes without consuming them."""
        if n < 0:
            raise NegativeCountError()
        if n > len(self._buf):
            raise BufferFullError()
        while self._w - self._r < n and self._err is None:
            self._fill()
        if self._w - self._r < n:
            err = self._take_err()
            if err is None:
                raise BufferFullError(bytes(self._buf[self._r:self._w]))
            raise err
        return bytes(self._buf[self._r:self._r + n])

    def pop(self, n: int) -> bytes:
        """Return the next ``n`` bytes and consume them."""
        data = self.peek(n)
        self._r += n
        return data

    def discard(self, n: int) -> int:
        """Skip ``n`` bytes; return how many were skipped (fewer only at end of stream)."""
        if n < 0:
            raise NegativeCountError()
        if n == 0:
            return 0
        remain = n
        while True:
            skip = self.buffered()
            if skip == 0:
                self._fill()
                skip = self.buffered()
            skip = min(skip, remain)
            self._r += skip
            remain -= skip
            if remain == 0:
                return n
            if self._err is not None:
                err = self._take_err()
                if isinstance(err, EOFError):
                    return n - remain
                raise err

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, calling the raw reader at most once.

        Returns ``b""`` at end of stream.
        """
        if size < 0:
            raise NegativeCountError()
        if size == 0:
            return self._surface()
        if self._r == self._w:
            if self._err is not None:
                return self._surface()
            if size >= len(self._buf):
                data, self._err = self._pull(size)
                if self._err is not None:
                    return self._surface()
                return data
            self._fill()
            if self._r == self._w:
                return self._surface()
        n = min(size, self._w - self._r)
        data = bytes(self._buf[self._r:self._r + n])
        self._r += n
        return data

    def read_byte(self) -> int:
        """Read one byte; raise ``EOFError`` at end of stream."""
        while self._r == self._w:
            if self._err is not None:
                raise self._take_err()
            self._fill()
        c = self._buf[self._r]
        self._r += 1
        return c

    def read_slice(self, delim: Union[int, bytes]) -> bytes:
        """Read through the first ``delim`` byte.

        If the stream ends first, the remaining bytes are returned without the
        delimiter, and ``EOFError`` is raised once nothing is left. If the
        buffer fills without a delimiter, ``BufferFullError`` is raised with
        the buffered bytes in its ``data``.
        """
        if isinstance(delim, (bytes, bytearray)):
            if len(delim) != 1:
                raise ValueError("delimiter must be a single byte")
            delim = delim[0]
        while True:
            i = self._buf.find(delim, self._r, self._w)
            if i >= 0:
                line = bytes(self._buf[self._r:i + 1])
                self._r = i + 1
                return line
            if self._err is not None:
                line = bytes(self._buf[self._r:self._w])
                self._r = self._w
                if line:
                    return line
                raise self._take_err()
            if self.buffered() >= len(self._buf):
                self._r = self._w
                raise BufferFullError(bytes(self._buf))
            self._fill()

    def read_line(self) -> Tuple[bytes, bool]:
        """Return ``(line, is_prefix)`` without the line ending.

        ``is_prefix`` is true when the line was longer than the buffer and
        the rest follows in later calls. Raises ``EOFError`` at end of stream.
        """
        try:
            line = self.read_slice(b"\n")
        except BufferFullError as exc:
            line = exc.data
            if line.endswith(b"\r"):
                # Leave the '\r' for the next call so "\r\n" across the boundary is seen.
                if self._r == 0:
                    raise RuntimeError("bufio: tried to rewind past start of buffer") from None
                self._r -= 1
                line = line[:-1]
            return line, True
        if line.endswith(b"\r\n"):
            line = line[:-2]
        elif line.endswith(b"\n"):
            line = line[:-1]
        return line, False

    def buffered(self) -> int:
        """Number of bytes readable from the buffer without calling the raw reader."""
        return self._w - self._r


class Writer:
    """Buffered writer over a raw byte sink."""

    def __init__(self, wr: RawWriter, size: int = DEFAULT_BUF_SIZE) -> None:
        if size <= 0:
            size = DEFAULT_BUF_SIZE
        self._buf = bytearray(size)
        self._n = 0
        self._wr = wr
        self._err: Optional[BaseException] = None

    def reset(self, wr: RawWriter, buf: Optional[Union[bytes, bytearray]] = None) -> None:
        """Drop unflushed data and any error and write to ``wr``, optionally with ``buf``."""
        if buf is not None:
            self._buf = _as_bytearray(buf)
        self._err = None
        self._n = 0
        self._wr = wr

    def _emit(self, data: bytes) -> Tuple[int, Optional[BaseException]]:
        try:
            n = self._wr.write(data)
        except Exception as exc:
            return 0, exc
        return (len(data) if n is None else n), None

    def _flush(self) -> Optional[BaseException]:
        if self._err is not None:
            return self._err
        if self._n == 0:
            return None
        n, err = self._emit(bytes(self._buf[:self._n]))
        n = min(n, self._n)
        if n < self._n and err is None:
            err = ShortWriteError("short write")
        if err is not None:
            if 0 < n < self._n:
                rest = self._n - n
                self._buf[:rest] = self._buf[n:self._n]
            self._n -= n
            self._err = err
            return err
        self._n = 0
        return None

    def flush(self) -> None:
        """Write all buffered data to the raw writer."""
        err = self._flush()
        if err is not None:
            raise err

    def available(self) -> int:
        """Number of unused bytes in the buffer."""
        return len(self._buf) - self._n

    def buffered(self) -> int:
        """Number of bytes written into the buffer and not yet flushed."""
        return self._n

    def write(self, data: bytes) -> int:
        """Write ``data`` through the buffer; return the number of bytes taken."""
        p = memoryview(data)
        total = 0
        while len(p) > self.available() and self._err is None:
            if self._n == 0:
                # Large write into an empty buffer: skip the copy.
                n, self._err = self._emit(bytes(p))
            else:
                n = self.available()
                self._buf[self._n:self._n + n] = p[:n]
                self._n += n
                self._flush()
            total += n
            p = p[n:]
        if self._err is not None:
            raise self._err
        n = len(p)
        self._buf[self._n:self._n + n] = p
        self._n += n
        return total + n

    def write_raw(self, data: bytes) -> int:
        """Write ``data`` straight to the raw writer when nothing is buffered."""
        if self._err is not None:
            raise self._err
        if self._n == 0:
            n, self._err = self._emit(bytes(data))
            if self._err is not None:
                raise self._err
            return n
        return self.write(data)

    def peek(self, n: int) -> memoryview:
        """Reserve the next ``n`` buffer bytes and return them as a writable view."""
        if n < 0:
            raise NegativeCountError()
        if n > len(self._buf):
            raise BufferFullError()
        while self.available() < n and self._err is None:
            self._flush()
        if self._err is not None:
            raise self._err
        view = memoryview(self._buf)[self._n:self._n + n]
        self._n += n
        return view

    def write_string(self, s: str) -> int:
        """Write ``s`` encoded as UTF-8; return the number of bytes taken."""
        p = memoryview(s.encode("utf-8"))
        total = 0
        while len(p) > self.available() and self._err is None:
            n = self.available()
            self._buf[self._n:self._n + n] = p[:n]
            self._n += n
            total += n
            p = p[n:]
            self._flush()
        if self._err is not None:
            raise self._err
        n = len(p)
        self._buf[self._n:self._n + n] = p
        self._n += n
        return total + n


def new_reader(rd: RawReader, size: int = DEFAULT_BUF_SIZE) -> Reader:
    """Return a Reader over ``rd``, or ``rd`` itself if it is a large enough Reader."""
    if isinstance(rd, Reader) and len(rd._buf) >= size:
        return rd
    return Reader(rd, size)


def new_writer(wr: RawWriter, size: int = DEFAULT_BUF_SIZE) -> Writer:
    """Return a Writer over ``wr``, or ``wr`` itself if it is a large enough Writer."""
    if isinstance(wr, Writer) and len(wr._buf) >= size:
        return wr
    return Writer(wr, size)