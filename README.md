# imwire

Building blocks for long-lived connection servers: buffered readers and
writers with peek/pop access, pooled byte buffers, a min-heap timer that runs
callbacks on a background thread, a few small codecs, and the server side of
the WebSocket handshake and framing.

## Installation

```
pip install imwire
```

To run the tests:

```
pip install "imwire[test]"
pytest
```

## Modules

### `imwire.bufferedio`

- `Reader(rd, size=4096)` buffers any object whose `read(n)` returns up to
  `n` bytes, `b""` at end of stream, or `None` when nothing is available yet.
  The buffer is at least 16 bytes.
  - `peek(n)` returns the next `n` bytes without consuming them; `pop(n)`
    returns and consumes them.
  - `read(size)` calls the underlying reader at most once and returns `b""`
    at end of stream; `read_byte()` returns an `int` and raises `EOFError` at
    end of stream.
  - `read_slice(delim)` reads through a delimiter byte; `read_line()` returns
    `(line, is_prefix)` without the `\n` or `\r\n` ending, with `is_prefix`
    true when the line did not fit in the buffer.
  - `discard(n)`, `buffered()` and `reset(rd, buf=None)`.
- `Writer(wr, size=4096)` buffers any object whose `write(data)` returns the
  number of bytes taken (`None` counts as all). `write`, `write_string`,
  `write_raw`, `flush`, `available`, `buffered`, `reset`, and `peek(n)`, which
  reserves `n` buffer bytes and returns them as a writable `memoryview`.
  A write error is sticky: every later write or flush raises it again until
  `reset` is called.
- `new_reader` / `new_writer` return the given object itself when it is
  already a `Reader` / `Writer` with a large enough buffer.
- Errors: `BufferFullError` (carries the consumed bytes in `data`),
  `NegativeCountError`, `NoProgressError` (after 100 empty reads),
  `ShortWriteError`.

### `imwire.buffers`

- `Pool(num, size)` hands out fixed-size `Buffer` objects (their `data` is a
  `memoryview`) with `get()` and takes them back with `put(buf)`. It is
  thread-safe and allocates another block of `num` buffers when empty.
- `ByteWriter(size)` is an append-only byte buffer: `write(data)`,
  `peek(n)`, `buffer()`, `reset()`, `size()` and `len()`. It doubles its
  capacity when it runs out of room.

### `imwire.timer`

`Timer(num=1024)` keeps `TimerData` entries in a min-heap; a daemon thread
removes each entry when it is due and calls its `fn`. `add(expire, fn)` takes
seconds or a `timedelta` and returns the entry; `set(entry, expire)`
reschedules it, `delete(entry)` removes it, `len(timer)` counts pending
entries and `close()` stops the thread (also usable as a context manager).
`TimerData.delay()` gives the seconds left and `expire_string()` the expiry as
`YYYY-MM-DD HH:MM:SS`.

### Small helpers

- `imwire.duration.parse_duration("1m30s")` returns a `timedelta`. Units are
  `ns`, `us`/`µs`, `ms`, `s`, `m` and `h`; bad input raises `ValueError`.
- `imwire.intlists`: `join_int32s([1, 2, 3], ",")` gives `"1,2,3"`;
  `split_int32s` / `split_int64s` parse it back, return `[]` for an empty
  string and raise `ValueError` on bad or out-of-range numbers.
- `imwire.endian`: big-endian signed `int8`, `int16`, `int32` and their
  `put_int8`, `put_int16`, `put_int32` forms, which write into a `bytearray`
  or `memoryview`.
- `imwire.netaddr.internal_ip()` returns the first non-loopback IPv4 address
  of an up interface whose name does not start with `lo`, or `""`.

### WebSocket

- `imwire.wsrequest.read_request(reader)` parses the request line and headers
  into a `Request` (`method`, `request_uri`, `proto`, `host`, and `header`, a
  case-insensitive multidict).
- `imwire.wsserver.upgrade(rwc, reader, writer, req)` checks the request
  (GET, version 13, `Upgrade: websocket`, `Connection` containing `upgrade`,
  a challenge key), writes the `101 Switching Protocols` response and returns
  a `Conn`. Failures raise `BadRequestMethodError`,
  `BadWebSocketVersionError`, `NotWebSocketError` or `ChallengeResponseError`.
  `compute_accept_key` gives the `Sec-WebSocket-Accept` value.
- `imwire.wsconn.Conn` writes whole messages with `write_message` (or
  `write_header` plus `write_body`) and `flush`, and reads them with
  `read_message()`, which returns `(opcode, payload)`, joins fragments,
  unmasks payloads and answers pings with pongs. A close frame raises
  `CloseMessageError`, bad frames `FrameError`, and more than about 100 frames
  without a complete message `MaxReadError`. `format_close_message(code,
  reason)` builds a close payload. Opcodes are in `MessageType`.

## Example

```python
import socket

from imwire.bufferedio import Reader, Writer
from imwire.wsconn import MessageType
from imwire.wsrequest import read_request
from imwire.wsserver import upgrade

server = socket.create_server(("127.0.0.1", 8080))
sock, _ = server.accept()
stream = sock.makefile("rwb", buffering=0)

reader = Reader(stream, 4096)
writer = Writer(stream, 4096)
req = read_request(reader)
conn = upgrade(stream, reader, writer, req)

conn.write_message(MessageType.BINARY, b"\x00\x01\x02")
conn.flush()
op, payload = conn.read_message()
conn.close()
```

A timer:

```python
from imwire.timer import Timer

with Timer(128) as timer:
    entry = timer.add(5.0, lambda: print("expired"))
    timer.set(entry, 10.0)
    timer.delete(entry)
```

## What it does not do

- There is no server program or command: accepting connections, threading
  and routing messages are left to the caller.
- Only the server side of WebSocket is covered. Frames are written unmasked
  and unfragmented, and extensions such as compression are not supported
  (frames with reserved bits set are rejected).