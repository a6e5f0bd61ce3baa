"""Parsing of duration strings such as ``1s``, ``500ms`` or ``1h30m``."""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Union

__all__ = ["parse_duration"]

_UNITS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_MAX_NANOS = (1 << 63) - 1
_NUMBER = re.compile(r"([0-9]*)(?:\.([0-9]*))?")
_UNIT = re.compile(r"[^0-9.]*")


def parse_duration(text: Union[str, bytes]) -> timedelta:
    """Parse a signed sequence of decimal numbers with units.

    Valid units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``.
    The result is truncated to microseconds. Raises ``ValueError`` on bad input
    or when the total exceeds the range of a signed 64-bit nanosecond count.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8")
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError(f"time: invalid duration {text!r}")
    total = 0
    pos = 0
    while pos < len(s):
        number = _NUMBER.match(s, pos)
        whole, frac = number.group(1), number.group(2)
        if not whole and not frac:
            raise ValueError(f"time: invalid duration {text!r}")
        pos = number.end()
        unit = _UNIT.match(s, pos).group()
        pos += len(unit)
        if not unit:
            raise ValueError(f"time: missing unit in duration {text!r}")
        if unit not in _UNITS:
            raise ValueError(f"time: unknown unit {unit!r} in duration {text!r}")
        scale = _UNITS[unit]
        value = int(whole or "0") * scale
        if frac:
            value += int(frac) * scale // 10 ** len(frac)
        total += value
        if total > _MAX_NANOS:
            raise ValueError(f"time: invalid duration {text!r}")
    micros = total // 1000
    return timedelta(microseconds=-micros if negative else micros)