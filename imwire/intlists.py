"""Joining and splitting lists of fixed-width integers as delimited text."""

from __future__ import annotations

import re
from typing import Iterable, List

__all__ = ["join_int32s", "split_int32s", "join_int64s", "split_int64s"]

_DECIMAL = re.compile(r"[+-]?[0-9]+")


def _join(values: Iterable[int], sep: str) -> str:
    items = list(values)
    if not items:
        return ""
    if len(items) == 1:
        return str(items[0])
    # Only one trailing character is dropped, whatever the separator length.
    return "".join(f"{value}{sep}" for value in items)[:-1]


def _split(text: str, sep: str, bits: int) -> List[int]:
    if text == "":
        return []
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    parts = list(text) if sep == "" else text.split(sep)
    result = []
    for part in parts:
        if not _DECIMAL.fullmatch(part):
            raise ValueError(f"parsing {part!r}: invalid syntax")
        value = int(part)
        if not low <= value <= high:
            raise ValueError(f"parsing {part!r}: value out of range")
        result.append(value)
    return result


def join_int32s(values: Iterable[int], sep: str) -> str:
    """Format integers as ``n1<sep>n2<sep>n3``."""
    return _join(values, sep)


def split_int32s(text: str, sep: str) -> List[int]:
    """Parse ``sep``-separated decimal 32-bit integers."""
    return _split(text, sep, 32)


def join_int64s(values: Iterable[int], sep: str) -> str:
    """Format integers as ``n1<sep>n2<sep>n3``."""
    return _join(values, sep)


def split_int64s(text: str, sep: str) -> List[int]:
    """Parse ``sep``-separated decimal 64-bit integers."""
    return _split(text, sep, 64)