"""A min-heap timer that runs callbacks on a background thread when they expire."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Union

__all__ = ["TimerData", "Timer"]

logger = logging.getLogger(__name__)

TIMER_FORMAT = "%Y-%m-%d %H:%M:%S"

Delay = Union[int, float, timedelta]


def _seconds(expire: Delay) -> float:
    return expire.total_seconds() if isinstance(expire, timedelta) else float(expire)


@dataclass(eq=False)
class TimerData:
    """One scheduled entry of a :class:`Timer`."""

    key: str = ""
    fn: Optional[Callable[[], object]] = field(default=None, repr=False)
    _deadline: float = field(default=0.0, init=False, repr=False)
    _expire: datetime = field(default_factory=datetime.now, init=False, repr=False)
    _index: int = field(default=-1, init=False, repr=False)

    def _schedule(self, seconds: float) -> None:
        self._deadline = time.monotonic() + seconds
        self._expire = datetime.now() + timedelta(seconds=seconds)

    @property
    def expire(self) -> datetime:
        """Wall-clock time at which the entry expires."""
        return self._expire

    def delay(self) -> float:
        """Seconds until expiry; zero or negative once due."""
        return self._deadline - time.monotonic()

    def expire_string(self) -> str:
        """Expiry time formatted as ``YYYY-MM-DD HH:MM:SS``."""
        return self._expire.strftime(TIMER_FORMAT)


class Timer:
    """Schedules callbacks; expired entries are removed and their ``fn`` called.

    ``num`` is the expected number of concurrent entries.
    """

    def __init__(self, num: int = 1024) -> None:
        if num < 1:
            raise ValueError("timer capacity must be positive")
        self._heap: List[TimerData] = []
        self._cond = threading.Condition()
        self._closed = False
        self._thread = threading.Thread(target=self._run, name="timer", daemon=True)
        self._thread.start()

    def __len__(self) -> int:
        with self._cond:
            return len(self._heap)

    def __enter__(self) -> "Timer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add(self, expire: Delay, fn: Optional[Callable[[], object]]) -> TimerData:
        """Schedule ``fn`` to run after ``expire`` seconds (or a timedelta)."""
        td = TimerData(fn=fn)
        td._schedule(_seconds(expire))
        with self._cond:
            self._add(td)
        return td

    def delete(self, td: TimerData) -> None:
        """Remove ``td`` if still scheduled and clear its callback."""
        with self._cond:
            self._del(td)
            td.fn = None
            self._cond.notify_all()

    def set(self, td: TimerData, expire: Delay) -> None:
        """Reschedule ``td`` to expire ``expire`` from now."""
        with self._cond:
            self._del(td)
            td._schedule(_seconds(expire))
            self._add(td)

    def close(self) -> None:
        """Stop the background thread; pending entries never fire."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()
        if threading.current_thread() is not self._thread:
            self._thread.join()

    def _add(self, td: TimerData) -> None:
        td._index = len(self._heap)
        self._heap.append(td)
        self._up(td._index)
        if td._index == 0:
            self._cond.notify_all()
        logger.debug("timer: push item key: %s, expire: %s, index: %d",
                     td.key, td.expire_string(), td._index)

    def _del(self, td: TimerData) -> None:
        i = td._index
        last = len(self._heap) - 1
        if i < 0 or i > last or self._heap[i] is not td:
            logger.debug("timer: item already removed, index: %d, last: %d", i, last)
            return
        if i != last:
            self._swap(i, last)
            self._down(i, last)
            self._up(i)
        self._heap.pop()._index = -1
        logger.debug("timer: remove item key: %s, expire: %s", td.key, td.expire_string())

    def _next_due(self) -> Optional[TimerData]:
        while not self._closed:
            if not self._heap:
                self._cond.wait()
                continue
            td = self._heap[0]
            wait = td.delay()
            if wait <= 0:
                return td
            self._cond.wait(wait)
        return None

    def _run(self) -> None:
        while True:
            with self._cond:
                td = self._next_due()
                if td is None:
                    return
                fn = td.fn
                self._del(td)
            if fn is None:
                logger.warning("expire timer no fn")
                continue
            logger.debug("timer key: %s, expire: %s expired, call fn", td.key, td.expire_string())
            try:
                fn()
            except Exception:
                logger.exception("timer callback for key %r failed", td.key)

    def _less(self, i: int, j: int) -> bool:
        return self._heap[i]._deadline < self._heap[j]._deadline

    def _swap(self, i: int, j: int) -> None:
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]
        heap[i]._index = i
        heap[j]._index = j

    def _up(self, j: int) -> None:
        while j > 0:
            parent = (j - 1) // 2
            if not self._less(j, parent):
                break
            self._swap(parent, j)
            j = parent

    def _down(self, i: int, n: int) -> None:
        while True:
            left = 2 * i + 1
            if left >= n:
                break
            child = left
            right = left + 1
            if right < n and not self._less(left, right):
                child = right
            if not self._less(child, i):
                break
            self._swap(i, child)
            i = child