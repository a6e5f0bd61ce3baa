import re
import threading
import time
from datetime import datetime, timedelta

import pytest

from imwire.timer import Timer


@pytest.fixture
def timer():
    t = Timer(100)
    yield t
    t.close()


def _wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_add_and_delete_many(timer):
    tds = [timer.add(i + 300, None) for i in range(100)]
    assert len(timer) == 100
    for td in tds:
        timer.delete(td)
    assert len(timer) == 0
    tds = [timer.add(i + 300, None) for i in range(100)]
    assert len(timer) == 100
    for td in tds:
        timer.delete(td)
    assert len(timer) == 0


def test_expired_entry_is_removed(timer):
    td = timer.add(0.05, None)
    assert len(timer) == 1
    assert td.delay() <= 0.05
    _wait_for(lambda: len(timer) == 0)
    assert len(timer) == 0


def test_callbacks_fire_in_expiry_order(timer):
    fired = []
    done = threading.Event()

    def make(name, last=False):
        def fn():
            fired.append(name)
            if last:
                done.set()
        return fn

    timer.add(0.30, make("c", last=True))
    timer.add(0.10, make("a"))
    timer.add(0.20, make("b"))
    assert len(timer) == 3
    done.wait(3)
    assert fired == ["a", "b", "c"]
    assert len(timer) == 0


def test_set_postpones(timer):
    fired = threading.Event()
    td = timer.add(0.05, fired.set)
    timer.set(td, 60)
    time.sleep(0.2)
    assert not fired.is_set()
    assert len(timer) == 1
    assert td.delay() > 50


def test_delete_prevents_callback_and_is_idempotent(timer):
    fired = threading.Event()
    td = timer.add(0.05, fired.set)
    timer.delete(td)
    timer.delete(td)
    time.sleep(0.2)
    assert not fired.is_set()
    assert len(timer) == 0


def test_delay_and_timedelta(timer):
    td = timer.add(timedelta(minutes=5), None)
    assert 299 < td.delay() <= 300


def test_expire_string_format(timer):
    td = timer.add(60, None)
    text = td.expire_string()
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", text)
    parsed = datetime.strptime(text, "%Y-%m-%d %H:%M:%S")
    assert abs((parsed - datetime.now()).total_seconds() - 60) < 3


def test_failing_callback_does_not_stop_timer(timer):
    fired = threading.Event()

    def boom():
        raise RuntimeError("boom")

    timer.add(0.02, boom)
    timer.add(0.1, fired.set)
    assert fired.wait(3)


def test_invalid_capacity():
    with pytest.raises(ValueError):
        Timer(0)


def test_close_stops_firing():
    t = Timer(4)
    fired = threading.Event()
    t.add(0.1, fired.set)
    t.close()
    time.sleep(0.2)
    assert not fired.is_set()