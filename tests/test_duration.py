from datetime import timedelta

import pytest

from imwire.duration import parse_duration


def test_duration_text():
    assert parse_duration(b"10s") == timedelta(seconds=10)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("10s", timedelta(seconds=10)),
        ("500ms", timedelta(milliseconds=500)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(minutes=90)),
        ("-2m", timedelta(minutes=-2)),
        ("+5s", timedelta(seconds=5)),
        ("0", timedelta(0)),
        ("1\u00b5s", timedelta(microseconds=1)),
        ("3us", timedelta(microseconds=3)),
        ("2000ns", timedelta(microseconds=2)),
        (".5s", timedelta(milliseconds=500)),
        ("1.s", timedelta(seconds=1)),
    ],
)
def test_valid_durations(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "-", "1", "1x", ".s", "s", "1.2.3s", "9999999999h"])
def test_invalid_durations(text):
    with pytest.raises(ValueError):
        parse_duration(text)