from datetime import timedelta

import pytest

from bookshelf.utils.durations import parse_duration


@pytest.mark.parametrize(
    "text, expected",
    [
        ("5s", timedelta(seconds=5)),
        ("1m30s", timedelta(seconds=90)),
        ("250ms", timedelta(milliseconds=250)),
        ("1.5h", timedelta(hours=1, minutes=30)),
        ("0s", timedelta(0)),
        ("10", timedelta(seconds=10)),
        (" 2m ", timedelta(minutes=2)),
    ],
)
def test_parse_duration(text: str, expected: timedelta):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "5x", "s", "-5", "5s garbage", "1m-2s"])
def test_parse_duration_rejects_invalid(text: str):
    with pytest.raises(ValueError):
        parse_duration(text)
