"""Tests for the countdown projection helpers."""
import pytest

from rotation.countdown import (
    EXPIRED_TEXT,
    format_remaining,
    is_expired,
    progress_percent,
    remaining_ms,
    remaining_seconds,
)

NOW = 1_700_000_000_000


def test_remaining_ms_counts_down():
    assert remaining_ms(NOW + 5000, NOW) == 5000
    assert remaining_ms(NOW + 5000, NOW + 4999) == 1


def test_remaining_never_negative():
    assert remaining_ms(NOW, NOW + 10_000) == 0
    assert remaining_seconds(NOW, NOW + 10_000) == 0


def test_no_deadline_is_expired():
    assert remaining_ms(0, NOW) == 0
    assert is_expired(0, NOW)


@pytest.mark.parametrize("left_ms,expected", [
    (30_000, 30),
    (29_500, 30),
    (29_499, 29),
    (1_400, 1),
    (500, 1),
    (499, 0),
])
def test_remaining_seconds_rounds_half_up(left_ms, expected):
    assert remaining_seconds(NOW + left_ms, NOW) == expected


def test_format_remaining_whole_seconds():
    assert format_remaining(NOW + 12_300, NOW) == "12"


def test_format_remaining_expired_text():
    """Past the deadline the display reads 0.0, never a negative value."""
    assert format_remaining(NOW, NOW) == EXPIRED_TEXT
    assert format_remaining(NOW - 5000, NOW) == "0.0"


def test_format_remaining_rounds_to_zero_before_expiry():
    assert format_remaining(NOW + 200, NOW) == "0"


def test_progress_percent_linear():
    start, end = NOW, NOW + 10_000
    assert progress_percent(start, end, start) == 0
    assert progress_percent(start, end, start + 2_500) == 25
    assert progress_percent(start, end, start + 9_999) == 99
    assert progress_percent(start, end, end) == 100


def test_progress_percent_clamped():
    start, end = NOW, NOW + 1000
    assert progress_percent(start, end, start - 500) == 0
    assert progress_percent(start, end, end + 60_000) == 100


def test_progress_percent_without_end():
    assert progress_percent(NOW, 0, NOW + 10_000) == 0


def test_progress_percent_empty_span():
    assert progress_percent(NOW, NOW, NOW) == 100
    assert progress_percent(NOW + 10, NOW, NOW) == 100
    assert progress_percent(NOW + 10, NOW + 5, NOW) == 0
