"""
Countdown Engine - pure projection of the deadline against a clock sample.

No side effects. Callers recompute on every clock tick.
"""
from __future__ import annotations

import math

EXPIRED_TEXT = "0.0"


def remaining_ms(deadline: int, now_ms: int) -> int:
    """Milliseconds left until ``deadline``, clamped to zero."""
    if deadline <= 0:
        return 0
    return max(deadline - now_ms, 0)


def remaining_seconds(deadline: int, now_ms: int) -> int:
    """Whole seconds left, rounded half up."""
    return int(math.floor(remaining_ms(deadline, now_ms) / 1000.0 + 0.5))


def is_expired(deadline: int, now_ms: int) -> bool:
    return remaining_ms(deadline, now_ms) == 0


def format_remaining(deadline: int, now_ms: int) -> str:
    """Display text for the countdown.

    Whole seconds while time remains, the literal "0.0" once expired.
    Never negative.
    """
    if is_expired(deadline, now_ms):
        return EXPIRED_TEXT
    return str(remaining_seconds(deadline, now_ms))


def progress_percent(start_ms: int, end_ms: int, now_ms: int) -> int:
    """Elapsed share of ``[start_ms, end_ms]`` as an integer percentage.

    Clamped to 0..100. No end (``end_ms <= 0``) counts as 0; an empty or
    inverted span is complete once ``end_ms`` has passed.
    """
    if end_ms <= 0:
        return 0
    span = end_ms - start_ms
    if span <= 0:
        return 100 if now_ms >= end_ms else 0
    percent = math.floor((now_ms - start_ms) / span * 100)
    return max(0, min(100, percent))
