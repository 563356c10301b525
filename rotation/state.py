"""
Rotation state value and list helpers.

RotationState is immutable: every transition returns a new instance, so the
controller can swap it in one assignment and no handler ever observes a
half-updated (index, deadline) pair.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Tuple


INACTIVE = -1
"""Sentinel index meaning no rotation is active."""


def filter_blank_entries(entries: Iterable[str]) -> Tuple[str, ...]:
    """Drop entries that are empty or whitespace-only, keeping order.

    Raises:
        ValueError: If an entry is not a string.
    """
    kept = []
    for entry in entries:
        if not isinstance(entry, str):
            raise ValueError(f"Rotation entries must be strings, got {type(entry).__name__}")
        if entry.strip():
            kept.append(entry)
    return tuple(kept)


@dataclass(frozen=True)
class RotationState:
    """Authoritative rotation state.

    Invariant: ``deadline == 0`` exactly when ``current_index == INACTIVE``.
    """
    current_index: int = INACTIVE
    interval_ms: int = 0
    deadline: int = 0

    @property
    def is_active(self) -> bool:
        return self.current_index != INACTIVE

    @classmethod
    def inactive(cls, interval_ms: int = 0) -> "RotationState":
        return cls(INACTIVE, interval_ms, 0)

    @classmethod
    def activate(cls, interval_ms: int, now_ms: int) -> "RotationState":
        """Active state at index 0 with a fresh deadline."""
        if interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {interval_ms}")
        return cls(0, interval_ms, now_ms + interval_ms)

    def select(self, index: int, now_ms: int) -> "RotationState":
        """Move to ``index`` and push the deadline out by one interval."""
        return replace(self, current_index=index, deadline=now_ms + self.interval_ms)

    def extend(self, now_ms: int) -> "RotationState":
        """Keep the index, push the deadline out by one interval."""
        return replace(self, deadline=now_ms + self.interval_ms)

    def step(self, delta: int, length: int, now_ms: int) -> "RotationState":
        """Circular move by ``delta`` over a list of ``length`` entries."""
        return self.select((self.current_index + delta + length) % length, now_ms)

    def deactivate(self) -> "RotationState":
        return replace(self, current_index=INACTIVE, deadline=0)
