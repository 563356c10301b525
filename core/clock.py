"""Wall-clock access for the rotator.

Everything that needs "now" takes a ``Clock`` so tests can substitute a
manual one. Timestamps are integer milliseconds since the Unix epoch.
"""
from __future__ import annotations

import time
from typing import Optional, Protocol, runtime_checkable

from PySide6.QtCore import QObject, Signal

from core.constants.timing import CLOCK_TICK_INTERVAL_MS
from core.logging.logger import get_logger
from core.timers import RecurringTimer, create_recurring_timer

logger = get_logger(__name__)


@runtime_checkable
class Clock(Protocol):
    """Source of wall-clock samples."""

    def now_ms(self) -> int:
        ...


class SystemClock:
    """Clock backed by ``time.time()``."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class ClockTicker(QObject):
    """Process-wide ticking source publishing ClockSamples.

    Emits ``ticked(now_ms)`` on every tick. Consumers only read the sample;
    the ticker never touches rotation state.

    Signals:
    - ticked: new clock sample (int milliseconds, sent as object to avoid
      32-bit truncation)
    """

    ticked = Signal(object)

    def __init__(self, clock: Optional[Clock] = None,
                 interval_ms: int = CLOCK_TICK_INTERVAL_MS,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self._clock: Clock = clock or SystemClock()
        self._interval_ms = max(1, int(interval_ms))
        self._timer: Optional[RecurringTimer] = None
        self._latest: int = self._clock.now_ms()

    @property
    def latest(self) -> int:
        """Most recent sample (read-only)."""
        return self._latest

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def tick(self) -> int:
        """Take one sample and publish it."""
        self._latest = self._clock.now_ms()
        self.ticked.emit(self._latest)
        return self._latest

    def start(self) -> None:
        if self.is_running():
            return
        self._timer = create_recurring_timer(
            self, self._interval_ms, self.tick, description="Clock ticker"
        )

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
            logger.debug("Clock ticker stopped")

    def is_running(self) -> bool:
        return self._timer is not None and self._timer.is_active()
