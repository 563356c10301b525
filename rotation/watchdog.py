"""
Watchdog - verifies that the automatic advance actually happened.

The display surface performs the advance when the deadline passes. If the
deadline plus a grace period elapses while the rotation is still active, the
advance never arrived and the watchdog asks its owner for a full resync.
It never tries to work out why the advance failed.
"""
from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from core.clock import Clock, SystemClock
from core.constants.timing import WATCHDOG_GRACE_MS, WATCHDOG_INTERVAL_MS
from core.logging.logger import get_logger, is_verbose_logging
from core.logging.tags import TAG_WATCHDOG
from core.timers import RecurringTimer, create_recurring_timer
from rotation.state import RotationState

logger = get_logger(__name__)


class RotationWatchdog(QObject):
    """
    Periodic deadline check, independent of the rotation interval.

    Signals:
    - stale_detected: deadline missed (now_ms, missed deadline)
    """

    stale_detected = Signal(object, object)

    def __init__(
        self,
        state_provider: Callable[[], RotationState],
        on_stale: Callable[[int], None],
        clock: Optional[Clock] = None,
        interval_ms: int = WATCHDOG_INTERVAL_MS,
        grace_ms: int = WATCHDOG_GRACE_MS,
        parent: Optional[QObject] = None,
    ):
        """
        Args:
            state_provider: Returns the current authoritative state
            on_stale: Called with ``now_ms`` when a resync is needed
            clock: Time source (defaults to the system clock)
            interval_ms: Check period
            grace_ms: Allowed lateness past the deadline
        """
        super().__init__(parent)
        self._state_provider = state_provider
        self._on_stale = on_stale
        self._clock: Clock = clock or SystemClock()
        self._interval_ms = max(1, int(interval_ms))
        self._grace_ms = max(0, int(grace_ms))
        self._timer: Optional[RecurringTimer] = None
        self._resync_count = 0

    @property
    def grace_ms(self) -> int:
        return self._grace_ms

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def resync_count(self) -> int:
        return self._resync_count

    def check(self, now_ms: Optional[int] = None) -> bool:
        """Run one check. Returns True if a resync was requested."""
        state = self._state_provider()
        if not state.is_active:
            return False

        now = self._clock.now_ms() if now_ms is None else now_ms
        if now < state.deadline + self._grace_ms:
            if is_verbose_logging():
                logger.debug("%s ok (%dms to deadline)", TAG_WATCHDOG, state.deadline - now)
            return False

        self._resync_count += 1
        logger.warning(
            "%s Stuck at index %d: deadline %d missed by %dms, forcing resync",
            TAG_WATCHDOG,
            state.current_index,
            state.deadline,
            now - state.deadline,
        )
        self.stale_detected.emit(now, state.deadline)
        self._on_stale(now)
        return True

    def start(self) -> None:
        """(Re)start periodic checks."""
        self.stop()
        self._timer = create_recurring_timer(
            self, self._interval_ms, self.check, description="Rotation watchdog"
        )

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
            logger.debug("%s stopped", TAG_WATCHDOG)

    def is_running(self) -> bool:
        return self._timer is not None and self._timer.is_active()
