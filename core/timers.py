"""Centralised helpers for recurring and one-shot UI-thread timers.

The rotator runs two independent periodic activities (the countdown clock
tick and the watchdog) plus the host's progress and liveness timers. All of
them are created here so every caller gets the same QTimer configuration and
a small handle it can stop during teardown without caring whether the
underlying C++ object is already gone.
"""
from __future__ import annotations

import time
from typing import Callable, Optional

from PySide6.QtCore import QCoreApplication, QObject, Qt, QTimer

from core.logging.logger import get_logger, is_verbose_logging


logger = get_logger(__name__)


class RecurringTimer:
    """Lightweight wrapper around a recurring QTimer.

    Owners keep a reference to this handle instead of the raw QTimer. The
    handle exposes only ``stop``, ``is_active`` and ``interval_ms``.
    """

    def __init__(self, timer: Optional[QTimer], description: str = "") -> None:
        self._timer = timer
        self._description = description

    @property
    def description(self) -> str:
        return self._description

    def interval_ms(self) -> int:
        timer = self._timer
        if timer is None:
            return 0
        try:
            return timer.interval()
        except RuntimeError:
            return 0

    def stop(self) -> None:
        timer = self._timer
        if timer is None:
            return
        self._timer = None
        try:
            timer.stop()
            timer.deleteLater()
        except RuntimeError as e:
            # Owner already destroyed the C++ side during teardown.
            logger.debug("[TIMER] Stop of %s raised: %s", self._description, e)

    def is_active(self) -> bool:
        timer = self._timer
        if timer is None:
            return False
        try:
            return timer.isActive()
        except RuntimeError:
            return False


def create_recurring_timer(
    parent: Optional[QObject],
    interval_ms: int,
    callback: Callable[[], None],
    *,
    description: str = "Recurring timer",
) -> RecurringTimer:
    """Create and start a recurring UI-thread timer.

    Exceptions raised by ``callback`` are logged and swallowed so a single
    failing tick never kills the timer.

    Args:
        parent: QObject owning the timer (may be None).
        interval_ms: Interval in milliseconds; values below 1 are clamped.
        callback: Zero-arg callable invoked each tick.
        description: Description used in diagnostics.
    """
    interval_ms = max(1, int(interval_ms))
    last_invoke = [0.0]

    def _invoke() -> None:
        now = time.monotonic()
        if last_invoke[0] > 0.0 and is_verbose_logging():
            gap_ms = (now - last_invoke[0]) * 1000.0
            if gap_ms > max(100.0, interval_ms * 2.0):
                logger.debug(
                    "[TIMER] Large gap for %s: %.2fms (interval=%dms)",
                    description,
                    gap_ms,
                    interval_ms,
                )
        last_invoke[0] = now
        try:
            callback()
        except Exception as e:
            logger.exception("[TIMER] %s raised: %s", description, e)

    timer = QTimer(parent)
    timer.setTimerType(Qt.TimerType.PreciseTimer)
    timer.setInterval(interval_ms)
    timer.timeout.connect(_invoke)
    timer.start()

    logger.debug("[TIMER] Started %s (%dms)", description, interval_ms)
    return RecurringTimer(timer, description)


def single_shot(delay_ms: int, func: Callable, *args, **kwargs) -> None:
    """Schedule a callable on the UI event loop after ``delay_ms``.

    Raises:
        RuntimeError: If no QCoreApplication exists to run the event loop.
    """
    if QCoreApplication.instance() is None:
        raise RuntimeError("single_shot called without QCoreApplication")

    def _invoke() -> None:
        try:
            func(*args, **kwargs)
        except Exception as e:
            logger.exception("[TIMER] Single-shot %r raised: %s", func, e)

    QTimer.singleShot(max(0, int(delay_ms)), _invoke)
