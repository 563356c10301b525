"""
Rotation controller - the single writer of rotation state.

The RotationController:
- Owns the rotation list and the authoritative RotationState
- Reacts to manual navigation, forwarded keys and host events
- Commands the display surface host over the SyncChannel
- Runs the countdown clock tick and the watchdog

The host never mutates rotation state; it only receives commands and
reports events. Every transition builds a new RotationState from the
current one plus the event payload and swaps it in one assignment.
"""
from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from core.clock import Clock, ClockTicker, SystemClock
from core.constants import timing
from core.logging.logger import get_logger, is_verbose_logging
from core.logging.tags import TAG_ROTATION
from core.settings import SettingsManager
from rotation import countdown
from rotation.session_storage import URLS_KEY, SessionStorage
from rotation.state import RotationState, filter_blank_entries
from rotation.sync_channel import ChannelEvent, HostCommand, SyncChannel, SyncEvent
from rotation.watchdog import RotationWatchdog

logger = get_logger(__name__)

ARROW_RIGHT = "ArrowRight"
ARROW_LEFT = "ArrowLeft"

NAVIGATION_KEYS = {
    ARROW_RIGHT: 1,
    ARROW_LEFT: -1,
}


class RotationController(QObject):
    """
    Orchestrates countdown, watchdog and host commands for one rotation.

    Signals:
    - started: rotation started (list length)
    - index_changed: new index selected (index, deadline)
    - countdown_changed: formatted remaining time, emitted every clock tick
    - deactivated: rotation went inactive
    - key_forwarded: key received from the display surface (key name)
    """

    started = Signal(int)
    index_changed = Signal(int, object)
    countdown_changed = Signal(str)
    deactivated = Signal()
    key_forwarded = Signal(str)

    def __init__(
        self,
        channel: SyncChannel,
        clock: Optional[Clock] = None,
        settings_manager: Optional[SettingsManager] = None,
        session_storage: Optional[SessionStorage] = None,
        parent: Optional[QObject] = None,
    ):
        """
        Args:
            channel: Transport to the display surface host
            clock: Time source (defaults to the system clock)
            settings_manager: Source for tick/watchdog timing overrides
            session_storage: Where the raw list is snapshotted on start
        """
        super().__init__(parent)
        self._channel = channel
        self._clock: Clock = clock or SystemClock()
        self._session_storage = session_storage

        self._urls: Tuple[str, ...] = ()
        self._state = RotationState.inactive()

        tick_ms = timing.CLOCK_TICK_INTERVAL_MS
        watchdog_ms = timing.WATCHDOG_INTERVAL_MS
        grace_ms = timing.WATCHDOG_GRACE_MS
        if settings_manager is not None:
            tick_ms = settings_manager.get_int('timing.clock_tick_ms', tick_ms, minimum=1)
            watchdog_ms = settings_manager.get_int('timing.watchdog_interval_ms', watchdog_ms, minimum=1)
            grace_ms = settings_manager.get_int('timing.watchdog_grace_ms', grace_ms)

        self._ticker = ClockTicker(self._clock, tick_ms, self)
        self._ticker.ticked.connect(self._on_clock_tick)
        self._watchdog = RotationWatchdog(
            lambda: self._state,
            self.resync,
            clock=self._clock,
            interval_ms=watchdog_ms,
            grace_ms=grace_ms,
            parent=self,
        )

        self._unlisteners: List[Callable[[], None]] = []
        self._subscribe()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> RotationState:
        return self._state

    @property
    def urls(self) -> Tuple[str, ...]:
        return self._urls

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    @property
    def watchdog(self) -> RotationWatchdog:
        return self._watchdog

    @property
    def ticker(self) -> ClockTicker:
        return self._ticker

    def remaining_text(self, now_ms: Optional[int] = None) -> str:
        """Countdown text for ``now_ms``; empty while inactive."""
        if not self._state.is_active:
            return ""
        now = self._clock.now_ms() if now_ms is None else now_ms
        return countdown.format_remaining(self._state.deadline, now)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, urls: Iterable[str], interval_ms: int) -> bool:
        """
        Start (or restart) rotating through ``urls``.

        Blank entries are dropped before the list is stored. The raw list is
        snapshotted to session storage first.

        Returns:
            True if the rotation is now active, False if nothing was left
            after filtering.

        Raises:
            ValueError: On a negative interval or a non-string entry
        """
        interval_ms = int(interval_ms)
        if interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {interval_ms}")

        raw = list(urls)
        if self._session_storage is not None:
            self._session_storage.snapshot_list(URLS_KEY, raw)

        filtered = filter_blank_entries(raw)
        self._urls = filtered

        if not filtered:
            logger.warning("%s Start ignored: no destinations after filtering %d entries",
                           TAG_ROTATION, len(raw))
            self._deactivate(interval_ms)
            return False

        self._state = RotationState.activate(interval_ms, self._clock.now_ms())
        logger.info("%s Rotation started: %d pages, interval=%dms",
                    TAG_ROTATION, len(filtered), interval_ms)

        self._channel.invoke(HostCommand.CREATE_WINDOW, urls=list(filtered))
        self._dispatch_current()

        self._ticker.start()
        self._watchdog.start()
        self.started.emit(len(filtered))
        return True

    def advance(self, step: int) -> bool:
        """Move ``step`` pages (wrapping). No-op while inactive or empty."""
        if not self._can_navigate():
            logger.debug("%s Advance(%+d) ignored while inactive", TAG_ROTATION, step)
            return False

        self._commit(self._state.step(step, len(self._urls), self._clock.now_ms()))
        return True

    def handle_key(self, key: str) -> bool:
        """Local key handling; only the arrow keys navigate."""
        step = NAVIGATION_KEYS.get(key)
        if step is None:
            return False
        return self.advance(step)

    def change_index(self, new_index) -> bool:
        """Jump to ``new_index`` on request from outside the controller.

        Requests for the current index, invalid indices, or arriving while
        inactive are ignored.
        """
        if not self._can_navigate():
            return False
        if isinstance(new_index, bool) or not isinstance(new_index, int):
            logger.debug("%s Ignoring non-integer change-index payload %r", TAG_ROTATION, new_index)
            return False
        if not 0 <= new_index < len(self._urls):
            logger.debug("%s Ignoring out-of-range change-index %d", TAG_ROTATION, new_index)
            return False
        if new_index == self._state.current_index:
            return False

        self._commit(self._state.select(new_index, self._clock.now_ms()))
        return True

    def reset_timer(self) -> bool:
        """Push the deadline out by one interval and echo it to the host."""
        if not self._state.is_active:
            return False

        self._state = self._state.extend(self._clock.now_ms())
        if is_verbose_logging():
            logger.debug("%s Timer reset, deadline=%d", TAG_ROTATION, self._state.deadline)
        self._channel.invoke(HostCommand.SET_PAGE_CHANGE_TIMESTAMP, timestamp=self._state.deadline)
        return True

    def resync(self, now_ms: Optional[int] = None) -> None:
        """Force the surface back to index 0 with a fresh deadline."""
        if not self._can_navigate():
            return
        now = self._clock.now_ms() if now_ms is None else now_ms
        self._commit(self._state.select(0, now))

    def window_destroyed(self) -> None:
        """The display surface is gone: go inactive and stop all ticking."""
        logger.info("%s Display surface destroyed, deactivating", TAG_ROTATION)
        self._deactivate(self._state.interval_ms)

    def shutdown(self) -> None:
        """Stop periodic activity and drop every channel subscription."""
        self._stop_periodic()
        unlisteners, self._unlisteners = self._unlisteners, []
        for unlisten in unlisteners:
            unlisten()
        logger.debug("%s Controller shut down", TAG_ROTATION)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _can_navigate(self) -> bool:
        return self._state.is_active and bool(self._urls)

    def _commit(self, new_state: RotationState) -> None:
        self._state = new_state
        logger.debug("%s Index -> %d (deadline=%d)", TAG_ROTATION,
                     new_state.current_index, new_state.deadline)
        self._dispatch_current()

    def _dispatch_current(self) -> None:
        state = self._state
        self.index_changed.emit(state.current_index, state.deadline)
        self._channel.invoke(HostCommand.CHANGE_URL, index=state.current_index, end_time=state.deadline)

    def _deactivate(self, interval_ms: int) -> None:
        was_active = self._state.is_active
        self._state = RotationState.inactive(interval_ms)
        self._stop_periodic()
        if was_active:
            self.countdown_changed.emit("")
            self.deactivated.emit()

    def _stop_periodic(self) -> None:
        self._watchdog.stop()
        self._ticker.stop()

    def _subscribe(self) -> None:
        listen = self._channel.listen
        self._unlisteners = [
            listen(SyncEvent.RESET_TIMER, lambda _event: self.reset_timer()),
            listen(SyncEvent.KEYUP, self._on_remote_keyup),
            listen(SyncEvent.CHANGE_INDEX, lambda event: self.change_index(event.payload)),
            listen(SyncEvent.WINDOW_DESTROYED, lambda _event: self.window_destroyed()),
        ]

    def _on_remote_keyup(self, event: ChannelEvent) -> None:
        key = str(event.payload)
        self.key_forwarded.emit(key)
        self.handle_key(key)

    def _on_clock_tick(self, now_ms: int) -> None:
        if self._state.is_active:
            self.countdown_changed.emit(countdown.format_remaining(self._state.deadline, now_ms))
