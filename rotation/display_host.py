"""
Display surface host - the receiving end of the SyncChannel.

The host owns the window that actually renders destinations. It executes
controller commands, reports surface interaction back as channel events,
and performs the automatic advance: when the page progress reaches 100% it
emits ``keyup("ArrowRight")`` exactly as a user key press would.

It also probes the surface periodically; a surface that stops answering is
treated as a dead page and skipped the same way.

Rendering is delegated to a ``DisplaySurface`` created by a factory, so the
host logic runs identically against a web view or a test double.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Protocol, Sequence

from PySide6.QtCore import QObject, Signal

from core.clock import Clock, SystemClock
from core.constants import timing
from core.logging.logger import get_logger, is_verbose_logging
from core.logging.tags import TAG_HOST
from core.settings import SettingsManager
from core.timers import RecurringTimer, create_recurring_timer, single_shot
from rotation.countdown import progress_percent
from rotation.sync_channel import HostCommand, SyncChannel, SyncEvent

logger = get_logger(__name__)

ADVANCE_KEY = "ArrowRight"


class DisplaySurface(Protocol):
    """What the host needs from a rendering surface."""

    def navigate(self, url: str) -> None:
        ...

    def set_title(self, title: str) -> None:
        ...

    def reload(self) -> None:
        ...

    def ping(self) -> None:
        """Ask the surface to call ``DisplayHost.window_alive()`` if responsive."""
        ...

    def close(self) -> None:
        ...


SurfaceFactory = Callable[[str, "DisplayHost"], DisplaySurface]


class DisplayHost(QObject):
    """
    Executes controller commands against a display surface.

    Signals:
    - surface_created: a new surface was materialized
    - surface_destroyed: the surface went away
    - page_changed: surface navigated (index, url)
    - progress_changed: page progress percentage (0-100)
    """

    surface_created = Signal()
    surface_destroyed = Signal()
    page_changed = Signal(int, str)
    progress_changed = Signal(int)

    def __init__(
        self,
        channel: SyncChannel,
        surface_factory: SurfaceFactory,
        clock: Optional[Clock] = None,
        settings_manager: Optional[SettingsManager] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._channel = channel
        self._surface_factory = surface_factory
        self._clock: Clock = clock or SystemClock()

        self._progress_poll_ms = timing.HOST_PROGRESS_POLL_MS
        self._liveness_interval_ms = timing.HOST_LIVENESS_INTERVAL_MS
        self._liveness_timeout_ms = timing.HOST_LIVENESS_TIMEOUT_MS
        if settings_manager is not None:
            self._progress_poll_ms = settings_manager.get_int(
                'host.progress_poll_ms', self._progress_poll_ms, minimum=1)
            self._liveness_interval_ms = settings_manager.get_int(
                'host.liveness_interval_ms', self._liveness_interval_ms, minimum=1)
            self._liveness_timeout_ms = settings_manager.get_int(
                'host.liveness_timeout_ms', self._liveness_timeout_ms, minimum=1)

        self._urls: List[str] = []
        self._surface: Optional[DisplaySurface] = None
        self._page_index: int = 0
        self._page_change_timestamp: int = 0

        # Progress tracker state
        self._observed_end: int = 0
        self._progress_start: int = 0
        self._advance_requested: bool = False

        # Liveness probe state
        self._alive: bool = True
        self._probe_pending: bool = False

        self._progress_timer: Optional[RecurringTimer] = None
        self._liveness_timer: Optional[RecurringTimer] = None

        self._unregister = [
            channel.register_command(HostCommand.CREATE_WINDOW, self.create_window),
            channel.register_command(HostCommand.CHANGE_URL, self.change_url),
            channel.register_command(HostCommand.SET_PAGE_CHANGE_TIMESTAMP,
                                     self.set_page_change_timestamp),
        ]

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def urls(self) -> List[str]:
        return list(self._urls)

    @property
    def surface(self) -> Optional[DisplaySurface]:
        return self._surface

    @property
    def page_index(self) -> int:
        return self._page_index

    def has_surface(self) -> bool:
        return self._surface is not None

    # ------------------------------------------------------------------
    # Commands from the controller
    # ------------------------------------------------------------------

    def create_window(self, urls: Sequence[str]) -> None:
        """Materialize a surface for ``urls``, or reload the existing one."""
        self._urls = list(urls)

        if self._surface is not None:
            logger.info("%s Surface already exists, reloading", TAG_HOST)
            self._surface.reload()
            return

        if not self._urls:
            logger.warning("%s create_window called with an empty list", TAG_HOST)
            return

        logger.info("%s Creating surface for %d pages", TAG_HOST, len(self._urls))
        self._surface = self._surface_factory(self._urls[0], self)
        self._page_index = 0
        self._reset_progress(self._page_change_timestamp)
        self._start_timers()
        self.surface_created.emit()

    def change_url(self, index: int, end_time: int) -> None:
        """Show ``urls[index]`` and record ``end_time`` as the next deadline.

        Controller commands are not echoed back as ``change-index``; only
        jumps the surface starts itself are reported (see request_page).
        """
        self._show_page(index, end_time)

    def _show_page(self, index: int, end_time: int) -> bool:
        if not 0 <= index < len(self._urls):
            logger.info("%s Index %s is out of bounds for %d pages", TAG_HOST, index, len(self._urls))
            return False
        surface = self._surface
        if surface is None:
            logger.info("%s change_url(%d) without a surface", TAG_HOST, index)
            return False

        url = self._urls[index]
        surface.navigate(url)
        surface.set_title(url)

        self._page_index = index
        self._page_change_timestamp = int(end_time)
        self._reset_progress(self._page_change_timestamp)

        self.page_changed.emit(index, url)
        return True

    def set_page_change_timestamp(self, timestamp: int) -> None:
        self._page_change_timestamp = int(timestamp)

    def get_page_change_timestamp(self) -> int:
        return self._page_change_timestamp

    # ------------------------------------------------------------------
    # Entry points for the surface
    # ------------------------------------------------------------------

    def reset_timer(self) -> None:
        """Surface saw mouse or keyboard interaction."""
        self._channel.emit(SyncEvent.RESET_TIMER)

    def keyup(self, key: str) -> None:
        self._channel.emit(SyncEvent.KEYUP, key)

    def request_page(self, index: int) -> None:
        """Surface-initiated jump (e.g. clicking a page marker)."""
        # Recorded before announcing so the controller's re-entrant
        # change_url (immediate mode) is not overwritten.
        if self._show_page(index, 0):
            self._channel.emit(SyncEvent.CHANGE_INDEX, index)

    def window_alive(self) -> None:
        self._alive = True

    def surface_closed(self) -> None:
        """The surface window was closed or destroyed."""
        if self._surface is None:
            return
        logger.info("%s Surface closed", TAG_HOST)
        self._stop_timers()
        self._surface = None
        self._probe_pending = False
        self.surface_destroyed.emit()
        self._channel.emit(SyncEvent.WINDOW_DESTROYED)

    # ------------------------------------------------------------------
    # Page progress (automatic advance)
    # ------------------------------------------------------------------

    def _reset_progress(self, end_time: int) -> None:
        self._observed_end = end_time
        self._progress_start = self._clock.now_ms()
        self._advance_requested = False
        self.progress_changed.emit(0)

    def update_progress(self, now_ms: Optional[int] = None) -> int:
        """One progress poll. Requests the next page once at 100%."""
        if self._surface is None or self._advance_requested:
            return 0 if self._surface is None else 100

        now = self._clock.now_ms() if now_ms is None else now_ms
        if self._page_change_timestamp != self._observed_end:
            self._observed_end = self._page_change_timestamp
            self._progress_start = now
            self.progress_changed.emit(0)
            return 0

        percent = progress_percent(self._progress_start, self._observed_end, now)
        self.progress_changed.emit(percent)
        if percent >= timing.PROGRESS_COMPLETE_PERCENT:
            self._advance_requested = True
            if is_verbose_logging():
                logger.debug("%s Page %d complete, requesting next", TAG_HOST, self._page_index)
            self.keyup(ADVANCE_KEY)
        return percent

    # ------------------------------------------------------------------
    # Liveness
    # ------------------------------------------------------------------

    def probe_liveness(self, schedule_evaluation: bool = True) -> None:
        """Ping the surface; the answer is judged after the timeout."""
        surface = self._surface
        if surface is None or self._probe_pending:
            return
        self._alive = False
        self._probe_pending = True
        surface.ping()
        if schedule_evaluation:
            single_shot(self._liveness_timeout_ms, self.evaluate_liveness)

    def evaluate_liveness(self) -> Optional[bool]:
        """Judge the pending probe. Returns None if nothing was pending."""
        if not self._probe_pending:
            return None
        self._probe_pending = False
        if self._surface is None:
            return None
        if not self._alive:
            logger.warning("%s Surface is not responding, moving to next page", TAG_HOST)
            self.keyup(ADVANCE_KEY)
        return self._alive

    # ------------------------------------------------------------------

    def _start_timers(self) -> None:
        self._stop_timers()
        self._progress_timer = create_recurring_timer(
            self, self._progress_poll_ms, self.update_progress, description="Host progress")
        self._liveness_timer = create_recurring_timer(
            self, self._liveness_interval_ms, self.probe_liveness, description="Host liveness")

    def _stop_timers(self) -> None:
        for timer in (self._progress_timer, self._liveness_timer):
            if timer is not None:
                timer.stop()
        self._progress_timer = None
        self._liveness_timer = None

    def timers_active(self) -> bool:
        return any(t is not None and t.is_active()
                   for t in (self._progress_timer, self._liveness_timer))

    def shutdown(self) -> None:
        """Stop timers, unbind commands and close the surface quietly."""
        self._stop_timers()
        for unregister in self._unregister:
            unregister()
        self._unregister = []
        surface, self._surface = self._surface, None
        if surface is not None:
            surface.close()
        logger.debug("%s Host shut down", TAG_HOST)
