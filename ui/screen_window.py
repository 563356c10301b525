"""Full-screen web view acting as the display surface.

Renders destinations and reports interaction to the DisplayHost: any mouse
click, mouse move or key release resets the timer, and key releases are also
forwarded so arrow keys navigate while the page has focus.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from PySide6.QtCore import QEvent, QObject, QUrl
from PySide6.QtGui import QCloseEvent
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QApplication, QWidget

from core.logging.logger import get_logger
from ui.keys import event_key_name

if TYPE_CHECKING:
    from rotation.display_host import DisplayHost

logger = get_logger(__name__)

_RESET_EVENTS = (
    QEvent.Type.MouseButtonPress,
    QEvent.Type.MouseMove,
)


class ScreenWindow(QWebEngineView):
    """DisplaySurface implementation backed by QtWebEngine."""

    def __init__(self, host: "DisplayHost", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._host = host
        self.setWindowTitle("Screen")
        # The web engine delivers input to an internal child widget, so we
        # watch application-wide and keep events that land inside this window.
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self)

    # DisplaySurface -----------------------------------------------------

    def navigate(self, url: str) -> None:
        self.setUrl(QUrl(url))

    def set_title(self, title: str) -> None:
        self.setWindowTitle(title)

    def ping(self) -> None:
        # The callback only fires if the renderer is still processing script.
        self.page().runJavaScript("1", 0, lambda _result: self._host.window_alive())

    # Qt -----------------------------------------------------------------

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if not isinstance(obj, QWidget) or obj.window() is not self:
            return False
        etype = event.type()
        if etype in _RESET_EVENTS:
            self._host.reset_timer()
        elif etype == QEvent.Type.KeyRelease and not event.isAutoRepeat():
            self._host.reset_timer()
            self._host.keyup(event_key_name(event))
        return False

    def closeEvent(self, event: QCloseEvent) -> None:
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self)
        super().closeEvent(event)
        self._host.surface_closed()


def create_screen_window(url: str, host: "DisplayHost") -> ScreenWindow:
    """SurfaceFactory opening a full-screen window on ``url``."""
    window = ScreenWindow(host)
    window.navigate(url)
    window.set_title(url)
    window.showFullScreen()
    logger.info("Screen window created on %s", url)
    return window
