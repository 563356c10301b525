"""Operator-side countdown panel.

Shows the seconds left on the current page and forwards arrow keys to the
rotation controller. Hidden counter while no rotation is active.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

from core.logging.logger import get_logger
from ui.keys import event_key_name

if TYPE_CHECKING:
    from rotation.controller import RotationController

logger = get_logger(__name__)

HELP_TEXT = (
    "Use ← and → arrow keys to quickly navigate through your pages.\n"
    "Interact with pages using the mouse or keyboard to reset the timer "
    "and prevent the page from changing."
)


class ControlWindow(QWidget):
    """Countdown display bound to a RotationController."""

    def __init__(self, controller: "RotationController", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._controller = controller
        self.setWindowTitle("Kiosk Rotator")
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(8)

        self.counter_label = QLabel("", self)
        self.counter_label.setObjectName("counterText")
        self.counter_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.counter_label.setStyleSheet("#counterText { font-size: 48px; font-weight: bold; }")

        self.caption_label = QLabel("Seconds to next page", self)
        self.caption_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.help_label = QLabel(HELP_TEXT, self)
        self.help_label.setWordWrap(True)

        layout.addWidget(self.counter_label)
        layout.addWidget(self.caption_label)
        layout.addStretch(1)
        layout.addWidget(self.help_label)

        controller.countdown_changed.connect(self.set_countdown)
        self.set_countdown("")

    def set_countdown(self, text: str) -> None:
        visible = bool(text)
        self.counter_label.setText(text)
        self.counter_label.setVisible(visible)
        self.caption_label.setVisible(visible)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:
        if event.isAutoRepeat():
            event.ignore()
            return
        if self._controller.handle_key(event_key_name(event)):
            event.accept()
            return
        super().keyReleaseEvent(event)
