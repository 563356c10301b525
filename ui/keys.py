"""Map Qt key codes to the DOM-style key names used on the sync channel."""
from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeyEvent

_NAMED_KEYS = {
    Qt.Key.Key_Left: "ArrowLeft",
    Qt.Key.Key_Right: "ArrowRight",
    Qt.Key.Key_Up: "ArrowUp",
    Qt.Key.Key_Down: "ArrowDown",
    Qt.Key.Key_Escape: "Escape",
    Qt.Key.Key_Return: "Enter",
    Qt.Key.Key_Enter: "Enter",
    Qt.Key.Key_Tab: "Tab",
    Qt.Key.Key_Backspace: "Backspace",
    Qt.Key.Key_Space: " ",
}


def key_name(key: int, text: str = "") -> str:
    """Return the DOM ``KeyboardEvent.key`` name for a Qt key."""
    try:
        named = _NAMED_KEYS.get(Qt.Key(key))
    except ValueError:
        named = None
    if named is not None:
        return named
    if text and text.isprintable():
        return text
    return "Unidentified"


def event_key_name(event: QKeyEvent) -> str:
    return key_name(event.key(), event.text())
