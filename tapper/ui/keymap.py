"""Translation of Qt key presses into engine input events."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeyEvent

from tapper.core.keys import KeyEvent, KeyKind

_NAMED_KEYS = {
    Qt.Key.Key_Escape: KeyKind.ESCAPE,
    Qt.Key.Key_Return: KeyKind.ENTER,
    Qt.Key.Key_Enter: KeyKind.ENTER,
    Qt.Key.Key_Tab: KeyKind.TAB,
    Qt.Key.Key_Left: KeyKind.LEFT,
    Qt.Key.Key_Right: KeyKind.RIGHT,
    Qt.Key.Key_Space: KeyKind.SPACE,
}


def key_from_qt(event: QKeyEvent) -> KeyEvent:
    """Map a key press to a :class:`KeyEvent`; unhandled keys become UNKNOWN."""
    key = event.key()
    ctrl = bool(event.modifiers() & Qt.KeyboardModifier.ControlModifier)

    if key == Qt.Key.Key_Backspace:
        return KeyEvent.of(KeyKind.WORD_ERASE if ctrl else KeyKind.BACKSPACE)
    if ctrl and key == Qt.Key.Key_C:
        return KeyEvent.of(KeyKind.INTERRUPT)
    if ctrl and key == Qt.Key.Key_W:
        return KeyEvent.of(KeyKind.WORD_ERASE)

    kind = _NAMED_KEYS.get(key)
    if kind is not None:
        return KeyEvent.of(kind)

    text = event.text()
    if len(text) == 1:
        return KeyEvent.from_char(text)
    return KeyEvent.of(KeyKind.UNKNOWN)
