"""Input events delivered to the typing engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class KeyKind(Enum):
    CHAR = "char"
    SPACE = "space"
    BACKSPACE = "backspace"
    WORD_ERASE = "word_erase"
    ESCAPE = "escape"
    INTERRUPT = "interrupt"
    RESIZE = "resize"
    ENTER = "enter"
    TAB = "tab"
    LEFT = "left"
    RIGHT = "right"
    UNKNOWN = "unknown"


_CONTROL_CHARS = {
    "\x1b": KeyKind.ESCAPE,
    "\x03": KeyKind.INTERRUPT,
    "\x17": KeyKind.WORD_ERASE,
    "\x7f": KeyKind.BACKSPACE,
    "\x08": KeyKind.BACKSPACE,
    " ": KeyKind.SPACE,
    "\n": KeyKind.ENTER,
    "\r": KeyKind.ENTER,
    "\t": KeyKind.TAB,
}


@dataclass(frozen=True)
class KeyEvent:
    """A single input event.

    ``char`` is set only for CHAR and SPACE events; ``width`` and ``height``
    (in grid cells) only for RESIZE events.
    """

    kind: KeyKind
    char: str = ""
    width: int = 0
    height: int = 0

    @classmethod
    def of(cls, kind: KeyKind) -> "KeyEvent":
        if kind is KeyKind.SPACE:
            return cls(kind, " ")
        return cls(kind)

    @classmethod
    def resized(cls, width: int, height: int) -> "KeyEvent":
        return cls(KeyKind.RESIZE, width=width, height=height)

    @classmethod
    def from_char(cls, char: str) -> "KeyEvent":
        """Classify a raw character as a terminal would deliver it."""
        kind = _CONTROL_CHARS.get(char)
        if kind is not None:
            return cls(kind, " " if kind is KeyKind.SPACE else "")
        if len(char) == 1 and char.isprintable():
            return cls(KeyKind.CHAR, char)
        return cls(KeyKind.UNKNOWN)

    def is_initiating(self) -> bool:
        """True for keys that may start the session timer."""
        return self.kind is KeyKind.CHAR and self.char.isalpha()

    def __str__(self) -> str:
        if self.kind is KeyKind.CHAR:
            return self.char
        return f"<{self.kind.value}>"


def keys_for_text(text: str) -> list[KeyEvent]:
    """Events produced by typing ``text`` character by character."""
    return [KeyEvent.from_char(ch) for ch in text]
