"""Drawing contract between the trainer and whatever paints the screen."""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class Style(Enum):
    NORMAL = "normal"
    BOLD = "bold"
    DIM = "dim"
    GREEN = "green"
    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"
    CYAN = "cyan"
    MAGENTA = "magenta"
    INVERSE = "inverse"


class Renderer(Protocol):
    """A grid of monospace cells addressed by (row, column).

    Text drawn past the end of a row continues at column 0 of the next row.
    Nothing has to become visible before :meth:`flush`.
    """

    def dimensions(self) -> tuple[int, int]:
        """Return ``(height, width)`` in cells."""
        ...

    def clear(self) -> None:
        ...

    def clear_line(self, row: int) -> None:
        ...

    def draw(self, row: int, col: int, text: str, style: Style = Style.NORMAL) -> None:
        ...

    def flush(self) -> None:
        ...
