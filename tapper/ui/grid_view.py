"""Monospace cell grid painted with Qt; the on-screen :class:`Renderer`."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QFont, QFontDatabase, QFontMetrics, QPainter
from PySide6.QtWidgets import QSizePolicy, QWidget

from tapper.core.render import Style
from tapper.ui.colors import TerminalColors, cell_style

Cell = tuple[str, Style]
_BLANK: Cell = (" ", Style.NORMAL)


class GridView(QWidget):
    """Fixed-pitch character grid.

    Drawing goes to a back buffer; :meth:`flush` publishes it and schedules
    a repaint. The grid size follows the widget size.
    """

    resized = Signal(int, int)  # width, height in cells

    def __init__(self, parent: Optional[QWidget] = None, point_size: int = 14) -> None:
        super().__init__(parent)
        font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
        font.setPointSize(point_size)
        font.setStyleHint(QFont.StyleHint.Monospace)
        self._font = font
        self._bold_font = QFont(font)
        self._bold_font.setBold(True)
        metrics = QFontMetrics(font)
        self._cell_width = max(1, metrics.horizontalAdvance("M"))
        self._cell_height = max(1, metrics.height())
        self._ascent = metrics.ascent()
        self._back: list[list[Cell]] = []
        self._front: list[list[Cell]] = []
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(self._cell_width * 20, self._cell_height * 10)
        self.setFocusPolicy(Qt.FocusPolicy.NoFocus)

    # -- Renderer --------------------------------------------------------

    def dimensions(self) -> tuple[int, int]:
        """Return ``(rows, columns)`` that fit in the widget."""
        rect = self.contentsRect()
        return (
            max(1, rect.height() // self._cell_height),
            max(1, rect.width() // self._cell_width),
        )

    def clear(self) -> None:
        rows, cols = self.dimensions()
        self._back = [[_BLANK] * cols for _ in range(rows)]

    def clear_line(self, row: int) -> None:
        self._ensure_buffer()
        if 0 <= row < len(self._back):
            self._back[row] = [_BLANK] * len(self._back[row])

    def draw(self, row: int, col: int, text: str, style: Style = Style.NORMAL) -> None:
        self._ensure_buffer()
        rows = len(self._back)
        if not rows:
            return
        cols = len(self._back[0])
        for ch in text:
            if col >= cols:
                row += 1
                col = 0
            if row >= rows:
                break
            if row >= 0:
                self._back[row][col] = (ch, style)
            col += 1

    def flush(self) -> None:
        self._front = [list(line) for line in self._back]
        self.update()

    # -- Qt --------------------------------------------------------------

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        rows, cols = self.dimensions()
        self.resized.emit(cols, rows)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(TerminalColors.BACKGROUND))
        origin = self.contentsRect().topLeft()
        for r, line in enumerate(self._front):
            y = origin.y() + r * self._cell_height
            for c, (ch, style) in enumerate(line):
                if ch == " " and style is Style.NORMAL:
                    continue
                attrs = cell_style(style)
                x = origin.x() + c * self._cell_width
                if attrs.background != TerminalColors.BACKGROUND:
                    painter.fillRect(x, y, self._cell_width, self._cell_height, QColor(attrs.background))
                painter.setFont(self._bold_font if attrs.bold else self._font)
                painter.setPen(QColor(attrs.foreground))
                painter.drawText(x, y + self._ascent, ch)
        painter.end()

    def _ensure_buffer(self) -> None:
        if not self._back:
            self.clear()
