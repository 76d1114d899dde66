"""Shared fakes for engine tests: a controllable clock and an in-memory renderer."""

from __future__ import annotations

from typing import Optional

import pytest

from tapper.core.keys import KeyEvent
from tapper.core.render import Style
from tapper.core.session import Transition, TypingSession


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1000.0, step: float = 0.25) -> None:
        self.now = start
        self.step = step
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: Optional[float] = None) -> float:
        self.now += self.step if seconds is None else seconds
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingRenderer:
    """Renderer that keeps the published grid in memory."""

    def __init__(self, height: int = 24, width: int = 80) -> None:
        self.height = height
        self.width = width
        self.flushes = 0
        self._back = self._blank()
        self.cells = self._blank()

    def _blank(self) -> list[list[tuple[str, Style]]]:
        return [[(" ", Style.NORMAL)] * self.width for _ in range(self.height)]

    def dimensions(self) -> tuple[int, int]:
        return self.height, self.width

    def clear(self) -> None:
        self._back = self._blank()

    def clear_line(self, row: int) -> None:
        if 0 <= row < self.height:
            self._back[row] = [(" ", Style.NORMAL)] * self.width

    def draw(self, row: int, col: int, text: str, style: Style = Style.NORMAL) -> None:
        for ch in text:
            if col >= self.width:
                row += 1
                col = 0
            if row >= self.height:
                break
            self._back[row][col] = (ch, style)
            col += 1

    def flush(self) -> None:
        self.flushes += 1
        self.cells = [list(line) for line in self._back]

    def row_text(self, row: int) -> str:
        return "".join(ch for ch, _ in self.cells[row])

    def style_at(self, row: int, col: int) -> Style:
        return self.cells[row][col][1]


def type_text(session: TypingSession, text: str, clock: FakeClock) -> list[Transition]:
    """Feed ``text`` one character at a time, advancing ``clock`` before each key."""
    transitions = []
    for ch in text:
        clock.tick()
        transitions.append(session.feed(KeyEvent.from_char(ch)))
    return transitions


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def renderer() -> RecordingRenderer:
    return RecordingRenderer()
