from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QTimer
from PySide6.QtGui import QCloseEvent, QKeyEvent
from PySide6.QtWidgets import QMainWindow

from tapper.core.errors import LayoutError, TimingError
from tapper.core.history import HistoryStore
from tapper.core.keys import KeyEvent
from tapper.core.texts import TextRepository
from tapper.core.trainer import Trainer
from tapper.ui.grid_view import GridView
from tapper.ui.keymap import key_from_qt

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Hosts the character grid and pumps key, resize and replay events into the trainer.

    Everything runs on the Qt event loop: each key press is fully processed
    before the next one is delivered, and replay keys are scheduled with a
    single-shot timer so the window keeps repainting between them.
    """

    def __init__(
        self,
        text: str,
        text_id: str,
        texts: Optional[TextRepository] = None,
        history: Optional[HistoryStore] = None,
    ) -> None:
        super().__init__()
        self._text = text
        self._text_id = text_id
        self._texts = texts
        self._history = history
        self._trainer: Optional[Trainer] = None
        self._error: Optional[str] = None

        self._grid = GridView(self)
        self._grid.resized.connect(self._on_grid_resized)
        self.setCentralWidget(self._grid)
        self.setWindowTitle("Tapper")
        self.resize(1000, 640)

        self._replay_timer = QTimer(self)
        self._replay_timer.setSingleShot(True)
        self._replay_timer.timeout.connect(self._on_replay_tick)

        # the grid only has its real size once the window is laid out
        QTimer.singleShot(0, self._start)

    @property
    def error(self) -> Optional[str]:
        """Message of the fatal error that closed the window, if any."""
        return self._error

    def _start(self) -> None:
        try:
            self._trainer = Trainer(
                self._grid,
                self._text,
                self._text_id,
                texts=self._texts,
                history=self._history,
            )
            self._trainer.start()
        except LayoutError as e:
            self._fail(e)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if self._trainer is None:
            super().keyPressEvent(event)
            return
        self._dispatch(key_from_qt(event))

    def _on_grid_resized(self, width: int, height: int) -> None:
        if self._trainer is not None:
            self._dispatch(KeyEvent.resized(width, height))

    def _dispatch(self, key: KeyEvent) -> None:
        trainer = self._trainer
        if trainer is None:
            return
        replaying = trainer.replay is not None
        try:
            running = trainer.handle(key)
        except (LayoutError, TimingError) as e:
            self._fail(e)
            return
        if not running:
            self.close()
            return
        if trainer.replay is None:
            self._replay_timer.stop()
        elif not replaying:
            self._schedule(trainer.replay.next_delay())

    def _on_replay_tick(self) -> None:
        if self._trainer is None:
            return
        try:
            delay = self._trainer.replay_step()
        except (LayoutError, TimingError) as e:
            self._fail(e)
            return
        self._schedule(delay)

    def _schedule(self, delay: Optional[float]) -> None:
        if delay is not None:
            self._replay_timer.start(int(delay * 1000))

    def _fail(self, error: Exception) -> None:
        logger.error("%s", error)
        self._error = str(error)
        self._replay_timer.stop()
        self.close()

    def closeEvent(self, event: QCloseEvent) -> None:
        self._replay_timer.stop()
        super().closeEvent(event)
