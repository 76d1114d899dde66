from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

from tapper.core.errors import TextRangeError
from tapper.core.history import HistoryStore
from tapper.core.keys import KeyEvent, KeyKind
from tapper.core.layout import fit_check
from tapper.core.metrics import realtime_wpm
from tapper.core.render import Renderer, Style
from tapper.core.replay import ReplayDriver
from tapper.core.session import (
    Mode,
    Outcome,
    ReferenceText,
    SessionResult,
    Transition,
    TypingSession,
)
from tapper.core.texts import TextRepository

logger = logging.getLogger(__name__)

TITLE = " TAPPER "
TEXT_TOP = 2


class Trainer:
    """Routes input to the live session, replay or mode commands and draws the screen.

    Before typing starts, Escape quits and Left/Right switch texts. While
    typing, keys go to the :class:`TypingSession`. After a finished run, Tab
    retries, Enter replays, Left/Right switch texts and Escape quits.
    """

    def __init__(
        self,
        renderer: Renderer,
        text: str,
        text_id: str,
        *,
        texts: Optional[TextRepository] = None,
        history: Optional[HistoryStore] = None,
        clock: Callable[[], float] = time.time,
        replay_clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._renderer = renderer
        self._texts = texts
        self._history = history
        self._clock = clock
        self._replay_clock = replay_clock
        self._sleep = sleep
        self._height, self._width = renderer.dimensions()
        reference = ReferenceText.prepare(text, text_id, self._width)
        self._text_bottom = fit_check(reference.wrapped, self._width, self._height)
        self._session = self._new_session(reference)
        self._replay: Optional[ReplayDriver] = None
        self._last_result: Optional[SessionResult] = None
        self._running = True

    @property
    def session(self) -> TypingSession:
        return self._session

    @property
    def replay(self) -> Optional[ReplayDriver]:
        return self._replay

    @property
    def running(self) -> bool:
        return self._running

    @property
    def last_result(self) -> Optional[SessionResult]:
        return self._last_result

    def start(self) -> None:
        """Paint the initial screen."""
        self._draw_setup(self._session)
        self._draw_state(self._session)

    # -- input routing ---------------------------------------------------

    def handle(self, key: KeyEvent) -> bool:
        """Process one input event. Returns False once the program should exit."""
        if not self._running or key.kind is KeyKind.UNKNOWN:
            return self._running

        if self._replay is not None:
            if key.kind is KeyKind.INTERRUPT:
                self._replay.cancel()
                self._quit()
            elif key.kind is KeyKind.ESCAPE:
                self._replay.cancel()
                self._end_replay()
            elif key.kind is KeyKind.RESIZE:
                self._replay.cancel()
                self._end_replay()
                self._resize(key)
            return self._running

        session = self._session
        if session.mode is Mode.FINISHED:
            self._handle_finished(key)
            return self._running

        if not session.first_key_seen:
            if key.kind is KeyKind.ESCAPE:
                self._quit()
                return self._running
            if key.kind in (KeyKind.LEFT, KeyKind.RIGHT):
                self.switch_text(-1 if key.kind is KeyKind.LEFT else 1)
                return self._running

        if key.kind is KeyKind.RESIZE:
            self._resize(key)
            return self._running

        transition = session.feed(key)
        self._apply(session, transition)
        return self._running

    def _handle_finished(self, key: KeyEvent) -> None:
        kind = key.kind
        if kind in (KeyKind.ESCAPE, KeyKind.INTERRUPT):
            self._quit()
        elif kind is KeyKind.TAB:
            self.retry()
        elif kind is KeyKind.ENTER:
            self.start_replay()
        elif kind in (KeyKind.LEFT, KeyKind.RIGHT):
            self.switch_text(-1 if kind is KeyKind.LEFT else 1)
        elif kind is KeyKind.RESIZE:
            self._resize(key)

    def _apply(self, session: TypingSession, transition: Transition) -> None:
        outcome = transition.outcome
        if outcome is Outcome.QUIT:
            self._quit()
        elif outcome is Outcome.RESET:
            self._draw_setup(session)
            self._draw_state(session)
        elif outcome is Outcome.RESIZED:
            self._draw_setup(session)
            self._draw_state(session)
        elif outcome is not Outcome.IGNORED:
            self._draw_state(session)

    def _quit(self) -> None:
        logger.info("Quitting")
        self._running = False

    def _resize(self, key: KeyEvent) -> None:
        height, width = key.height, key.width
        if width <= 0 or height <= 0:
            height, width = self._renderer.dimensions()
            key = KeyEvent.resized(width, height)
        reference = self._session.reference.rewrap(width)
        self._text_bottom = fit_check(reference.wrapped, width, height)
        self._height, self._width = height, width
        if self._session.mode is Mode.TYPING:
            self._session.feed(key)
        else:
            self._session.resize(width)
        self._draw_setup(self._session)
        self._draw_state(self._session)

    # -- commands --------------------------------------------------------

    def retry(self) -> None:
        """Start a fresh attempt at the same text."""
        logger.info("Retrying text %s", self._session.reference.id)
        self._session = self._new_session(self._session.reference.rewrap(self._width))
        self._draw_setup(self._session)
        self._draw_state(self._session)

    def switch_text(self, direction: int) -> bool:
        """Load the neighbouring corpus text; returns False if it could not."""
        current = self._session.reference.id
        if self._texts is None:
            logger.warning("Text %s is not from the corpus, cannot switch", current)
            return False
        try:
            text, text_id = self._texts.get_by_offset(current, direction)
        except TextRangeError as e:
            logger.warning("Cannot switch text: %s", e)
            return False
        reference = ReferenceText.prepare(text, text_id, self._width)
        self._text_bottom = fit_check(reference.wrapped, self._width, self._height)
        logger.info("Switched from text %s to %s", current, text_id)
        self._session = self._new_session(reference)
        self._draw_setup(self._session)
        self._draw_state(self._session)
        return True

    def start_replay(self) -> Optional[ReplayDriver]:
        """Begin replaying the finished run; the host drives the returned driver."""
        if self._session.mode is not Mode.FINISHED:
            return None
        # recorded resizes re-wrap the replayed text as they did live
        self._replay = ReplayDriver(
            self._session.start_reference,
            self._session.key_log,
            on_step=self._on_replay_step,
            clock=self._replay_clock,
            sleep=self._sleep,
        )
        logger.info("Replay started for text %s", self._session.reference.id)
        self._draw_setup(self._replay.session)
        self._draw_state(self._replay.session)
        return self._replay

    def replay_step(self) -> Optional[float]:
        """Advance the replay by one key; returns the delay before the next, None when over."""
        replay = self._replay
        if replay is None:
            return None
        replay.step()
        if replay.done:
            self._end_replay()
            return None
        return replay.next_delay()

    def run_replay(self, poll: Optional[Callable[[], Optional[KeyEvent]]] = None) -> bool:
        """Replay the finished run to completion, blocking between keys."""
        replay = self.start_replay()
        if replay is None:
            return False
        completed = replay.run(poll)
        self._end_replay()
        return completed

    def _on_replay_step(self, key: KeyEvent, transition: Transition) -> None:
        if self._replay is None:
            return
        session = self._replay.session
        if transition.outcome in (Outcome.RESET, Outcome.RESIZED):
            self._draw_setup(session)
        if transition.outcome is not Outcome.IGNORED:
            self._draw_state(session)

    def _end_replay(self) -> None:
        if self._replay is None:
            return
        logger.info("Replay finished for text %s", self._session.reference.id)
        self._replay = None
        self._draw_setup(self._session)
        self._draw_state(self._session)

    def _new_session(self, reference: ReferenceText) -> TypingSession:
        return TypingSession(reference, clock=self._clock, on_finish=self._record_result)

    def _record_result(self, result: SessionResult) -> None:
        self._last_result = result
        if self._history is not None:
            self._history.append(result.text_id, result.wpm, result.accuracy, result.finished_at)

    # -- drawing ---------------------------------------------------------

    def _now_for(self, session: TypingSession) -> float:
        if self._replay is not None and session is self._replay.session:
            return self._replay.virtual_now
        return self._clock()

    def _draw_spans(self, row: int, col: int, spans: Iterable[tuple[str, Style]]) -> None:
        for text, style in spans:
            self._renderer.draw(row, col, text, style)
            col += len(text)

    def _draw_setup(self, session: TypingSession) -> None:
        r = self._renderer
        r.clear()
        r.draw(0, 0, f" ID:{session.reference.id} ", Style.CYAN)
        r.draw(0, max(0, self._width // 2 - len(TITLE) // 2), TITLE, Style.BLUE)
        r.draw(TEXT_TOP, 0, session.reference.wrapped, Style.BOLD)
        self._draw_speed(session)
        r.flush()

    def _draw_speed(self, session: TypingSession) -> None:
        if session.result is not None:
            speed = session.result.wpm
        else:
            speed = realtime_wpm(session.current_string, session.started_at, self._now_for(session))
        self._renderer.draw(0, max(0, self._width - 14), f"{speed:.2f} WPM ", Style.CYAN)

    def _draw_state(self, session: TypingSession) -> None:
        r = self._renderer
        reference = session.reference
        wrapped = reference.wrapped
        width = reference.width
        bottom = self._text_bottom

        for row in (bottom, bottom + 2, bottom + 4):
            r.clear_line(row)
        r.draw(bottom, 0, session.current_word, Style.RED if session.at_word_limit else Style.NORMAL)

        typed = min(len(session.current_string), len(wrapped))
        r.draw(TEXT_TOP, 0, wrapped, Style.BOLD)
        r.draw(TEXT_TOP, 0, wrapped[:typed], Style.DIM)
        index = session.diff_index
        if index < typed:
            r.draw(TEXT_TOP + index // width, index % width, wrapped[index:typed], Style.RED)

        self._draw_speed(session)
        if session.is_finished:
            self._draw_summary(session)
        r.flush()

    def _draw_summary(self, session: TypingSession) -> None:
        result = session.result
        if result is None:
            return
        reference = session.reference
        width = reference.width
        for position in session.mistyped_positions:
            if position < len(reference.wrapped):
                self._renderer.draw(
                    TEXT_TOP + position // width,
                    position % width,
                    reference.wrapped[position],
                    Style.RED,
                )

        bottom = self._text_bottom
        self._draw_spans(
            bottom,
            0,
            [
                (" Your typing speed is ", Style.NORMAL),
                (f" {result.wpm:.2f} ", Style.MAGENTA),
                (" WPM ", Style.NORMAL),
            ],
        )
        self._draw_spans(
            bottom + 2,
            1,
            [
                (" Enter ", Style.INVERSE),
                (" to see replay, ", Style.NORMAL),
                (" Tab ", Style.INVERSE),
                (" to retry.", Style.NORMAL),
            ],
        )
        self._draw_spans(
            bottom + 3,
            1,
            [(" Arrow keys ", Style.INVERSE), (" to change text.", Style.NORMAL)],
        )
        self._draw_spans(
            self._height - 1,
            0,
            [
                (f" WPM: {result.wpm:.2f} ", Style.MAGENTA),
                (f" Time: {result.elapsed_minutes * 60:.2f}s ", Style.GREEN),
                (f" Accuracy: {result.accuracy:.2f}% ", Style.CYAN),
            ],
        )
