from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from tapper.core.diff import first_mismatch
from tapper.core.errors import TimingError
from tapper.core.keys import KeyEvent, KeyKind
from tapper.core.layout import spaces_at, wrap
from tapper.core.metrics import accuracy_pct, elapsed_minutes, wpm, wrong_typed

logger = logging.getLogger(__name__)

# Extra room on top of the longest token before input is dropped.
WORD_LIMIT_SLACK = 5


@dataclass(frozen=True)
class ReferenceText:
    """Sample text of a session, unwrapped and wrapped to ``width`` columns."""

    raw: str
    wrapped: str
    tokens: tuple[str, ...]
    id: str
    width: int

    @classmethod
    def prepare(cls, text: str, text_id: str, width: int) -> "ReferenceText":
        """Normalize whitespace in ``text`` and wrap it to ``width``."""
        tokens = tuple(text.split())
        raw = " ".join(tokens)
        return cls(raw=raw, wrapped=wrap(raw, width), tokens=tokens, id=text_id, width=width)

    def rewrap(self, width: int) -> "ReferenceText":
        """Wrap the original text again; never re-wraps ``wrapped``."""
        return replace(self, wrapped=wrap(self.raw, width), width=width)

    @property
    def word_limit(self) -> int:
        return max((len(token) for token in self.tokens), default=0) + WORD_LIMIT_SLACK

    def raw_index(self, position: int) -> int:
        """Index in ``raw`` of the character shown at ``position`` of ``wrapped``.

        Padding spaces map to the single space they widen.
        """
        index = -1
        for i in range(min(position, len(self.wrapped) - 1) + 1):
            if not _is_padding(self.wrapped, i):
                index += 1
        return max(index, 0)

    def wrapped_index(self, raw_index: int) -> int:
        """Position in ``wrapped`` where ``raw[raw_index]`` is shown."""
        index = -1
        for i in range(len(self.wrapped)):
            if not _is_padding(self.wrapped, i):
                index += 1
                if index == raw_index:
                    return i
        return len(self.wrapped)

    def prefix_through(self, token_count: int) -> str:
        """Wrapped text up to and including the separator after ``token_count`` tokens."""
        index = 0
        for _ in range(min(token_count, len(self.tokens))):
            while index < len(self.wrapped) and self.wrapped[index] != " ":
                index += 1
            index += spaces_at(self.wrapped, index)
        return self.wrapped[:index]


def _is_padding(wrapped: str, i: int) -> bool:
    return i > 0 and wrapped[i] == " " and wrapped[i - 1] == " "


class Mode(Enum):
    TYPING = "typing"
    FINISHED = "finished"


class Outcome(Enum):
    IGNORED = "ignored"
    UPDATED = "updated"
    RESET = "reset"
    RESIZED = "resized"
    FINISHED = "finished"
    QUIT = "quit"


@dataclass(frozen=True)
class Transition:
    """What a single keystroke did to the session."""

    outcome: Outcome
    diff_index: int = 0
    timer_started: bool = False


@dataclass(frozen=True)
class SessionResult:
    """Completion event of a run, handed to the history sink."""

    text_id: str
    wpm: float
    accuracy: float
    elapsed_minutes: float
    finished_at: float


class TypingSession:
    """Keystroke state machine for one attempt at a :class:`ReferenceText`.

    Input is accepted only in :attr:`Mode.TYPING`. Once the typed string
    matches the whole wrapped text the session switches to
    :attr:`Mode.FINISHED`, caches its :class:`SessionResult`, converts the
    key log to inter-key delays and calls ``on_finish`` exactly once.

    A mistyped word is not matched against later tokens: it stays in the
    current word (with a trailing space) until it is erased and retyped.
    """

    def __init__(
        self,
        reference: ReferenceText,
        *,
        clock: Callable[[], float] = time.time,
        on_finish: Optional[Callable[[SessionResult], None]] = None,
    ) -> None:
        self._reference = reference
        self._clock = clock
        self._on_finish = on_finish
        self._result_emitted = False
        self._reset_state()

    def _reset_state(self) -> None:
        self._mode = Mode.TYPING
        self._current_word = ""
        self._current_string = ""
        self._token_index = 0
        self._started_at: Optional[float] = None
        self._finished_at: Optional[float] = None
        self._first_key_seen = False
        self._key_log: list[tuple[float, KeyEvent]] = []
        self._mistyped: list[int] = []
        self._total_chars_typed = 0
        self._result: Optional[SessionResult] = None
        self._start_reference: Optional[ReferenceText] = None

    # -- read-only state -------------------------------------------------

    @property
    def reference(self) -> ReferenceText:
        return self._reference

    @property
    def start_reference(self) -> ReferenceText:
        """Text as wrapped when the timer started; the key log is relative to it."""
        return self._start_reference or self._reference

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def current_word(self) -> str:
        return self._current_word

    @property
    def current_string(self) -> str:
        return self._current_string

    @property
    def token_index(self) -> int:
        return self._token_index

    @property
    def word_limit(self) -> int:
        return self._reference.word_limit

    @property
    def started_at(self) -> Optional[float]:
        return self._started_at

    @property
    def first_key_seen(self) -> bool:
        return self._first_key_seen

    @property
    def key_log(self) -> list[tuple[float, KeyEvent]]:
        """Absolute timestamps while typing, delays once finished."""
        return list(self._key_log)

    @property
    def mistyped_positions(self) -> list[int]:
        return list(self._mistyped)

    @property
    def total_chars_typed(self) -> int:
        return self._total_chars_typed

    @property
    def result(self) -> Optional[SessionResult]:
        return self._result

    @property
    def is_finished(self) -> bool:
        return self._mode is Mode.FINISHED

    @property
    def at_word_limit(self) -> bool:
        return len(self._current_word) >= self.word_limit

    @property
    def diff_index(self) -> int:
        return first_mismatch(self._current_string, self._reference.wrapped)

    # -- transitions -----------------------------------------------------

    def feed(self, key: KeyEvent, now: Optional[float] = None) -> Transition:
        """Apply one input event; ``now`` defaults to the session clock."""
        if key.kind is KeyKind.UNKNOWN or self._mode is Mode.FINISHED:
            return Transition(Outcome.IGNORED, self.diff_index)
        if now is None:
            now = self._clock()
        last = self._key_log[-1][0] if self._key_log else self._started_at
        if last is not None and now < last:
            raise TimingError(f"Clock moved backwards: {now} < {last}")

        timer_started = False
        if not self._first_key_seen and key.is_initiating():
            self._started_at = now
            self._first_key_seen = True
            self._start_reference = self._reference
            timer_started = True

        if not self._first_key_seen:
            if key.kind is KeyKind.RESIZE:
                if key.width > 0:
                    self.resize(key.width)
                return Transition(Outcome.RESIZED, self.diff_index)
            if key.kind is KeyKind.INTERRUPT:
                return Transition(Outcome.QUIT, self.diff_index)
            return Transition(Outcome.IGNORED, self.diff_index)

        self._key_log.append((now, key))

        kind = key.kind
        if kind is KeyKind.ESCAPE:
            self.reset()
            return Transition(Outcome.RESET, 0)
        if kind is KeyKind.INTERRUPT:
            return Transition(Outcome.QUIT, self.diff_index, timer_started)
        if kind is KeyKind.RESIZE:
            if key.width > 0:
                self.resize(key.width)
            return Transition(Outcome.RESIZED, self.diff_index, timer_started)

        if kind is KeyKind.BACKSPACE:
            self._erase_key()
        elif kind is KeyKind.WORD_ERASE:
            self._erase_word()
        elif kind is KeyKind.SPACE:
            if len(self._current_word) < self.word_limit:
                self._total_chars_typed += 1
                # leading spaces on an empty word are swallowed
                if self._current_word:
                    self._accept_word()
        elif kind is KeyKind.CHAR:
            if len(self._current_word) < self.word_limit:
                self._current_word += key.char
                self._current_string += key.char
                self._total_chars_typed += 1
        return self._update_state(now, timer_started)

    def reset(self) -> None:
        """Abandon the current attempt without scoring it."""
        logger.debug("Resetting attempt on text %s", self._reference.id)
        self._reset_state()
        self._result_emitted = False

    def resize(self, width: int) -> None:
        """Re-wrap the text to ``width`` and re-pad the accepted words to match.

        Recorded mistyped positions are moved to where the same characters
        sit in the new wrap.
        """
        if width == self._reference.width:
            return
        old = self._reference
        self._reference = old.rewrap(width)
        moved = (self._reference.wrapped_index(old.raw_index(p)) for p in self._mistyped)
        self._mistyped = list(dict.fromkeys(moved))
        self._current_string = self._reference.prefix_through(self._token_index) + self._current_word

    def compute_result(self) -> SessionResult:
        """Metrics of the finished run, derived only from recorded state."""
        if self._started_at is None or self._finished_at is None:
            raise RuntimeError("Session has not finished")
        minutes = elapsed_minutes(self._started_at, self._finished_at)
        wrong = wrong_typed(self._total_chars_typed, len(self._reference.raw))
        return SessionResult(
            text_id=self._reference.id,
            wpm=wpm(len(self._reference.tokens), minutes),
            accuracy=accuracy_pct(self._total_chars_typed, wrong),
            elapsed_minutes=minutes,
            finished_at=self._finished_at,
        )

    # -- internals -------------------------------------------------------

    def _erase_key(self) -> None:
        if self._current_word:
            self._current_word = self._current_word[:-1]
            self._current_string = self._current_string[:-1]

    def _erase_word(self) -> None:
        if not self._current_word:
            return
        index = self._current_word.rfind(" ")
        cut = len(self._current_word) - (index if index != -1 else 0)
        self._current_word = self._current_word[: len(self._current_word) - cut]
        self._current_string = self._current_string[: len(self._current_string) - cut]

    def _accept_word(self) -> None:
        expected = self._reference.tokens[self._token_index]
        if self._current_word == expected:
            separator = spaces_at(self._reference.wrapped, len(self._current_string))
            self._token_index += 1
            self._current_word = ""
            self._current_string += " " * separator
        else:
            self._current_word += " "
            self._current_string += " "

    def _mark_mistyped(self, position: int) -> None:
        if position not in self._mistyped:
            self._mistyped.append(position)

    def _update_state(self, now: float, timer_started: bool) -> Transition:
        wrapped = self._reference.wrapped
        index = first_mismatch(self._current_string, wrapped)
        if index < len(self._current_string) <= len(wrapped):
            self._mark_mistyped(len(self._current_string) - 1)
        if index == len(wrapped):
            self._finish(now)
            return Transition(Outcome.FINISHED, index, timer_started)
        return Transition(Outcome.UPDATED, index, timer_started)

    def _finish(self, now: float) -> None:
        tokens = self._reference.tokens
        if self._token_index < len(tokens) and self._current_word == tokens[self._token_index]:
            self._token_index += 1
            self._current_word = ""
        self._finished_at = now
        self._result = self.compute_result()
        self._mode = Mode.FINISHED

        for index in range(len(self._key_log) - 1, 0, -1):
            stamp, key = self._key_log[index]
            self._key_log[index] = (stamp - self._key_log[index - 1][0], key)
        if self._key_log:
            self._key_log[0] = (0.0, self._key_log[0][1])

        logger.info(
            "Finished text %s: %.2f WPM, %.2f%% accuracy",
            self._result.text_id,
            self._result.wpm,
            self._result.accuracy,
        )
        if not self._result_emitted and self._on_finish is not None:
            self._result_emitted = True
            self._on_finish(self._result)
