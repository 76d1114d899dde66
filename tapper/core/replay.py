"""Replay of a finished run at its original keystroke timing."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from tapper.core.keys import KeyEvent, KeyKind
from tapper.core.session import ReferenceText, Transition, TypingSession

logger = logging.getLogger(__name__)

StepCallback = Callable[[KeyEvent, Transition], None]


class ReplayDriver:
    """Feeds a delay-encoded key log into a fresh :class:`TypingSession`.

    The replayed session runs on a virtual clock built from the recorded
    delays, so its buffers and metrics match the live run. Wall-clock waits
    are scheduled against an absolute tick so sleep overshoot does not
    accumulate.

    The driver can be run to completion with :meth:`run`, or stepped by an
    event loop using :meth:`next_delay` and :meth:`step`.
    """

    def __init__(
        self,
        reference: ReferenceText,
        key_log: Sequence[tuple[float, KeyEvent]],
        *,
        on_step: Optional[StepCallback] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = TypingSession(reference)
        self._log = list(key_log)
        self._on_step = on_step
        self._clock = clock
        self._sleep = sleep
        self._position = 0
        self._virtual_now = 0.0
        self._next_tick: Optional[float] = None
        self._cancelled = False

    @property
    def session(self) -> TypingSession:
        return self._session

    @property
    def virtual_now(self) -> float:
        """Replay time in seconds since the first recorded key."""
        return self._virtual_now

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._cancelled or self._position >= len(self._log)

    def cancel(self) -> None:
        if not self.done:
            logger.info("Replay cancelled at key %d of %d", self._position, len(self._log))
        self._cancelled = True

    def next_delay(self) -> Optional[float]:
        """Seconds to wait before the next :meth:`step`, or None when done."""
        if self.done:
            return None
        if self._next_tick is None:
            self._next_tick = self._clock()
        delay = max(0.0, self._log[self._position][0])
        return max(0.0, self._next_tick + delay - self._clock())

    def step(self) -> Optional[Transition]:
        """Feed the next recorded key without waiting."""
        if self.done:
            return None
        delay, key = self._log[self._position]
        delay = max(0.0, delay)
        self._position += 1
        self._virtual_now += delay
        if self._next_tick is None:
            self._next_tick = self._clock()
        self._next_tick += delay

        transition = self._session.feed(key, now=self._virtual_now)
        if self._on_step is not None:
            self._on_step(key, transition)
        return transition

    def run(self, poll: Optional[Callable[[], Optional[KeyEvent]]] = None) -> bool:
        """Replay the whole log, sleeping between keys.

        ``poll`` is checked before every key; an Escape or interrupt from it
        stops the replay. Returns False if the replay was cancelled.
        """
        logger.info("Replaying %d keys on text %s", len(self._log), self._session.reference.id)
        while not self.done:
            delay = self.next_delay()
            if delay:
                self._sleep(delay)
            if poll is not None:
                key = poll()
                if key is not None and key.kind in (KeyKind.ESCAPE, KeyKind.INTERRUPT):
                    self.cancel()
                    break
            self.step()
        return not self._cancelled
