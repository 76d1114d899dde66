"""Tests for tapper.core.replay – re-driving a recorded run."""

from __future__ import annotations

import pytest

from conftest import FakeClock, type_text
from tapper.core.keys import KeyEvent, KeyKind
from tapper.core.replay import ReplayDriver
from tapper.core.session import Outcome, ReferenceText, TypingSession


def _live_run(reference: ReferenceText, keys: list[tuple[float, str]]) -> TypingSession:
    """Type ``keys`` as (pause, char) pairs; "\\b" stands for backspace."""
    clock = FakeClock(start=500.0)
    session = TypingSession(reference, clock=clock)
    for pause, ch in keys:
        clock.tick(pause)
        key = KeyEvent.of(KeyKind.BACKSPACE) if ch == "\b" else KeyEvent.from_char(ch)
        session.feed(key)
    return session


@pytest.fixture()
def reference() -> ReferenceText:
    return ReferenceText.prepare("the cat sat", "3", 80)


@pytest.fixture()
def live(reference: ReferenceText) -> TypingSession:
    pauses = [0.5, 0.25, 0.125, 1.0, 0.25, 0.5, 0.25, 0.25, 0.375, 0.25, 0.25, 0.5, 0.25, 0.25, 0.125]
    chars = "teh\b\bhe cat sat"
    session = _live_run(reference, list(zip(pauses, chars)))
    assert session.is_finished
    return session


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------

class TestReplayDeterminism:
    def test_reproduces_final_state(self, reference: ReferenceText, live: TypingSession):
        clock = FakeClock(start=0.0)
        driver = ReplayDriver(reference, live.key_log, clock=clock, sleep=clock.sleep)
        assert driver.run() is True
        replayed = driver.session
        assert replayed.is_finished
        assert replayed.current_string == live.current_string
        assert replayed.mistyped_positions == live.mistyped_positions
        assert replayed.token_index == live.token_index
        assert replayed.total_chars_typed == live.total_chars_typed

    def test_reproduces_metrics(self, reference: ReferenceText, live: TypingSession):
        clock = FakeClock(start=0.0)
        driver = ReplayDriver(reference, live.key_log, clock=clock, sleep=clock.sleep)
        driver.run()
        replayed = driver.session.result
        assert replayed.accuracy == live.result.accuracy
        assert replayed.wpm == pytest.approx(live.result.wpm)
        assert replayed.elapsed_minutes == pytest.approx(live.result.elapsed_minutes)

    def test_resize_mid_run_keeps_mistake_positions(self):
        clock = FakeClock(start=500.0)
        live = TypingSession(ReferenceText.prepare("the cat sat on the mat", "4", 80), clock=clock)
        type_text(live, "the cat sat nx", clock)
        for key in (KeyEvent.of(KeyKind.BACKSPACE), KeyEvent.of(KeyKind.BACKSPACE), KeyEvent.resized(10, 24)):
            clock.tick()
            live.feed(key)
        type_text(live, "on the mat", clock)
        assert live.is_finished
        assert live.mistyped_positions == [14, 15]

        replay_clock = FakeClock(start=0.0)
        driver = ReplayDriver(
            live.start_reference, live.key_log, clock=replay_clock, sleep=replay_clock.sleep
        )
        assert driver.run() is True
        replayed = driver.session
        assert replayed.reference.width == 10
        assert replayed.mistyped_positions == live.mistyped_positions
        assert replayed.current_string == live.current_string
        assert replayed.result.accuracy == live.result.accuracy

    def test_sleeps_for_recorded_pauses(self, reference: ReferenceText, live: TypingSession):
        clock = FakeClock(start=0.0)
        driver = ReplayDriver(reference, live.key_log, clock=clock, sleep=clock.sleep)
        driver.run()
        recorded = [delay for delay, _ in live.key_log if delay > 0]
        assert clock.sleeps == pytest.approx(recorded)


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------

class TestReplayScheduling:
    def test_negative_delays_clamped(self, reference: ReferenceText):
        log = [(0.0, KeyEvent.from_char("t")), (-3.0, KeyEvent.from_char("h"))]
        clock = FakeClock(start=0.0)
        driver = ReplayDriver(reference, log, clock=clock, sleep=clock.sleep)
        driver.run()
        assert clock.sleeps == []
        assert driver.session.current_string == "th"
        assert driver.virtual_now == 0.0

    def test_overslept_time_is_absorbed(self, reference: ReferenceText):
        log = [(0.0, KeyEvent.from_char("t")), (1.0, KeyEvent.from_char("h")), (1.0, KeyEvent.from_char("e"))]
        clock = FakeClock(start=0.0)
        driver = ReplayDriver(reference, log, clock=clock, sleep=clock.sleep)
        assert driver.next_delay() == 0.0
        driver.step()
        assert driver.next_delay() == 1.0
        clock.tick(1.5)  # woke up late
        driver.step()
        assert driver.next_delay() == pytest.approx(0.5)

    def test_step_api(self, reference: ReferenceText):
        log = [(0.0, KeyEvent.from_char("t"))]
        seen = []
        driver = ReplayDriver(reference, log, on_step=lambda key, t: seen.append((key, t.outcome)))
        transition = driver.step()
        assert transition.outcome is Outcome.UPDATED
        assert seen == [(KeyEvent.from_char("t"), Outcome.UPDATED)]
        assert driver.done
        assert driver.step() is None
        assert driver.next_delay() is None

    def test_empty_log(self, reference: ReferenceText):
        driver = ReplayDriver(reference, [])
        assert driver.done
        assert driver.run() is True


# ---------------------------------------------------------------------------
# Interruption
# ---------------------------------------------------------------------------

class TestReplayInterrupt:
    @pytest.mark.parametrize("kind", [KeyKind.ESCAPE, KeyKind.INTERRUPT])
    def test_poll_stops_replay(self, reference: ReferenceText, live: TypingSession, kind: KeyKind):
        clock = FakeClock(start=0.0)
        driver = ReplayDriver(reference, live.key_log, clock=clock, sleep=clock.sleep)
        polls = iter([None, None, KeyEvent.of(kind)])
        assert driver.run(poll=lambda: next(polls, None)) is False
        assert driver.cancelled
        assert driver.done
        assert driver.session.current_string == "te"
        assert not driver.session.is_finished

    def test_other_keys_do_not_stop(self, reference: ReferenceText, live: TypingSession):
        clock = FakeClock(start=0.0)
        driver = ReplayDriver(reference, live.key_log, clock=clock, sleep=clock.sleep)
        assert driver.run(poll=lambda: KeyEvent.from_char("x")) is True
        assert driver.session.is_finished

    def test_cancel(self, reference: ReferenceText, live: TypingSession):
        driver = ReplayDriver(reference, live.key_log)
        driver.cancel()
        assert driver.done
        assert driver.step() is None
