"""Tests for tapper.core.metrics – speed, accuracy and timing."""

from __future__ import annotations

import pytest

from tapper.core import metrics
from tapper.core.errors import TimingError
from tapper.core.metrics import accuracy_pct, elapsed_minutes, realtime_wpm, wpm, wrong_typed


# ---------------------------------------------------------------------------
# elapsed_minutes
# ---------------------------------------------------------------------------

class TestElapsedMinutes:
    def test_one_minute(self):
        assert elapsed_minutes(100.0, 160.0) == 1.0

    def test_zero(self):
        assert elapsed_minutes(100.0, 100.0) == 0.0

    def test_backwards_clock(self):
        with pytest.raises(TimingError):
            elapsed_minutes(100.0, 99.0)

    def test_defaults_to_current_time(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(metrics.time, "time", lambda: 130.0)
        assert elapsed_minutes(100.0) == 0.5


# ---------------------------------------------------------------------------
# wpm
# ---------------------------------------------------------------------------

class TestWpm:
    def test_basic(self):
        assert wpm(10, 2.0) == 5.0

    def test_no_time_yet(self):
        assert wpm(3, 0.0) == 0.0

    def test_linear_in_token_count(self):
        assert wpm(20, 0.5) == 2 * wpm(10, 0.5)


# ---------------------------------------------------------------------------
# accuracy
# ---------------------------------------------------------------------------

class TestAccuracy:
    def test_wrong_typed_extra_characters(self):
        assert wrong_typed(13, 11) == 2

    def test_wrong_typed_never_negative(self):
        assert wrong_typed(5, 11) == 0

    def test_no_errors(self):
        assert accuracy_pct(10, 0) == 100.0

    def test_with_errors(self):
        assert accuracy_pct(13, 2) == pytest.approx(11 / 13 * 100)

    def test_nothing_typed(self):
        assert accuracy_pct(0, 0) == 100.0


# ---------------------------------------------------------------------------
# realtime_wpm
# ---------------------------------------------------------------------------

class TestRealtimeWpm:
    def test_counts_words(self):
        assert realtime_wpm("the cat ", 0.0, 60.0) == 2.0

    def test_not_started(self):
        assert realtime_wpm("the", None, 60.0) == 0.0

    def test_no_elapsed_time(self):
        assert realtime_wpm("the", 10.0, 10.0) == 0.0
