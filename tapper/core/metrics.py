"""Speed, accuracy and timing calculations.

Speed is measured in whole tokens per minute rather than the five-character
"standard word", so a run's WPM is simply the number of words in the text
divided by the minutes spent typing it.
"""

from __future__ import annotations

import time
from typing import Optional

from tapper.core.errors import TimingError


def elapsed_minutes(start: float, now: Optional[float] = None) -> float:
    """Minutes between ``start`` and ``now`` (defaults to the current time)."""
    if now is None:
        now = time.time()
    if now < start:
        raise TimingError(f"Clock moved backwards: {now} < {start}")
    return (now - start) / 60.0


def wpm(token_count: int, minutes: float) -> float:
    """Words per minute; 0 while no time has elapsed."""
    if minutes <= 0:
        return 0.0
    return token_count / minutes


def wrong_typed(total_typed: int, reference_length: int) -> int:
    """Keystrokes beyond the reference length, counted as errors."""
    return max(0, total_typed - reference_length)


def accuracy_pct(total_typed: int, wrong: int) -> float:
    """Percentage of keystrokes that were not errors (100 when nothing was typed)."""
    if total_typed <= 0:
        return 100.0
    return (total_typed - wrong) / total_typed * 100.0


def realtime_wpm(typed: str, start: Optional[float], now: Optional[float] = None) -> float:
    """Live speed: words typed so far over minutes since the first keystroke."""
    if start is None:
        return 0.0
    return wpm(len(typed.split()), elapsed_minutes(start, now))
