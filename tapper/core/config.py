"""Runtime settings read from ``TAPPER_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from tapper.core.texts import DEFAULT_CORPUS


def _optional_int(env: Mapping[str, str], name: str) -> Optional[int]:
    value = env.get(name, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


@dataclass(frozen=True)
class Settings:
    home: Path
    corpus: Path
    text_file: Optional[Path] = None
    text_id: Optional[int] = None
    difficulty: int = 2
    log_level: str = "INFO"
    history: Optional[int] = None

    @property
    def history_file(self) -> Path:
        return self.home / "history.csv"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        if env is None:
            env = os.environ
        home = Path(env.get("TAPPER_HOME") or Path.home() / ".tapper").expanduser()
        corpus = Path(env.get("TAPPER_TEXTS") or DEFAULT_CORPUS).expanduser()
        text_file = env.get("TAPPER_FILE")
        difficulty = _optional_int(env, "TAPPER_DIFFICULTY")
        history = _optional_int(env, "TAPPER_HISTORY")
        if history is not None and history < 0:
            raise ValueError(f"TAPPER_HISTORY must be 0 (all) or a record count, got {history}")
        return cls(
            home=home,
            corpus=corpus,
            text_file=Path(text_file).expanduser() if text_file else None,
            text_id=_optional_int(env, "TAPPER_TEXT_ID"),
            difficulty=2 if difficulty is None else difficulty,
            log_level=(env.get("TAPPER_LOG_LEVEL") or "INFO").upper(),
            history=history,
        )
