from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from tapper.core.errors import TextRangeError

logger = logging.getLogger(__name__)

DEFAULT_CORPUS = Path(__file__).resolve().parent.parent / "data" / "texts.yaml"
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5

PreparedText = Tuple[str, str]


@dataclass(frozen=True)
class TextEntry:
    id: int
    difficulty: int
    text: str


class TextRepository:
    """Sample texts keyed by integer id, loaded from a YAML corpus."""

    def __init__(self, path: Path = DEFAULT_CORPUS, rng: Optional[random.Random] = None) -> None:
        self._path = Path(path)
        self._rng = rng or random.Random()
        self._entries = self._load_entries()

    def __len__(self) -> int:
        return len(self._entries)

    def ids(self) -> List[int]:
        return sorted(self._entries)

    def get(self, text_id: int) -> PreparedText:
        """Return ``(text, id)`` for ``text_id``."""
        entry = self._entries.get(int(text_id))
        if entry is None:
            raise TextRangeError(f"No text with id {text_id} (valid: {min(self._entries)}-{max(self._entries)})")
        return entry.text, str(entry.id)

    def get_random(self, difficulty: Optional[int] = None) -> PreparedText:
        """Return a random text of ``difficulty`` (1-5), or of any difficulty if None."""
        if difficulty is None:
            difficulty = self._rng.randint(MIN_DIFFICULTY, MAX_DIFFICULTY)
        if not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
            raise TextRangeError(
                f"Difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}, got {difficulty}"
            )
        candidates = [e for e in self._entries.values() if e.difficulty == difficulty]
        if not candidates:
            raise TextRangeError(f"No texts of difficulty {difficulty} in {self._path.name}")
        entry = self._rng.choice(sorted(candidates, key=lambda e: e.id))
        return entry.text, str(entry.id)

    def get_by_offset(self, text_id: str, offset: int) -> PreparedText:
        """Return the text ``offset`` ids away from ``text_id``."""
        try:
            current = int(text_id)
        except ValueError as e:
            raise TextRangeError(f"Text {text_id!r} is not from the corpus") from e
        return self.get(current + offset)

    def _load_entries(self) -> Dict[int, TextEntry]:
        if not self._path.exists():
            raise FileNotFoundError(f"Text corpus not found: {self._path}")

        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, list):
            raise ValueError(f"{self._path.name}: expected a YAML list of texts")

        entries: Dict[int, TextEntry] = {}
        for position, item in enumerate(raw):
            if not isinstance(item, dict):
                raise ValueError(f"{self._path.name}: entry {position} is not a mapping")
            text_id = item.get("id")
            difficulty = item.get("difficulty")
            text = item.get("text")
            if not isinstance(text_id, int) or isinstance(text_id, bool):
                raise ValueError(f"{self._path.name}: entry {position} has missing or invalid 'id'")
            if not isinstance(difficulty, int) or not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
                raise ValueError(f"{self._path.name}: text {text_id} has invalid 'difficulty'")
            if not text or not isinstance(text, str) or not text.split():
                raise ValueError(f"{self._path.name}: text {text_id} has no 'text'")
            if text_id in entries:
                raise ValueError(f"{self._path.name}: duplicate id {text_id}")
            entries[text_id] = TextEntry(id=text_id, difficulty=difficulty, text=" ".join(text.split()))

        logger.debug("Loaded %d texts from %s", len(entries), self._path)
        return entries


def load_text_from_file(path: Path) -> PreparedText:
    """Return ``(contents, path)`` of a practice file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"The file does not exist: {path}")
    return path.read_text(encoding="utf-8"), str(path)
