from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

HEADER = ["ID", "WPM", "DATE", "TIME", "ACCURACY"]


@dataclass(frozen=True)
class HistoryRecord:
    text_id: str
    wpm: float
    date: str
    time: str
    accuracy: float


class HistoryStore:
    """Append-only CSV log of finished runs.

    The header row is written only when the file is created; existing rows
    are never rewritten.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path)

    @property
    def path(self) -> Path:
        return self._file_path

    def append(self, text_id: str, wpm: float, accuracy: float, timestamp: float) -> None:
        """Record one run; ``timestamp`` is seconds since the epoch."""
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        exists = self._file_path.exists()
        finished = datetime.fromtimestamp(timestamp)
        with self._file_path.open("a", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            if not exists:
                writer.writerow(HEADER)
            writer.writerow(
                [
                    text_id,
                    f"{wpm:.2f}",
                    finished.strftime("%Y-%m-%d"),
                    finished.strftime("%H:%M:%S"),
                    f"{accuracy:.2f}",
                ]
            )
        logger.info("Saved result for text %s to %s", text_id, self._file_path)

    def records(self, last: Optional[int] = None) -> List[HistoryRecord]:
        """All recorded runs in order, or only the last ``last`` of them."""
        if not self._file_path.exists():
            return []
        with self._file_path.open(newline="", encoding="utf-8") as handle:
            rows = [
                HistoryRecord(
                    text_id=row["ID"],
                    wpm=float(row["WPM"]),
                    date=row["DATE"],
                    time=row["TIME"],
                    accuracy=float(row["ACCURACY"]),
                )
                for row in csv.DictReader(handle)
            ]
        if last is not None and last > 0:
            return rows[-last:]
        return rows


def format_records(records: List[HistoryRecord]) -> List[str]:
    """Lines of a tab-separated table of ``records``."""
    if not records:
        return ["0 records found"]
    lines = [f"Last {len(records)} records:", "ID\tWPM\tDATE\t\tTIME\t\tACCURACY"]
    for record in records:
        lines.append(
            f"{record.text_id}\t{record.wpm:.2f}\t{record.date}\t{record.time}\t{record.accuracy:.2f}%"
        )
    return lines
