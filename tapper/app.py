"""Application entry point and setup for the Tapper typing trainer."""

import logging
import sys
from typing import Optional

from PySide6.QtWidgets import QApplication

from tapper.core.config import Settings
from tapper.core.errors import TextRangeError
from tapper.core.history import HistoryStore, format_records
from tapper.core.texts import PreparedText, TextRepository, load_text_from_file
from tapper.ui.main_window import MainWindow


def configure_logging(level: str = "INFO") -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def load_texts(settings: Settings) -> Optional[TextRepository]:
    """The text corpus, or None when a practice file replaces it."""
    if settings.text_file is not None:
        return None
    return TextRepository(settings.corpus)


def select_text(settings: Settings, texts: Optional[TextRepository]) -> PreparedText:
    """Pick the practice text: a file, then an id, then a random text of the difficulty."""
    if settings.text_file is not None:
        return load_text_from_file(settings.text_file)
    if texts is None:
        raise TextRangeError("No text corpus available")
    if settings.text_id is not None:
        return texts.get(settings.text_id)
    return texts.get_random(settings.difficulty)


def show_history(store: HistoryStore, last: int) -> None:
    """Print the last ``last`` recorded runs, or all of them for 0."""
    for line in format_records(store.records(last=last or None)):
        print(line)


def run() -> None:
    """Resolve settings, load the text and start the main window."""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        configure_logging()
        logging.error("%s", e)
        sys.exit(1)
    configure_logging(settings.log_level)

    if settings.history is not None:
        show_history(HistoryStore(settings.history_file), settings.history)
        sys.exit(0)

    try:
        texts = load_texts(settings)
        text, text_id = select_text(settings, texts)
    except (TextRangeError, OSError, ValueError) as e:
        logging.error("%s", e)
        sys.exit(1)

    app = QApplication(sys.argv)
    app.setApplicationName("Tapper")
    app.setApplicationDisplayName("Tapper")

    window = MainWindow(text, text_id, texts=texts, history=HistoryStore(settings.history_file))
    window.show()

    code = app.exec()
    if window.error is not None:
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    run()
