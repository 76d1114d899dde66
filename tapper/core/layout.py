"""Word-wrap and screen-fit calculations for a fixed monospace grid."""

from __future__ import annotations

import math

from tapper.core.errors import LayoutError

# Rows used by the header above the text and by the gap below it.
TEXT_MARGIN_ROWS = 3
# Rows reserved for the current word, summary, hints and the stats bar.
CHROME_ROWS = 7


def lines_needed(text: str, width: int) -> int:
    """Number of ``width``-wide lines required to show ``text``."""
    if width <= 0:
        raise LayoutError(f"Invalid window width: {width}")
    return math.ceil(len(text) / width)


def wrap(text: str, width: int) -> str:
    """Pad ``text`` with spaces so no word straddles a line boundary.

    The space preceding a word that would cross column ``width`` is widened
    so the word starts exactly on the next line. Offsets shift after every
    insertion, so the line count is re-read from the current text on each
    pass.
    """
    if width <= 0:
        raise LayoutError(f"Invalid window width: {width}")

    line = 1
    while line * width < len(text):
        last_col = line * width - 1
        if text[last_col] != " ":
            line_start = (line - 1) * width
            index = text.rfind(" ", line_start, last_col)
            if index == -1:
                raise LayoutError(
                    f"Window too narrow: no space to wrap line {line} at width {width}"
                )
            text = text[:index] + " " * (line * width - index) + text[index + 1 :]
        line += 1
    return text


def spaces_at(text: str, index: int) -> int:
    """Count consecutive spaces in ``text`` starting at ``index``."""
    count = 0
    while index + count < len(text) and text[index + count] == " ":
        count += 1
    return count


def fit_check(text: str, width: int, height: int) -> int:
    """Return the first row below the text, or raise if the window is too small."""
    text_rows = lines_needed(text, width) + TEXT_MARGIN_ROWS
    if text_rows + CHROME_ROWS >= height:
        raise LayoutError(
            f"Window too small to print given text ({width}x{height}, needs {text_rows + CHROME_ROWS + 1} rows)"
        )
    return text_rows
