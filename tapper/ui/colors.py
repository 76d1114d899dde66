"""Palette and the mapping from drawing styles to cell attributes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from tapper.core.render import Style


class TerminalColors:
    """Dark terminal-like palette."""

    BACKGROUND = "#12171c"
    FOREGROUND = "#d6dde3"
    WHITE = "#ffffff"
    BLACK = "#000000"

    GREEN = "#2e7d32"
    RED = "#c62828"
    BLUE = "#1565c0"
    YELLOW = "#f9a825"
    CYAN = "#00838f"
    MAGENTA = "#8e24aa"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"


@dataclass(frozen=True)
class CellStyle:
    foreground: str
    background: str
    bold: bool = False


_BG = TerminalColors.BACKGROUND
_FG = TerminalColors.FOREGROUND

STYLE_ATTRIBUTES: Dict[Style, CellStyle] = {
    Style.NORMAL: CellStyle(_FG, _BG),
    Style.BOLD: CellStyle(TerminalColors.WHITE, _BG, bold=True),
    Style.DIM: CellStyle(blend_hex(_FG, _BG, 0.6), _BG),
    Style.GREEN: CellStyle(TerminalColors.WHITE, TerminalColors.GREEN),
    Style.RED: CellStyle(TerminalColors.WHITE, TerminalColors.RED),
    Style.BLUE: CellStyle(TerminalColors.WHITE, TerminalColors.BLUE),
    Style.YELLOW: CellStyle(TerminalColors.WHITE, TerminalColors.YELLOW),
    Style.CYAN: CellStyle(TerminalColors.WHITE, TerminalColors.CYAN),
    Style.MAGENTA: CellStyle(TerminalColors.WHITE, TerminalColors.MAGENTA),
    Style.INVERSE: CellStyle(TerminalColors.BLACK, TerminalColors.WHITE),
}


def cell_style(style: Style) -> CellStyle:
    return STYLE_ATTRIBUTES[style]
