"""
Half-block renderer - draw an RGBA bitmap as colored terminal cells.

Each character cell shows two vertically stacked pixels: the glyph's
foreground paints one half and the cell background the other. Transparent
pixels leave the terminal's own background visible.

Rows are advanced with explicit cursor movement instead of newlines so a
frame never scrolls the terminal past the space reserved for it.

Example:
    import sys
    from stagterm.renderer import HalfBlockRenderer

    renderer = HalfBlockRenderer(sys.stdout)
    renderer.render(bitmap)
"""

from __future__ import annotations

import sys
from typing import Sequence, TextIO

from .errors import RenderIOError
from .frames import Bitmap

# ANSI escape codes
ESC = "\033"
RESET = f"{ESC}[0m"
CURSOR_DOWN = f"{ESC}[1B"  # Stops at the bottom margin, never scrolls
CURSOR_COLUMN_ZERO = f"{ESC}[0G"
NEXT_ROW = CURSOR_DOWN + CURSOR_COLUMN_ZERO

# Unicode block characters
UPPER_HALF = "▀"
LOWER_HALF = "▄"
EMPTY_CELL = " "

_TRANSPARENT = (0, 0, 0, 0)


def fg(r: int, g: int, b: int) -> str:
    """24-bit foreground color sequence."""
    return f"{ESC}[38;2;{r};{g};{b}m"


def bg(r: int, g: int, b: int) -> str:
    """24-bit background color sequence."""
    return f"{ESC}[48;2;{r};{g};{b}m"


def encode_cell(upper: Sequence[int], lower: Sequence[int]) -> str:
    """
    Encode two stacked RGBA pixels as one terminal cell.

    ==========  ==========  ================================================
    upper.a     lower.a     output
    ==========  ==========  ================================================
    opaque      opaque      ▄, foreground = lower, background = upper
    0           0           a single space
    opaque      0           ▀, foreground = upper, no background
    0           opaque      ▄, foreground = lower, no background
    ==========  ==========  ================================================

    :param upper: (r, g, b, a) of the upper pixel
    :param lower: (r, g, b, a) of the lower pixel
    :return: The cell text including color codes and a trailing reset
    """
    ur, ug, ub, ua = (int(c) for c in upper)
    lr, lg, lb, la = (int(c) for c in lower)

    if ua != 0 and la != 0:
        return f"{bg(ur, ug, ub)}{fg(lr, lg, lb)}{LOWER_HALF}{RESET}"
    if ua == 0 and la == 0:
        return EMPTY_CELL
    if la == 0:
        return f"{fg(ur, ug, ub)}{UPPER_HALF}{RESET}"
    return f"{fg(lr, lg, lb)}{LOWER_HALF}{RESET}"


def rows_for(height: int) -> int:
    """Number of terminal lines a bitmap of the given height occupies."""
    return (height + 1) // 2


class HalfBlockRenderer:
    """
    Writes bitmaps to a text stream, one flushed cell at a time.

    A bitmap with an odd height renders its last pixel row against a
    transparent lower partner, so no pixel is ever read out of range.
    """

    def __init__(self, out: TextIO | None = None):
        """
        :param out: Destination stream (standard output if None)
        """
        self.out = out if out is not None else sys.stdout

    def render(self, bitmap: Bitmap) -> int:
        """
        Draw a bitmap starting at the current cursor position.

        After every output row the cursor moves one line down to column zero.

        :param bitmap: RGBA pixels of shape (height, width, 4)
        :return: Number of cells written
        """
        height, width = bitmap.shape[:2]
        cells = 0
        for y in range(0, height, 2):
            upper_row = bitmap[y]
            lower_row = bitmap[y + 1] if y + 1 < height else None
            for x in range(width):
                lower = lower_row[x] if lower_row is not None else _TRANSPARENT
                self._emit(encode_cell(upper_row[x], lower), x, y)
                cells += 1
            self._emit(NEXT_ROW, width - 1, y)
        return cells

    def _emit(self, text: str, x: int, y: int) -> None:
        """Write and flush, reporting the pixel coordinate on failure."""
        try:
            self.out.write(text)
            self.out.flush()
        except (OSError, ValueError) as e:
            raise RenderIOError(f"Failed to print image at ({x}, {y}): {e}") from e


__all__ = [
    "ESC",
    "RESET",
    "NEXT_ROW",
    "UPPER_HALF",
    "LOWER_HALF",
    "HalfBlockRenderer",
    "encode_cell",
    "rows_for",
    "fg",
    "bg",
]
