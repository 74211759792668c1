"""Grid store: glyph cells plus a parallel array of trail timestamps."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from enum import Enum


class Glyph(Enum):
    BACKGROUND = "background"
    TRAIL = "trail"
    BORDER_H = "border_h"
    BORDER_V = "border_v"
    BORDER_CORNER = "border_corner"
    BLANK = "blank"


@dataclass(frozen=True)
class GlyphSet:
    """Two-character strings used to draw each glyph."""

    background: str = ". "
    trail: str = "* "
    border_h: str = "- "
    border_v: str = "| "
    border_corner: str = "+ "
    blank: str = "  "

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str) or len(value) != 2:
                raise ValueError(
                    f"glyph {f.name!r} must be exactly two characters, got {value!r}"
                )

    def text(self, glyph: Glyph) -> str:
        return getattr(self, glyph.value)


DEFAULT_GLYPHS = GlyphSet()


def grid_dimensions(
    viewport_width: float,
    viewport_height: float,
    cell_width: float,
    cell_height: float,
) -> tuple[int, int]:
    """Return ``(rows, cols)`` needed to cover the viewport."""
    cols = max(0, math.ceil(viewport_width / cell_width))
    rows = max(0, math.ceil(viewport_height / cell_height))
    return rows, cols


class Grid:
    """Fixed-size ``rows x cols`` array of glyphs and trail timestamps.

    Timestamps are milliseconds; ``None`` means the cell carries no trail.
    The grid is replaced wholesale by :meth:`rebuild`, never resized in
    place.
    """

    def __init__(self, rows: int = 0, cols: int = 0) -> None:
        self.rows = 0
        self.cols = 0
        self.cells: list[list[Glyph]] = []
        self.stamps: list[list[float | None]] = []
        self.rebuild(rows, cols)

    def rebuild(self, rows: int, cols: int) -> None:
        """Allocate fresh arrays, all BACKGROUND with no trail."""
        self.rows = rows
        self.cols = cols
        self.cells = [[Glyph.BACKGROUND] * cols for _ in range(rows)]
        self.stamps = [[None] * cols for _ in range(rows)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> Glyph:
        return self.cells[row][col]

    def set(self, row: int, col: int, glyph: Glyph) -> None:
        """Set a cell; coordinates outside the grid are skipped."""
        if self.in_bounds(row, col):
            self.cells[row][col] = glyph
