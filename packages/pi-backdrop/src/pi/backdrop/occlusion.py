"""Per-frame cell reclassification: background, inside-box, trail, borders.

:func:`update_grid` is the heart of the engine.  For every cell it decides,
from the cell's pixel centre, whether the cell is covered by a box (BLANK) or
shows the background; then it stamps the pointer trail, ages older trail
marks, and finally draws every box border on top.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from pi.backdrop.geometry import Rect
from pi.backdrop.grid import Glyph, Grid

TRAIL_DURATION_MS = 100.0


@dataclass
class PointerState:
    """Last known pointer position in pixels.

    ``moved`` is set by pointer-move events and consumed by the next frame;
    only frames that observe movement stamp a new trail mark.
    """

    x: float
    y: float
    moved: bool = True


def cell_center(col: int, row: int, cell_width: float, cell_height: float) -> tuple[float, float]:
    return (col * cell_width + cell_width / 2, row * cell_height + cell_height / 2)


def pointer_cell(x: float, y: float, cell_width: float, cell_height: float) -> tuple[int, int]:
    """Return ``(col, row)`` of the cell containing a pixel position."""
    return (math.floor(x / cell_width), math.floor(y / cell_height))


def occupancy(
    rows: int,
    cols: int,
    rects: Iterable[Rect],
    cell_width: float,
    cell_height: float,
) -> list[list[bool]]:
    """Return a ``rows x cols`` mask of cells whose centre lies in any rect.

    A centre is inside a rect iff its x and y are both inside the rect's
    closed interval on that axis, so each rect reduces to a set of covered
    columns times a set of covered rows.
    """
    inside = [[False] * cols for _ in range(rows)]
    centres_x = [c * cell_width + cell_width / 2 for c in range(cols)]
    centres_y = [r * cell_height + cell_height / 2 for r in range(rows)]

    for rect in rects:
        hit_cols = [c for c, px in enumerate(centres_x) if rect.x <= px <= rect.x + rect.width]
        if not hit_cols:
            continue
        for r, py in enumerate(centres_y):
            if rect.y <= py <= rect.y + rect.height:
                row = inside[r]
                for c in hit_cols:
                    row[c] = True
    return inside


def draw_box_border(grid: Grid, rect: Rect, cell_width: float, cell_height: float) -> None:
    """Outline *rect* on the grid.  Corners are written last so they win."""
    start_col = math.floor(rect.x / cell_width)
    start_row = math.floor(rect.y / cell_height)
    end_col = math.floor((rect.x + rect.width) / cell_width)
    end_row = math.floor((rect.y + rect.height) / cell_height)

    for col in range(max(start_col, 0), min(end_col, grid.cols - 1) + 1):
        grid.set(start_row, col, Glyph.BORDER_H)
        grid.set(end_row, col, Glyph.BORDER_H)

    for row in range(max(start_row, 0), min(end_row, grid.rows - 1) + 1):
        grid.set(row, start_col, Glyph.BORDER_V)
        grid.set(row, end_col, Glyph.BORDER_V)

    for row, col in (
        (start_row, start_col),
        (start_row, end_col),
        (end_row, start_col),
        (end_row, end_col),
    ):
        grid.set(row, col, Glyph.BORDER_CORNER)


def update_grid(
    grid: Grid,
    rects: list[Rect],
    pointer: PointerState | None,
    cell_size: tuple[float, float],
    now: float,
    trail_duration_ms: float = TRAIL_DURATION_MS,
) -> None:
    """Reclassify every cell of *grid* for the frame at time *now* (ms).

    *rects* are the current box rectangles in registry order; borders are
    drawn in that order, so at shared edges the later box wins.
    """
    cell_width, cell_height = cell_size
    rows, cols = grid.rows, grid.cols
    inside = occupancy(rows, cols, rects, cell_width, cell_height)

    # Background vs. inside-box
    for y in range(rows):
        row_inside = inside[y]
        grid.cells[y] = [Glyph.BLANK if row_inside[x] else Glyph.BACKGROUND for x in range(cols)]

    # Fresh pointer stamp
    if pointer is not None and pointer.moved:
        col, row = pointer_cell(pointer.x, pointer.y, cell_width, cell_height)
        if grid.in_bounds(row, col) and not inside[row][col]:
            grid.cells[row][col] = Glyph.TRAIL
            grid.stamps[row][col] = now
        pointer.moved = False

    # Trail decay
    for y in range(rows):
        stamps = grid.stamps[y]
        cells = grid.cells[y]
        row_inside = inside[y]
        for x in range(cols):
            stamped_at = stamps[x]
            if stamped_at is None:
                continue
            if now - stamped_at <= trail_duration_ms and not row_inside[x]:
                if cells[x] is Glyph.BACKGROUND:
                    cells[x] = Glyph.TRAIL
            else:
                stamps[x] = None

    # Borders on top of everything
    for rect in rects:
        draw_box_border(grid, rect, cell_width, cell_height)
