"""Compose the screen: backdrop text, navigation strip, then panel content.

The engine draws box borders into the grid itself; the compositor fills
each box's interior with its panel's text and marks the focused panel.
Interiors are derived from the same cell arithmetic as the borders so the
two always line up.
"""

from __future__ import annotations

import math

from pi.backdrop.boxes import Box, BoxElement, BoxRegistry
from pi.backdrop.document import Document, Panel
from pi.backdrop.metrics import CHARS_PER_CELL
from pi.backdrop.utils import slice_by_column, truncate_to_width

# Drawn on the top border of the focused panel
FOCUS_MARKER = "\u00bb"


def fit_lines(lines: list[str], columns: int, rows: int) -> list[str]:
    """Pad or cut *lines* to exactly *rows* lines of *columns* columns."""
    fitted = [truncate_to_width(line, columns, pad=True) for line in lines[:rows]]
    while len(fitted) < rows:
        fitted.append(" " * columns)
    return fitted


def composite_line_at(base_line: str, overlay_line: str, col: int, overlay_width: int, term_width: int) -> str:
    """Merge *overlay_line* onto *base_line* at column *col*.

    The base is split into ``[0, col)`` and ``[col + overlay_width,
    term_width)``; the overlay, padded to its width, fills the gap.
    """
    if overlay_width <= 0 or col >= term_width:
        return base_line
    overlay_width = min(overlay_width, term_width - col)
    after_start = col + overlay_width

    before = slice_by_column(base_line, 0, col)
    after = slice_by_column(base_line, after_start, max(0, term_width - after_start))
    overlay = truncate_to_width(overlay_line, overlay_width, pad=True)
    return before + overlay + after


def interior(box: Box, cell_size: tuple[float, float]) -> tuple[int, int, int, int]:
    """Return ``(col, row, width, height)`` in characters inside *box*'s border."""
    cell_width, cell_height = cell_size
    rect = box.rect
    start_col = math.floor(rect.x / cell_width)
    start_row = math.floor(rect.y / cell_height)
    end_col = math.floor((rect.x + rect.width) / cell_width)
    end_row = math.floor((rect.y + rect.height) / cell_height)
    col = (start_col + 1) * CHARS_PER_CELL
    width = max(0, end_col * CHARS_PER_CELL - col)
    return col, start_row + 1, width, max(0, end_row - start_row - 1)


def compose_frame(
    base_lines: list[str],
    columns: int,
    rows: int,
    document: Document,
    registry: BoxRegistry,
    cell_size: tuple[float, float],
    focused: BoxElement | None = None,
) -> list[str]:
    """Build the final terminal lines for one frame.

    *focused* is the element holding keyboard focus, if any; its panel gets
    :data:`FOCUS_MARKER` on the first interior column of its top border.
    """
    lines = fit_lines(base_lines, columns, rows)

    for index, nav_line in enumerate(document.nav.render_lines(columns)[:rows]):
        lines[index] = nav_line

    ordered = sorted(enumerate(registry), key=lambda item: (item[1].element.z_index, item[0]))
    for _, box in ordered:
        panel = box.element
        if not isinstance(panel, Panel):
            continue
        col, row, width, height = interior(box, cell_size)
        if width <= 0 or col < 0:
            continue
        if panel is focused and 0 <= row - 1 < rows:
            lines[row - 1] = composite_line_at(lines[row - 1], FOCUS_MARKER, col, 1, columns)
        if panel.image or height <= 0:
            continue
        for offset, text in enumerate(panel.render_lines(width, height)):
            target = row + offset
            if 0 <= target < rows:
                lines[target] = composite_line_at(lines[target], text, col, width, columns)
    return lines
