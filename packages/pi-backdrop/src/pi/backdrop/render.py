"""Serialise a grid into a single block of text."""

from __future__ import annotations

from pi.backdrop.grid import DEFAULT_GLYPHS, Glyph, GlyphSet, Grid


def render_lines(grid: Grid, glyphs: GlyphSet = DEFAULT_GLYPHS) -> list[str]:
    """Return one string per grid row, ``2 * cols`` characters each."""
    text = {glyph: glyphs.text(glyph) for glyph in Glyph}
    return ["".join(text[g] for g in row) for row in grid.cells]


def render(grid: Grid, glyphs: GlyphSet = DEFAULT_GLYPHS) -> str:
    """Row-major text of the grid; every row is followed by one line break."""
    return "".join(line + "\n" for line in render_lines(grid, glyphs))
