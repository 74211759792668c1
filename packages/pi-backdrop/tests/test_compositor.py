"""Tests for pi.backdrop.compositor."""

from __future__ import annotations

from pi.backdrop.boxes import BoxRegistry
from pi.backdrop.compositor import (
    FOCUS_MARKER,
    compose_frame,
    composite_line_at,
    fit_lines,
    interior,
)
from pi.backdrop.document import Document, NavStrip, Panel

CHAR = (5.0, 10.0)
CELL = (10.0, 10.0)


def make_scene(*panels: Panel, nav_rows: int = 1) -> tuple[Document, BoxRegistry]:
    doc = Document(lambda: CHAR, NavStrip(title="pi", rows=nav_rows))
    for panel in panels:
        doc.add(panel)
    registry = BoxRegistry()
    registry.rebuild(doc.overlay_elements())
    return doc, registry


def background(columns: int, rows: int) -> list[str]:
    return [". " * (columns // 2) for _ in range(rows)]


class TestLineHelpers:
    def test_fit_lines_pads_and_cuts(self) -> None:
        assert fit_lines(["abcdef", "x"], 4, 3) == ["abcd", "x   ", "    "]

    def test_composite_line_at(self) -> None:
        assert composite_line_at("abcdefgh", "XY", 2, 2, 8) == "abXYefgh"

    def test_composite_pads_short_overlay(self) -> None:
        assert composite_line_at("abcdefgh", "X", 2, 3, 8) == "abX  fgh"

    def test_composite_clips_at_terminal_edge(self) -> None:
        assert composite_line_at("abcdefgh", "XYZW", 6, 4, 8) == "abcdefXY"

    def test_composite_beyond_edge_is_noop(self) -> None:
        assert composite_line_at("abcd", "XY", 4, 2, 4) == "abcd"

    def test_composite_over_wide_characters(self) -> None:
        assert composite_line_at("日本語", "X", 1, 1, 6) == " X本語"


class TestInterior:
    def test_interior_inside_border_cells(self) -> None:
        _, registry = make_scene(Panel("hi", col=4, row=3))
        # Rect 20,30 30x20 px: cells 2..5 by 3..5
        assert interior(registry.boxes[0], CELL) == (6, 4, 4, 1)


class TestComposeFrame:
    def test_size_is_exact(self) -> None:
        doc, registry = make_scene()
        lines = compose_frame(background(40, 20), 30, 8, doc, registry, CELL)
        assert len(lines) == 8
        assert all(len(line) == 30 for line in lines)

    def test_short_base_is_padded(self) -> None:
        doc, registry = make_scene(nav_rows=0)
        lines = compose_frame(["ab"], 4, 2, doc, registry, CELL)
        assert lines == ["ab  ", "    "]

    def test_nav_strip_on_top(self) -> None:
        doc, registry = make_scene()
        lines = compose_frame(background(40, 10), 40, 10, doc, registry, CELL)
        assert lines[0].startswith(" pi ")
        assert lines[1] == background(40, 1)[0]

    def test_panel_text_inside_box(self) -> None:
        doc, registry = make_scene(Panel("hi", col=4, row=3))
        lines = compose_frame(background(40, 10), 40, 10, doc, registry, CELL)
        assert lines[4][6:10] == " hi "
        assert lines[4][:6] == ". . . "
        assert lines[4][10:] == background(40, 1)[0][10:]

    def test_higher_z_panel_drawn_last(self) -> None:
        low = Panel("AAAAAA", col=4, row=3)
        high = Panel("BBBBBB", col=4, row=3)
        high.z_index = 9
        doc, registry = make_scene(high, low)
        lines = compose_frame(background(40, 10), 40, 10, doc, registry, CELL)
        assert "BBBBBB" in lines[4]
        assert "A" not in lines[4]

    def test_image_panels_have_no_text(self) -> None:
        doc, registry = make_scene(Panel("img", col=4, row=3, image=True))
        lines = compose_frame(background(40, 10), 40, 10, doc, registry, CELL)
        assert "img" not in lines[4]

    def test_panel_below_screen_is_clipped(self) -> None:
        doc, registry = make_scene(Panel("x\ny\nz", col=4, row=8))
        lines = compose_frame(background(40, 10), 40, 10, doc, registry, CELL)
        assert len(lines) == 10
        assert " x" in lines[9]

    def test_focused_panel_is_marked(self) -> None:
        panel = Panel("hi", col=4, row=3)
        doc, registry = make_scene(panel, Panel("other", col=20, row=6))
        lines = compose_frame(background(40, 10), 40, 10, doc, registry, CELL, panel)
        # Top border row 3, first interior column 6
        assert lines[3][6] == FOCUS_MARKER
        assert FOCUS_MARKER not in "".join(lines[:3] + lines[4:])

    def test_no_marker_without_focus(self) -> None:
        doc, registry = make_scene(Panel("hi", col=4, row=3))
        lines = compose_frame(background(40, 10), 40, 10, doc, registry, CELL)
        assert FOCUS_MARKER not in "".join(lines)
