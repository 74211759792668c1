"""Tests for pi.backdrop.drag -- snapping, clamping and the drag session."""

from __future__ import annotations

import pytest

from pi.backdrop.boxes import BoxRegistry
from pi.backdrop.drag import DRAG_Z_INDEX, DragController, clamp_position, snap_to_grid
from pi.backdrop.geometry import Rect

from .fakes import FakeBox


def make_controller(
    elements: list[FakeBox],
    viewport: tuple[float, float] = (1200.0, 240.0),
    nav_bottom: float = 0.0,
) -> tuple[DragController, BoxRegistry]:
    registry = BoxRegistry()
    registry.rebuild(elements)
    controller = DragController(
        registry,
        cell_size=lambda: (10.0, 10.0),
        viewport=lambda: viewport,
        nav_bottom=lambda: nav_bottom,
    )
    return controller, registry


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestSnapToGrid:
    @pytest.mark.parametrize(
        "value,expected",
        [(47, 50), (22, 20), (15, 20), (14.9, 10), (0, 0), (-4, 0), (-6, -10)],
    )
    def test_nearest_multiple(self, value: float, expected: float) -> None:
        assert snap_to_grid(value, 10) == expected


class TestClampPosition:
    def test_inside_is_unchanged(self) -> None:
        assert clamp_position(50, 50, 40, 20, 1200, 240) == (50, 50)

    def test_clamps_each_side(self) -> None:
        assert clamp_position(-30, -30, 40, 20, 1200, 240) == (0, 0)
        assert clamp_position(5000, 5000, 40, 20, 1200, 240) == (1160, 220)

    def test_top_bound(self) -> None:
        assert clamp_position(10, 5, 40, 20, 1200, 240, top=18) == (10, 18)

    def test_oversized_box_gets_minimum_bound(self) -> None:
        assert clamp_position(300, 300, 2000, 500, 1200, 240, top=20) == (0, 20)

    def test_step_rounds_upper_bounds_down(self) -> None:
        assert clamp_position(5000, 5000, 40, 20, 1195, 235) == (1155, 215)
        assert clamp_position(5000, 5000, 40, 20, 1195, 235, step=(10, 10)) == (1150, 210)


# ---------------------------------------------------------------------------
# DragController
# ---------------------------------------------------------------------------


class TestDragSession:
    def test_drag_scenario_snaps_to_cells(self) -> None:
        """A 40x20 box dragged from (3,3) to (47,22) lands on (50,20)."""
        box = FakeBox(3, 3, 40, 20)
        drag, registry = make_controller([box])
        assert drag.press(3, 3) is True
        drag.move(47, 22)
        assert registry.boxes[0].rect == Rect(50, 20, 40, 20)

    def test_grab_offset_is_kept(self) -> None:
        box = FakeBox(0, 0, 40, 20)
        drag, _ = make_controller([box])
        drag.press(20, 10)
        drag.move(120, 60)
        assert (box.x, box.y) == (100, 50)

    def test_drag_raises_then_restores_z_index(self) -> None:
        box = FakeBox(0, 0, 40, 20, z_index=3)
        drag, _ = make_controller([box])
        drag.press(5, 5)
        assert box.z_index == DRAG_Z_INDEX
        assert drag.dragging
        drag.release()
        assert box.z_index == 3
        assert not drag.dragging

    def test_press_freezes_width(self) -> None:
        box = FakeBox(0, 0, 40, 20)
        drag, _ = make_controller([box])
        drag.press(5, 5)
        assert box.frozen is True

    def test_move_without_session_is_ignored(self) -> None:
        box = FakeBox(0, 0, 40, 20)
        drag, _ = make_controller([box])
        drag.move(100, 100)
        assert (box.x, box.y) == (0, 0)

    @pytest.mark.parametrize("button,detail", [(1, 1), (2, 1), (0, 2)])
    def test_only_single_primary_presses_start(self, button: int, detail: int) -> None:
        drag, _ = make_controller([FakeBox(0, 0, 40, 20)])
        assert drag.press(5, 5, button, detail) is False

    def test_press_on_background_does_nothing(self) -> None:
        drag, _ = make_controller([FakeBox(0, 0, 40, 20)])
        assert drag.press(500, 100) is False

    def test_static_box_is_not_draggable(self) -> None:
        drag, _ = make_controller([FakeBox(0, 0, 40, 20, kind="static")])
        assert drag.press(5, 5) is False

    def test_editing_box_is_not_draggable(self) -> None:
        box = FakeBox(0, 0, 40, 20)
        box.editing = True
        drag, _ = make_controller([box])
        assert drag.press(5, 5) is False

    def test_topmost_box_is_dragged(self) -> None:
        under = FakeBox(0, 0, 40, 20)
        over = FakeBox(10, 10, 40, 20, z_index=7)
        drag, _ = make_controller([over, under])
        drag.press(15, 15)
        drag.move(215, 115)
        assert (over.x, over.y) == (210, 110)
        assert (under.x, under.y) == (0, 0)

    def test_detached_box_cancels_session(self) -> None:
        box = FakeBox(0, 0, 40, 20, z_index=4)
        drag, registry = make_controller([box])
        drag.press(5, 5)
        registry.rebuild([])
        drag.cancel_if_detached()
        assert not drag.dragging
        assert box.z_index == 4


class TestDragClamp:
    @pytest.mark.parametrize("px", [-500, -1, 0, 3, 600, 1199, 1200, 5000])
    @pytest.mark.parametrize("py", [-500, 0, 17, 18, 120, 240, 5000])
    def test_box_stays_in_viewport_below_nav(self, px: float, py: float) -> None:
        box = FakeBox(100, 100, 40, 20)
        drag, registry = make_controller([box], nav_bottom=18)
        drag.press(110, 110)
        drag.move(px, py)
        rect = registry.boxes[0].rect
        assert rect.y >= 18
        assert rect.x >= 0
        assert rect.right <= 1200
        assert rect.bottom <= 240

    def test_right_edge_stays_on_cell_boundary(self) -> None:
        box = FakeBox(100, 100, 40, 20)
        drag, registry = make_controller([box], viewport=(1195.0, 235.0))
        drag.press(110, 110)
        drag.move(5000, 5000)
        assert (registry.boxes[0].rect.x, registry.boxes[0].rect.y) == (1150, 210)

    def test_oversized_box_pins_to_top_left(self) -> None:
        box = FakeBox(0, 20, 2000, 500)
        drag, registry = make_controller([box], nav_bottom=20)
        drag.press(5, 25)
        drag.move(900, 900)
        assert (registry.boxes[0].rect.x, registry.boxes[0].rect.y) == (0, 20)
