"""Tests for pi.backdrop.boxes.BoxRegistry."""

from __future__ import annotations

from pi.backdrop.boxes import BoxRegistry
from pi.backdrop.geometry import Rect

from .fakes import FakeBox


class TestRebuild:
    def test_one_box_per_element_in_order(self) -> None:
        a, b = FakeBox(0, 0, 10, 10), FakeBox(20, 0, 10, 10, kind="static")
        registry = BoxRegistry()
        registry.rebuild([a, b])
        assert [box.element for box in registry] == [a, b]
        assert len(registry) == 2
        assert [box.movable for box in registry] == [True, False]

    def test_elements_become_focusable(self) -> None:
        el = FakeBox(0, 0, 10, 10)
        BoxRegistry().rebuild([el])
        assert el.focusable is True

    def test_static_elements_leave_edit_mode(self) -> None:
        el = FakeBox(0, 0, 10, 10, kind="static")
        el.editable = True
        el.editing = True
        el.original_content = "x"
        BoxRegistry().rebuild([el])
        assert (el.editable, el.editing, el.original_content) == (False, False, None)

    def test_unknown_kind_is_static(self) -> None:
        el = FakeBox(0, 0, 10, 10, kind="sticky")
        registry = BoxRegistry()
        registry.rebuild([el])
        assert el.kind == "static"
        assert registry.boxes[0].movable is False

    def test_empty_rebuild(self) -> None:
        registry = BoxRegistry()
        registry.rebuild([FakeBox(0, 0, 1, 1)])
        registry.rebuild([])
        assert len(registry) == 0


class TestRefresh:
    def test_dynamic_boxes_follow_their_element(self) -> None:
        el = FakeBox(0, 0, 10, 10)
        registry = BoxRegistry()
        registry.rebuild([el])
        el.move_to(30, 40)
        registry.refresh()
        assert registry.boxes[0].rect == Rect(30, 40, 10, 10)

    def test_static_boxes_keep_rebuild_geometry(self) -> None:
        el = FakeBox(0, 0, 10, 10, kind="static")
        registry = BoxRegistry()
        registry.rebuild([el])
        el.move_to(30, 40)
        registry.refresh()
        assert registry.boxes[0].rect == Rect(0, 0, 10, 10)


class TestHitTest:
    def test_miss(self) -> None:
        registry = BoxRegistry()
        registry.rebuild([FakeBox(0, 0, 10, 10)])
        assert registry.hit_test(50, 50) is None
        assert registry.contains(50, 50) is False

    def test_edge_hit(self) -> None:
        registry = BoxRegistry()
        registry.rebuild([FakeBox(0, 0, 10, 10)])
        assert registry.contains(10, 10) is True

    def test_higher_z_wins(self) -> None:
        top = FakeBox(0, 0, 10, 10, z_index=8)
        below = FakeBox(0, 0, 10, 10)
        registry = BoxRegistry()
        registry.rebuild([top, below])
        hit = registry.hit_test(5, 5)
        assert hit is not None and hit.element is top

    def test_later_box_wins_ties(self) -> None:
        a, b = FakeBox(0, 0, 10, 10), FakeBox(5, 5, 10, 10)
        registry = BoxRegistry()
        registry.rebuild([a, b])
        hit = registry.hit_test(7, 7)
        assert hit is not None and hit.element is b

    def test_find(self) -> None:
        el = FakeBox(0, 0, 10, 10)
        registry = BoxRegistry()
        registry.rebuild([el])
        assert registry.find(el) is registry.boxes[0]
        assert registry.find(FakeBox(0, 0, 1, 1)) is None
