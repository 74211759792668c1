"""Tests for pi.backdrop.geometry.Rect."""

from __future__ import annotations

import dataclasses

import pytest

from pi.backdrop.geometry import Rect


class TestRect:
    def test_right_and_bottom(self) -> None:
        r = Rect(10, 20, 30, 40)
        assert r.right == 40
        assert r.bottom == 60

    def test_contains_interior_point(self) -> None:
        assert Rect(0, 0, 10, 10).contains(5, 5)

    @pytest.mark.parametrize("point", [(0, 0), (10, 0), (0, 10), (10, 10), (10, 5), (5, 0)])
    def test_edges_are_inclusive(self, point: tuple[float, float]) -> None:
        assert Rect(0, 0, 10, 10).contains(*point)

    @pytest.mark.parametrize("point", [(-0.1, 5), (10.1, 5), (5, -0.1), (5, 10.1)])
    def test_outside_points(self, point: tuple[float, float]) -> None:
        assert not Rect(0, 0, 10, 10).contains(*point)

    def test_frozen(self) -> None:
        r = Rect(0, 0, 1, 1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            r.x = 5  # type: ignore[misc]
