"""Pixel-space geometry primitives shared by the engine and front-ends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in pixel space."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, px: float, py: float) -> bool:
        """Return whether a point lies inside the closed rectangle.

        All four edges are inclusive: a point exactly on a border counts.
        """
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


class RectSource(Protocol):
    """Anything that can report its current rendered rectangle."""

    def rect(self) -> Rect: ...
