"""Toolkit-free overlay elements for engine tests.

``FakeBox`` is positioned directly in pixels, so tests can state exact
rectangles without going through a document's character size.
"""

from __future__ import annotations

from pi.backdrop.geometry import Rect


class FakeBox:
    def __init__(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        kind: str = "dynamic",
        text: str = "",
        image: bool = False,
        z_index: int = 5,
    ) -> None:
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.kind = kind
        self.text = text
        self.image = image
        self.z_index = z_index
        self.focusable = False
        self.editable = False
        self.editing = False
        self.original_content: str | None = None
        self.frozen = False

    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def freeze_width(self) -> None:
        self.frozen = True


class FakeSource:
    """Overlay source backed by a plain list."""

    def __init__(self, elements: list[FakeBox] | None = None, nav_bottom: float = 0.0) -> None:
        self.elements = list(elements or [])
        self._nav_bottom = nav_bottom

    def overlay_elements(self) -> list[FakeBox]:
        return list(self.elements)

    def nav_bottom(self) -> float:
        return self._nav_bottom
