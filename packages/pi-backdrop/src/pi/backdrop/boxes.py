"""Box registry: the overlay regions the grid has to avoid.

Each overlay element is wrapped in a :class:`Box` record holding the pixel
rectangle the engine works with.  Elements are opaque to the engine; all it
needs is the :class:`BoxElement` surface below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Protocol

from pi.backdrop.geometry import Rect

logger = logging.getLogger(__name__)

DYNAMIC = "dynamic"
STATIC = "static"


class BoxElement(Protocol):
    """An overlay element as seen by the engine.

    ``kind`` is ``"dynamic"`` (draggable, editable) or ``"static"``.
    """

    kind: str
    focusable: bool
    editable: bool
    editing: bool
    original_content: str | None
    z_index: int
    text: str
    image: bool

    def rect(self) -> Rect: ...

    def move_to(self, x: float, y: float) -> None: ...

    def freeze_width(self) -> None: ...


@dataclass
class Box:
    element: BoxElement
    rect: Rect
    movable: bool

    def refresh(self) -> None:
        self.rect = self.element.rect()


class BoxRegistry:
    """Ordered collection of boxes, rebuilt from the current overlay elements."""

    def __init__(self) -> None:
        self._boxes: list[Box] = []

    def __iter__(self) -> Iterator[Box]:
        return iter(self._boxes)

    def __len__(self) -> int:
        return len(self._boxes)

    @property
    def boxes(self) -> list[Box]:
        return list(self._boxes)

    def rebuild(self, elements: list[BoxElement]) -> None:
        """Replace every record with one per element, in document order.

        Also normalises element state: every element becomes focusable and
        static elements are forced out of edit mode.
        """
        boxes: list[Box] = []
        for element in elements:
            movable = element.kind == DYNAMIC
            element.focusable = True
            if not movable:
                element.kind = STATIC
                element.editable = False
                element.editing = False
                element.original_content = None
            boxes.append(Box(element=element, rect=element.rect(), movable=movable))
        self._boxes = boxes
        logger.debug(
            "Box registry rebuilt: %d boxes (%d movable)",
            len(boxes),
            sum(1 for b in boxes if b.movable),
        )

    def refresh(self) -> None:
        """Re-read the rectangle of every dynamic box.

        Static boxes keep the geometry captured at rebuild time.
        """
        for box in self._boxes:
            if box.movable:
                box.refresh()

    def find(self, element: BoxElement) -> Box | None:
        for box in self._boxes:
            if box.element is element:
                return box
        return None

    def contains(self, px: float, py: float) -> bool:
        """Return whether the point lies inside any box (edges inclusive)."""
        for box in self._boxes:
            if box.rect.contains(px, py):
                return True
        return False

    def hit_test(self, px: float, py: float) -> Box | None:
        """Return the topmost box under a point, or ``None``.

        Higher ``z_index`` wins; on ties the box later in document order wins.
        """
        best: Box | None = None
        for box in self._boxes:
            if not box.rect.contains(px, py):
                continue
            if best is None or box.element.z_index >= best.element.z_index:
                best = box
        return best
