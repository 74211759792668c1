"""Drag controller: turns pointer motion into snapped, clamped box moves."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

from pi.backdrop.boxes import Box, BoxRegistry

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 0
DRAG_Z_INDEX = 10


@dataclass
class DragSession:
    box: Box
    offset_x: float
    offset_y: float
    previous_z: int


def snap_to_grid(value: float, step: float) -> float:
    """Round *value* to the nearest multiple of *step* (halves round up)."""
    return math.floor(value / step + 0.5) * step


def clamp_position(
    x: float,
    y: float,
    width: float,
    height: float,
    viewport_width: float,
    viewport_height: float,
    top: float = 0.0,
    step: tuple[float, float] | None = None,
) -> tuple[float, float]:
    """Keep a ``width x height`` box inside the viewport, below *top*.

    With *step*, the upper bounds are rounded down to whole multiples of it
    so a box pushed against the right or bottom edge stays on the grid.
    When the box is larger than the available space the result is the
    minimum bound on that axis.
    """
    limit_x = viewport_width - width
    limit_y = viewport_height - height
    if step is not None:
        limit_x = math.floor(limit_x / step[0]) * step[0]
        limit_y = math.floor(limit_y / step[1]) * step[1]
    max_x = max(0.0, limit_x)
    max_y = max(top, limit_y)
    return (min(max(x, 0.0), max_x), min(max(y, top), max_y))


class DragController:
    """IDLE/DRAGGING state machine for at most one dragged box."""

    def __init__(
        self,
        registry: BoxRegistry,
        cell_size: Callable[[], tuple[float, float]],
        viewport: Callable[[], tuple[float, float]],
        nav_bottom: Callable[[], float],
    ) -> None:
        self._registry = registry
        self._cell_size = cell_size
        self._viewport = viewport
        self._nav_bottom = nav_bottom
        self.session: DragSession | None = None

    @property
    def dragging(self) -> bool:
        return self.session is not None

    def press(self, x: float, y: float, button: int = PRIMARY_BUTTON, detail: int = 1) -> bool:
        """Start a drag if the press lands on a movable, non-editing box.

        Only single primary-button clicks start a drag; the second press of
        a double click does not.
        """
        if button != PRIMARY_BUTTON or detail > 1:
            return False
        box = self._registry.hit_test(x, y)
        if box is None or not box.movable:
            return False
        element = box.element
        if element.editable or element.editing:
            return False

        box.refresh()
        self.session = DragSession(
            box=box,
            offset_x=x - box.rect.x,
            offset_y=y - box.rect.y,
            previous_z=element.z_index,
        )
        element.z_index = DRAG_Z_INDEX
        element.freeze_width()
        logger.debug(
            "Drag start at (%.1f, %.1f) offset (%.1f, %.1f)",
            x,
            y,
            self.session.offset_x,
            self.session.offset_y,
        )
        return True

    def move(self, x: float, y: float) -> None:
        session = self.session
        if session is None:
            return
        box = session.box
        cell_width, cell_height = self._cell_size()
        viewport_width, viewport_height = self._viewport()

        snapped_x = snap_to_grid(x - session.offset_x, cell_width)
        snapped_y = snap_to_grid(y - session.offset_y, cell_height)
        new_x, new_y = clamp_position(
            snapped_x,
            snapped_y,
            box.rect.width,
            box.rect.height,
            viewport_width,
            viewport_height,
            self._nav_bottom(),
            step=(cell_width, cell_height),
        )
        box.element.move_to(new_x, new_y)
        box.refresh()

    def release(self) -> None:
        session = self.session
        if session is None:
            return
        session.box.element.z_index = session.previous_z
        self.session = None
        logger.debug("Drag end at (%.1f, %.1f)", session.box.rect.x, session.box.rect.y)

    def cancel_if_detached(self) -> None:
        """End the session when its box no longer exists in the registry."""
        if self.session is not None and self._registry.find(self.session.box.element) is None:
            self.release()
