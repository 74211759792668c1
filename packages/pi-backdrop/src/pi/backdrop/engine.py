"""The backdrop engine: all mutable state, advanced one frame at a time.

``BackdropEngine`` owns the grid, the box registry, the pointer state, the
drag session and the edit controller.  Input arrives as commands through
:meth:`BackdropEngine.submit` and is applied, in order, at the start of the
next :meth:`BackdropEngine.step`, which then refreshes dynamic box geometry,
reclassifies the grid and returns the rendered text.  Nothing here knows
about terminals; geometry comes from an :class:`OverlaySource`.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from pi.backdrop.boxes import BoxElement, BoxRegistry
from pi.backdrop.commands import (
    Command,
    CommandQueue,
    DoubleClick,
    FocusLost,
    FontChanged,
    KeyPress,
    PointerDown,
    PointerLeave,
    PointerMove,
    PointerUp,
    Resize,
    StructureChanged,
)
from pi.backdrop.drag import DragController
from pi.backdrop.editing import EditController
from pi.backdrop.grid import DEFAULT_GLYPHS, GlyphSet, Grid, grid_dimensions
from pi.backdrop.metrics import MetricsProvider, check_cell_size
from pi.backdrop.occlusion import TRAIL_DURATION_MS, PointerState, update_grid
from pi.backdrop.render import render

logger = logging.getLogger(__name__)


class OverlaySource(Protocol):
    """Where the engine finds overlay elements and the reserved top strip."""

    def overlay_elements(self) -> list[BoxElement]: ...

    def nav_bottom(self) -> float: ...


class BackdropEngine:
    """Grid simulation plus the box interaction model."""

    def __init__(
        self,
        metrics: MetricsProvider,
        source: OverlaySource,
        viewport: tuple[float, float],
        *,
        trail_duration_ms: float = TRAIL_DURATION_MS,
        glyphs: GlyphSet = DEFAULT_GLYPHS,
    ) -> None:
        self.metrics = metrics
        self.source = source
        self.viewport: tuple[float, float] = (float(viewport[0]), float(viewport[1]))
        self.trail_duration_ms = trail_duration_ms
        self.glyphs = glyphs

        self.cell_size: tuple[float, float] = (0.0, 0.0)
        self.grid = Grid()
        self.registry = BoxRegistry()
        self.pointer: PointerState | None = None
        self.queue = CommandQueue()
        self.drag = DragController(
            self.registry,
            cell_size=lambda: self.cell_size,
            viewport=lambda: self.viewport,
            nav_bottom=self.source.nav_bottom,
        )
        self.editor = EditController(self.registry)

        # Called with keys neither the editor nor the focus ring consumed
        self.on_unhandled_key: Callable[[KeyPress], None] | None = None

        self.frame_count = 0

        self.rebuild_grid()
        self.rebuild_boxes()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self.grid.rows

    @property
    def cols(self) -> int:
        return self.grid.cols

    def rebuild_grid(self) -> None:
        """Re-measure the cell size and allocate a fresh grid.

        Raises :class:`~pi.backdrop.metrics.MetricsError` if the measured
        size is unusable; no grid is built in that case.
        """
        cell_width, cell_height = self.metrics.measure()
        check_cell_size(cell_width, cell_height)
        self.cell_size = (cell_width, cell_height)
        rows, cols = grid_dimensions(self.viewport[0], self.viewport[1], cell_width, cell_height)
        self.grid = Grid(rows, cols)
        logger.info(
            "Grid rebuilt: %dx%d cells of %.1fx%.1f px for a %.0fx%.0f viewport",
            cols,
            rows,
            cell_width,
            cell_height,
            self.viewport[0],
            self.viewport[1],
        )

    def rebuild_boxes(self) -> None:
        self.registry.rebuild(self.source.overlay_elements())
        self.drag.cancel_if_detached()
        editor = self.editor
        if editor.active is not None and self.registry.find(editor.active) is None:
            editor.active = None
        if editor.focused is not None and self.registry.find(editor.focused) is None:
            editor.focused = None

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def submit(self, command: Command) -> None:
        self.queue.push(command)

    def step(self, now: float) -> str:
        """Advance one frame at time *now* (milliseconds) and render it."""
        for command in self.queue.drain():
            self._apply(command)

        self.registry.refresh()
        update_grid(
            self.grid,
            [box.rect for box in self.registry],
            self.pointer,
            self.cell_size,
            now,
            self.trail_duration_ms,
        )
        self.frame_count += 1
        return render(self.grid, self.glyphs)

    # ------------------------------------------------------------------
    # Command handling
    # ------------------------------------------------------------------

    def _apply(self, command: Command) -> None:  # noqa: C901
        if isinstance(command, PointerMove):
            self.pointer = PointerState(command.x, command.y)
            self.drag.move(command.x, command.y)
        elif isinstance(command, PointerLeave):
            self.pointer = None
        elif isinstance(command, PointerDown):
            self.editor.press(command.x, command.y)
            self.drag.press(command.x, command.y, command.button, command.detail)
        elif isinstance(command, PointerUp):
            self.drag.release()
        elif isinstance(command, DoubleClick):
            self.editor.begin_at(command.x, command.y)
        elif isinstance(command, KeyPress):
            if not self.editor.handle_key(command.key, command.text):
                if self.on_unhandled_key is not None:
                    self.on_unhandled_key(command)
        elif isinstance(command, FocusLost):
            self.editor.blur()
        elif isinstance(command, Resize):
            self.viewport = (float(command.width), float(command.height))
            self.rebuild_grid()
            self.rebuild_boxes()
        elif isinstance(command, FontChanged):
            self.rebuild_grid()
            self.rebuild_boxes()
        elif isinstance(command, StructureChanged):
            self.rebuild_boxes()
