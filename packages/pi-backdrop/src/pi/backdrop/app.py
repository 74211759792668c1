"""Full-screen terminal front-end for the backdrop engine.

``BackdropApp`` turns terminal input (SGR mouse reports, focus reports,
keys, pastes and cell-size replies) into engine commands, runs the engine at
a fixed frame rate on the asyncio loop, and writes each frame to the
terminal as a differential update: only rows that changed are rewritten.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from pi.backdrop.commands import (
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
from pi.backdrop.compositor import compose_frame
from pi.backdrop.config import BackdropSettings
from pi.backdrop.document import Document
from pi.backdrop.engine import BackdropEngine
from pi.backdrop.input import (
    BRACKETED_PASTE_END,
    BRACKETED_PASTE_START,
    ClickTracker,
    MouseEvent,
    parse_focus,
    parse_mouse,
)
from pi.backdrop.keys import is_key_release, key_text, parse_key
from pi.backdrop.metrics import TerminalMetrics
from pi.backdrop.terminal import Terminal

logger = logging.getLogger(__name__)

QUIT_KEYS = ("q", "ctrl+c")


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class BackdropApp:
    """Owns the engine, the document and the terminal for one session."""

    def __init__(
        self,
        terminal: Terminal,
        metrics: TerminalMetrics,
        document: Document,
        settings: BackdropSettings | None = None,
        *,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self.terminal = terminal
        self.metrics = metrics
        self.document = document
        self.settings = settings or BackdropSettings()
        self._clock = clock

        self.engine = BackdropEngine(
            metrics,
            document,
            self._viewport(),
            trail_duration_ms=self.settings.trail_duration_ms,
            glyphs=self.settings.glyphs,
        )
        self.engine.on_unhandled_key = self._on_unhandled_key
        document.on_change(lambda: self.engine.submit(StructureChanged()))

        self.clicks = ClickTracker(interval_ms=self.settings.double_click_ms)

        self._previous_lines: list[str] = []
        self._previous_size: tuple[int, int] = (0, 0)
        self._force_full = True
        self._full_redraw_count = 0

        self._stopped = True
        self._done: asyncio.Event | None = None
        self._timer: asyncio.TimerHandle | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def full_redraws(self) -> int:
        return self._full_redraw_count

    @property
    def running(self) -> bool:
        return not self._stopped

    async def run(self) -> None:
        """Start the terminal and render frames until :meth:`stop`."""
        self._done = asyncio.Event()
        self._stopped = False
        self.terminal.start(self.handle_input, self.handle_resize)
        try:
            self.terminal.set_title(self.settings.nav_title)
            self.terminal.query_cell_size()
            self._schedule_frame(0.0)
            await self._done.wait()
        finally:
            self._cancel_timer()
            self.terminal.stop()
            logger.info("Stopped after %d frames", self.engine.frame_count)

    def stop(self) -> None:
        self._stopped = True
        self._cancel_timer()
        if self._done is not None:
            self._done.set()

    def _schedule_frame(self, delay: float) -> None:
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._frame_tick)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _frame_tick(self) -> None:
        self._timer = None
        if self._stopped:
            return
        started = time.monotonic()
        self.render_frame()
        if self._stopped:
            return
        elapsed = time.monotonic() - started
        self._schedule_frame(max(0.0, self.settings.frame_interval - elapsed))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _viewport(self) -> tuple[float, float]:
        char_width, char_height = self.metrics.char_size()
        return (self.terminal.columns * char_width, self.terminal.rows * char_height)

    def render_frame(self, now: float | None = None) -> list[str]:
        """Step the engine, compose the screen and write what changed."""
        columns, rows = self.terminal.columns, self.terminal.rows
        text = self.engine.step(self._clock() if now is None else now)
        lines = compose_frame(
            text.splitlines(),
            columns,
            rows,
            self.document,
            self.engine.registry,
            self.engine.cell_size,
            self.engine.editor.focused,
        )

        force_full = self._force_full or (columns, rows) != self._previous_size
        out: list[str] = []
        if force_full:
            self._full_redraw_count += 1
            out.append("\x1b[H\x1b[J")
        for index, line in enumerate(lines):
            previous = self._previous_lines[index] if index < len(self._previous_lines) else None
            if force_full or line != previous:
                out.append(f"\x1b[{index + 1};1H{line}\x1b[K")
        if out:
            self.terminal.write("".join(out))

        self._previous_lines = lines
        self._previous_size = (columns, rows)
        self._force_full = False
        return lines

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_resize(self) -> None:
        self.terminal.query_cell_size()
        width, height = self._viewport()
        self.engine.submit(Resize(width, height))
        self._force_full = True

    def handle_input(self, data: str) -> None:  # noqa: C901
        if "\x1b[6;" in data:
            changed, data = self.metrics.parse_response(data)
            if changed:
                width, height = self._viewport()
                self.engine.submit(FontChanged())
                self.engine.submit(Resize(width, height))
                self._force_full = True
            if not data:
                return

        focus = parse_focus(data)
        if focus is not None:
            if not focus:
                self.clicks.reset()
                self.engine.submit(FocusLost())
                self.engine.submit(PointerLeave())
            return

        event = parse_mouse(data)
        if event is not None:
            self._handle_mouse(event)
            return

        if data.startswith(BRACKETED_PASTE_START):
            pasted = data[len(BRACKETED_PASTE_START) :]
            if pasted.endswith(BRACKETED_PASTE_END):
                pasted = pasted[: -len(BRACKETED_PASTE_END)]
            self.engine.submit(KeyPress("paste", pasted))
            return

        if is_key_release(data):
            return
        key = parse_key(data)
        if key is None:
            return
        if key == "ctrl+c":
            self.stop()
            return
        self.engine.submit(KeyPress(key, key_text(data)))

    def _to_pixels(self, event: MouseEvent) -> tuple[float, float]:
        if self.settings.pixel_mouse:
            return (float(event.x), float(event.y))
        char_width, char_height = self.metrics.char_size()
        return ((event.x + 0.5) * char_width, (event.y + 0.5) * char_height)

    def _handle_mouse(self, event: MouseEvent) -> None:
        x, y = self._to_pixels(event)
        if event.kind == "move":
            self.engine.submit(PointerMove(x, y))
        elif event.kind == "press":
            detail = self.clicks.press(event.button, x, y, self._clock())
            self.engine.submit(PointerMove(x, y))
            self.engine.submit(PointerDown(x, y, event.button, detail))
        elif event.kind == "release":
            self.engine.submit(PointerUp(x, y))
            if event.button == 0 and self.clicks.count == 2:
                self.engine.submit(DoubleClick(x, y))

    def _on_unhandled_key(self, command: KeyPress) -> None:
        if command.key in QUIT_KEYS:
            logger.debug("Quit requested with %s", command.key)
            self.stop()
