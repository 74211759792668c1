"""Terminal abstraction for full-screen raw-mode interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that
switches to the alternate screen, enables raw mode, mouse reporting (SGR,
any-motion), focus reporting, bracketed paste and the kitty keyboard
protocol, and restores everything on stop.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from pi.backdrop.input import BRACKETED_PASTE_END, BRACKETED_PASTE_START, InputBuffer
from pi.backdrop.keys import set_kitty_protocol_active

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

# Any-motion tracking (1003) with SGR extended coordinates (1006)
_MOUSE_ENABLE = "\x1b[?1003h\x1b[?1006h"
_MOUSE_DISABLE = "\x1b[?1006l\x1b[?1003l"
_MOUSE_PIXELS_ENABLE = "\x1b[?1016h"
_MOUSE_PIXELS_DISABLE = "\x1b[?1016l"

_FOCUS_ENABLE = "\x1b[?1004h"
_FOCUS_DISABLE = "\x1b[?1004l"

_KITTY_QUERY = "\x1b[?u"
_KITTY_ENABLE = "\x1b[>1u"
_KITTY_DISABLE = "\x1b[<u"

_KITTY_RESPONSE_RE = re.compile(r"^\x1b\[\?(\d+)u$")

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_CELL_SIZE_QUERY = "\x1b[16t"

_SET_TITLE_FMT = "\x1b]0;{}\x07"


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def query_cell_size(self) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_screen(self) -> None: ...

    def set_title(self, title: str) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal backed by ``sys.stdin``/``sys.stdout``.

    Manages raw mode via :mod:`tty` and :mod:`termios` and SIGWINCH-based
    resize detection.  Input is read from an asyncio reader, so
    :meth:`start` must be called with a running event loop.
    """

    def __init__(self, *, pixel_mouse: bool = False) -> None:
        self._pixel_mouse = pixel_mouse
        self._input_handler: Callable[[str], None] | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._kitty_protocol_active: bool = False
        self._input_buffer: InputBuffer | None = None
        self._stdin_reader_active: bool = False
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: signal.Handlers | None = None
        self._write_log_path: str = os.environ.get("PI_BACKDROP_WRITE_LOG", "")

    # -- properties ---------------------------------------------------------

    @property
    def kitty_protocol_active(self) -> bool:
        return self._kitty_protocol_active

    @property
    def pixel_mouse(self) -> bool:
        return self._pixel_mouse

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    # -- start / stop -------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        """Enter raw mode and the alternate screen and begin reading stdin."""
        self._input_handler = on_input
        self._resize_handler = on_resize

        fd = sys.stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)

        self._raw_write(_ALT_SCREEN_ENABLE + _HIDE_CURSOR + _CLEAR_SCREEN)
        self._raw_write(_BRACKETED_PASTE_ENABLE + _FOCUS_ENABLE + _MOUSE_ENABLE)
        if self._pixel_mouse:
            self._raw_write(_MOUSE_PIXELS_ENABLE)

        self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)

        self._setup_input_buffer()
        self._start_stdin_reader()
        self._raw_write(_KITTY_QUERY)
        logger.debug("Terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Restore terminal state and clean up all handlers."""
        if self._pixel_mouse:
            self._raw_write(_MOUSE_PIXELS_DISABLE)
        self._raw_write(_MOUSE_DISABLE + _FOCUS_DISABLE + _BRACKETED_PASTE_DISABLE)

        if self._kitty_protocol_active:
            self._raw_write(_KITTY_DISABLE)
            self._kitty_protocol_active = False
            set_kitty_protocol_active(False)

        self._raw_write(_SHOW_CURSOR + _ALT_SCREEN_DISABLE)

        if self._input_buffer is not None:
            self._input_buffer.clear()
            self._input_buffer = None

        self._remove_stdin_reader()

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

        if self._original_termios is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

        self._input_handler = None
        self._resize_handler = None
        logger.debug("Terminal stopped")

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                pass

    def query_cell_size(self) -> None:
        """Ask for the character cell size; the reply arrives as input."""
        self._raw_write(_CELL_SIZE_QUERY)

    def hide_cursor(self) -> None:
        self._raw_write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._raw_write(_SHOW_CURSOR)

    def clear_screen(self) -> None:
        self._raw_write(_CLEAR_SCREEN)

    def set_title(self, title: str) -> None:
        self._raw_write(_SET_TITLE_FMT.format(title))

    # -- private: input -----------------------------------------------------

    def _setup_input_buffer(self) -> None:
        self._input_buffer = InputBuffer(timeout=0.01)

        def _on_buffer_data(data: str) -> None:
            if _KITTY_RESPONSE_RE.match(data):
                self._kitty_protocol_active = True
                set_kitty_protocol_active(True)
                self._raw_write(_KITTY_ENABLE)
                return
            if self._input_handler is not None:
                self._input_handler(data)

        def _on_buffer_paste(data: str) -> None:
            if self._input_handler is not None:
                self._input_handler(BRACKETED_PASTE_START + data + BRACKETED_PASTE_END)

        self._input_buffer.on_data(_on_buffer_data)
        self._input_buffer.on_paste(_on_buffer_paste)

    def _start_stdin_reader(self) -> None:
        if self._stdin_reader_active:
            return
        loop = asyncio.get_running_loop()
        loop.add_reader(sys.stdin.fileno(), self._on_stdin_readable)
        self._stdin_reader_active = True

    def _remove_stdin_reader(self) -> None:
        if not self._stdin_reader_active:
            return
        try:
            asyncio.get_running_loop().remove_reader(sys.stdin.fileno())
        except (RuntimeError, ValueError):
            pass
        self._stdin_reader_active = False

    def _on_stdin_readable(self) -> None:
        try:
            raw = os.read(sys.stdin.fileno(), 4096)
        except OSError:
            return
        if not raw:
            return

        data = raw.decode("utf-8", errors="replace")
        if self._input_buffer is not None:
            self._input_buffer.process(data)
        elif self._input_handler is not None:
            self._input_handler(data)

    # -- private: SIGWINCH --------------------------------------------------

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        if self._resize_handler is not None:
            self._resize_handler()

    def _raw_write(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass
