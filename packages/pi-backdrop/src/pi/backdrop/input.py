"""Terminal input decoding: sequence buffering, mouse and focus reports.

Stdin data can arrive in partial chunks, and a half-received mouse report
would otherwise be read as a run of key presses.  :class:`InputBuffer`
collects bytes until each escape sequence is complete, unwraps bracketed
pastes, and hands out one sequence at a time.  :func:`parse_mouse` and
:func:`parse_focus` then classify the pointer and focus reports that the
terminal sends once :class:`~pi.backdrop.terminal.ProcessTerminal` has
enabled them.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import Callable, Literal

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"
FOCUS_IN = "\x1b[I"
FOCUS_OUT = "\x1b[O"

_SGR_MOUSE_RE = re.compile(r"^\x1b\[<(\d+);(\d+);(\d+)([Mm])$")

# Button-code bits of an SGR mouse report
_MOUSE_SHIFT = 4
_MOUSE_ALT = 8
_MOUSE_CTRL = 16
_MOUSE_MOTION = 32
_MOUSE_WHEEL = 64

SequenceStatus = Literal["complete", "incomplete", "not-escape"]


# ---------------------------------------------------------------------------
# Sequence completeness
# ---------------------------------------------------------------------------


def sequence_status(data: str) -> SequenceStatus:
    """Tell whether *data* is a complete escape sequence or needs more bytes."""
    if not data.startswith(ESC):
        return "not-escape"
    if len(data) == 1:
        return "incomplete"

    introducer = data[1]
    if introducer == "[":
        if data.startswith(f"{ESC}[M"):
            # X10 mouse: ESC [ M + three bytes
            return "complete" if len(data) >= 6 else "incomplete"
        return _csi_status(data)
    if introducer == "]":
        return "complete" if data.endswith(f"{ESC}\\") or data.endswith("\x07") else "incomplete"
    if introducer in ("P", "_"):
        return "complete" if data.endswith(f"{ESC}\\") else "incomplete"
    if introducer == "O":
        return "complete" if len(data) >= 3 else "incomplete"
    # Meta key: ESC followed by a single character
    return "complete"


def _csi_status(data: str) -> SequenceStatus:
    if len(data) < 3:
        return "incomplete"
    payload = data[2:]
    final = payload[-1]
    if not 0x40 <= ord(final) <= 0x7E:
        return "incomplete"
    if payload.startswith("<"):
        # SGR mouse: only complete once all three fields and M/m are in
        if final in ("M", "m"):
            parts = payload[1:-1].split(";")
            if len(parts) == 3 and all(p.isdigit() for p in parts):
                return "complete"
        return "incomplete"
    return "complete"


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences plus an incomplete remainder."""
    sequences: list[str] = []
    pos = 0
    while pos < len(buffer):
        remaining = buffer[pos:]
        if not remaining.startswith(ESC):
            sequences.append(remaining[0])
            pos += 1
            continue

        end = 1
        while end <= len(remaining):
            if sequence_status(remaining[:end]) == "incomplete":
                end += 1
                continue
            sequences.append(remaining[:end])
            pos += end
            break
        else:
            return sequences, remaining
    return sequences, ""


# ---------------------------------------------------------------------------
# InputBuffer
# ---------------------------------------------------------------------------


class InputBuffer:
    """Buffers stdin input and emits complete sequences and pastes."""

    def __init__(self, *, timeout: float = 0.01) -> None:
        self._buffer: str = ""
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._timeout = timeout
        self._paste_mode: bool = False
        self._paste_buffer: str = ""

        self._on_data: Callable[[str], None] | None = None
        self._on_paste: Callable[[str], None] | None = None

    def on_data(self, callback: Callable[[str], None]) -> None:
        self._on_data = callback

    def on_paste(self, callback: Callable[[str], None]) -> None:
        self._on_paste = callback

    def _emit_data(self, data: str) -> None:
        if self._on_data:
            self._on_data(data)

    def _emit_paste(self, data: str) -> None:
        if self._on_paste:
            self._on_paste(data)

    def process(self, data: str) -> None:
        """Feed a chunk of stdin data."""
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

        self._buffer += data

        if not self._paste_mode:
            start = self._buffer.find(BRACKETED_PASTE_START)
            if start == -1:
                self._emit_complete()
                return
            sequences, _ = split_sequences(self._buffer[:start])
            for sequence in sequences:
                self._emit_data(sequence)
            self._buffer = self._buffer[start + len(BRACKETED_PASTE_START) :]
            self._paste_mode = True

        self._paste_buffer += self._buffer
        self._buffer = ""
        end = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end == -1:
            return
        pasted = self._paste_buffer[:end]
        remaining = self._paste_buffer[end + len(BRACKETED_PASTE_END) :]
        self._paste_mode = False
        self._paste_buffer = ""
        self._emit_paste(pasted)
        if remaining:
            self.process(remaining)

    def _emit_complete(self) -> None:
        sequences, self._buffer = split_sequences(self._buffer)
        for sequence in sequences:
            self._emit_data(sequence)

        if self._buffer:
            try:
                loop = asyncio.get_running_loop()
                self._timeout_handle = loop.call_later(self._timeout, self._flush_timeout)
            except RuntimeError:
                # No event loop - flush immediately
                for sequence in self.flush():
                    self._emit_data(sequence)

    def _flush_timeout(self) -> None:
        self._timeout_handle = None
        for sequence in self.flush():
            self._emit_data(sequence)

    def flush(self) -> list[str]:
        """Return whatever is buffered as one sequence (e.g. a lone ESC)."""
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
        if not self._buffer:
            return []
        sequences = [self._buffer]
        self._buffer = ""
        return sequences

    def clear(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""

    def get_buffer(self) -> str:
        return self._buffer


# ---------------------------------------------------------------------------
# Mouse / focus reports
# ---------------------------------------------------------------------------

MouseKind = Literal["press", "release", "move", "wheel"]


@dataclass(frozen=True)
class MouseEvent:
    """A decoded SGR mouse report.

    ``x``/``y`` are zero-based: character cells normally, pixels when the
    terminal reports in SGR-Pixels mode.  ``button`` is 0 (left), 1 (middle),
    2 (right) or -1 for motion with no button held.
    """

    kind: MouseKind
    button: int
    x: int
    y: int
    shift: bool = False
    alt: bool = False
    ctrl: bool = False


def parse_mouse(data: str) -> MouseEvent | None:
    m = _SGR_MOUSE_RE.match(data)
    if m is None:
        return None
    code = int(m.group(1))
    x = int(m.group(2)) - 1
    y = int(m.group(3)) - 1
    released = m.group(4) == "m"

    button = code & 3
    if code & _MOUSE_WHEEL:
        kind: MouseKind = "wheel"
    elif code & _MOUSE_MOTION:
        kind = "move"
        if button == 3:
            button = -1
    elif released:
        kind = "release"
    else:
        kind = "press"

    return MouseEvent(
        kind=kind,
        button=button,
        x=x,
        y=y,
        shift=bool(code & _MOUSE_SHIFT),
        alt=bool(code & _MOUSE_ALT),
        ctrl=bool(code & _MOUSE_CTRL),
    )


def parse_focus(data: str) -> bool | None:
    """Return ``True`` for focus-in, ``False`` for focus-out, else ``None``."""
    if data == FOCUS_IN:
        return True
    if data == FOCUS_OUT:
        return False
    return None


# ---------------------------------------------------------------------------
# Click counting
# ---------------------------------------------------------------------------


class ClickTracker:
    """Counts consecutive presses the way a browser fills ``event.detail``.

    A press continues the sequence when it uses the same button, lands
    within *tolerance* pixels of the previous press and arrives within
    *interval_ms* of it.
    """

    def __init__(self, interval_ms: float = 400.0, tolerance: float = 4.0) -> None:
        self.interval_ms = interval_ms
        self.tolerance = tolerance
        self._last: tuple[int, float, float, float] | None = None
        self._count = 0

    def press(self, button: int, x: float, y: float, now: float) -> int:
        """Record a press at time *now* (ms) and return its click count."""
        last = self._last
        if (
            last is not None
            and last[0] == button
            and now - last[3] <= self.interval_ms
            and abs(x - last[1]) <= self.tolerance
            and abs(y - last[2]) <= self.tolerance
        ):
            self._count += 1
        else:
            self._count = 1
        self._last = (button, x, y, now)
        return self._count

    @property
    def count(self) -> int:
        return self._count

    def reset(self) -> None:
        self._last = None
        self._count = 0
