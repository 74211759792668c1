"""Cell metrics: the pixel size of one logical grid cell.

A logical cell renders as two characters (a glyph plus a trailing spacer) so
that it comes out roughly square in a monospace font whose characters are
taller than they are wide.  Metrics are always *measured*, never configured:
the terminal front-end learns the character size from the terminal's
``CSI 16 t`` report.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

# Characters per logical cell
CHARS_PER_CELL = 2

# Cell-size report: ESC[6;<height>;<width>t
_CELL_SIZE_RESPONSE_RE = re.compile(r"\x1b\[6;(\d+);(\d+)t")


class MetricsError(ValueError):
    """Raised when a measured cell size cannot be used to build a grid."""


@dataclass
class CellDimensions:
    width_px: int
    height_px: int


class MetricsProvider(Protocol):
    """Measures the pixel size of one logical cell."""

    def measure(self) -> tuple[float, float]: ...


def check_cell_size(width: float, height: float) -> None:
    """Raise :class:`MetricsError` unless both sizes are finite and positive."""
    for name, value in (("width", width), ("height", height)):
        if not math.isfinite(value) or value <= 0:
            raise MetricsError(f"invalid cell {name}: {value!r}")


class CharMetrics:
    """Metrics derived from a fixed character size."""

    def __init__(self, char_width: float, char_height: float) -> None:
        self.char_width = char_width
        self.char_height = char_height

    def measure(self) -> tuple[float, float]:
        return (self.char_width * CHARS_PER_CELL, self.char_height)

    def char_size(self) -> tuple[float, float]:
        return (self.char_width, self.char_height)


class TerminalMetrics:
    """Metrics backed by the terminal's reported character cell size.

    Until the terminal answers the cell-size query the dimensions fall back
    to 9x18 pixels, a common monospace cell.
    """

    def __init__(self, dims: CellDimensions | None = None) -> None:
        self._dims = dims or CellDimensions(width_px=9, height_px=18)

    @property
    def dimensions(self) -> CellDimensions:
        return self._dims

    def measure(self) -> tuple[float, float]:
        return (float(self._dims.width_px * CHARS_PER_CELL), float(self._dims.height_px))

    def char_size(self) -> tuple[float, float]:
        return (float(self._dims.width_px), float(self._dims.height_px))

    def update(self, width_px: int, height_px: int) -> bool:
        """Record a new character size.  Returns ``True`` if it changed.

        Non-positive sizes (terminals that answer with zeros) are ignored.
        """
        if width_px <= 0 or height_px <= 0:
            logger.debug("Ignoring cell size report %dx%d", width_px, height_px)
            return False
        if width_px == self._dims.width_px and height_px == self._dims.height_px:
            return False
        logger.info(
            "Character cell size changed %dx%d -> %dx%d",
            self._dims.width_px,
            self._dims.height_px,
            width_px,
            height_px,
        )
        self._dims = CellDimensions(width_px=width_px, height_px=height_px)
        return True

    def parse_response(self, data: str) -> tuple[bool, str]:
        """Consume a cell-size report embedded in *data*.

        Returns ``(changed, remaining)`` where *remaining* is *data* with the
        report removed.  If no report is present, *data* is returned as-is.
        """
        m = _CELL_SIZE_RESPONSE_RE.search(data)
        if m is None:
            return False, data
        height_px = int(m.group(1))
        width_px = int(m.group(2))
        changed = self.update(width_px, height_px)
        return changed, data[: m.start()] + data[m.end() :]
