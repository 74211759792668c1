"""Terminal-side overlay elements: panels, the navigation strip, layouts.

A :class:`Document` is the terminal counterpart of a web page: an ordered
list of :class:`Panel` overlays plus a :class:`NavStrip` across the top.
Panels are positioned in character cells and report their geometry in
pixels using the document's current character size, which is what the
engine's box registry reads.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Callable

from pi.backdrop.boxes import DYNAMIC, STATIC
from pi.backdrop.geometry import Rect
from pi.backdrop.utils import truncate_to_width, visible_width, wrap_to_width

logger = logging.getLogger(__name__)

CharSize = Callable[[], tuple[float, float]]

DEFAULT_Z_INDEX = 5
CARET = "_"


class LayoutError(ValueError):
    """Raised when a layout description cannot be turned into a document."""


class Panel:
    """A rectangular overlay with text content.

    Without an explicit ``width``/``height`` (in characters) the panel sizes
    itself to its content: ``padding_x`` blank columns either side plus the
    border cell, and one row for the top border.  With a fixed width, long
    lines wrap and the auto height grows to fit them.
    """

    def __init__(
        self,
        text: str = "",
        *,
        col: int = 0,
        row: int = 0,
        width: int | None = None,
        height: int | None = None,
        kind: str = DYNAMIC,
        image: bool = False,
        panel_id: str | None = None,
        padding_x: int = 1,
    ) -> None:
        self.text = text
        self.col = col
        self.row = row
        self._width = width
        self._height = height
        self.kind = kind
        self.image = image
        self.id = panel_id
        self.padding_x = padding_x

        self.focusable = False
        self.editable = False
        self.editing = False
        self.original_content: str | None = None
        self.z_index = DEFAULT_Z_INDEX

        self.document: Document | None = None

    def __repr__(self) -> str:
        return f"Panel(id={self.id!r}, kind={self.kind!r}, col={self.col}, row={self.row})"

    # -- geometry -----------------------------------------------------------

    def _char_size(self) -> tuple[float, float]:
        if self.document is None:
            return (1.0, 1.0)
        return self.document.char_size()

    def content_lines(self) -> list[str]:
        """Text lines as displayed, wrapped when the width is fixed."""
        lines = self.text.split("\n")
        if self.editing:
            lines[-1] += CARET
        if self._width is None:
            return lines
        inner = self._width - 2 * self.padding_x - 2
        wrapped: list[str] = []
        for line in lines:
            wrapped.extend(wrap_to_width(line, inner))
        return wrapped

    @property
    def width(self) -> int:
        """Width in characters, always even so the panel spans whole cells."""
        if self._width is not None:
            return self._width
        content = max(visible_width(line) for line in self.content_lines())
        natural = content + 2 * self.padding_x + 2
        return natural + natural % 2

    @property
    def height(self) -> int:
        if self._height is not None:
            return self._height
        return len(self.content_lines()) + 1

    def rect(self) -> Rect:
        char_width, char_height = self._char_size()
        return Rect(
            self.col * char_width,
            self.row * char_height,
            self.width * char_width,
            self.height * char_height,
        )

    def move_to(self, x: float, y: float) -> None:
        char_width, char_height = self._char_size()
        self.col = math.floor(x / char_width + 0.5)
        self.row = math.floor(y / char_height + 0.5)

    def freeze_width(self) -> None:
        self._width = self.width

    # -- content ------------------------------------------------------------

    def render_lines(self, width: int, height: int) -> list[str]:
        """Return exactly *height* lines of exactly *width* columns."""
        if width <= 0 or height <= 0:
            return []
        pad = " " * self.padding_x
        inner = max(0, width - 2 * self.padding_x)
        lines = [
            pad + truncate_to_width(line, inner, pad=True) + pad
            for line in self.content_lines()[:height]
        ]
        lines = [truncate_to_width(line, width, pad=True) for line in lines]
        while len(lines) < height:
            lines.append(" " * width)
        return lines


class NavStrip:
    """Reserved rows across the top of the screen; boxes cannot enter it."""

    def __init__(self, title: str = "pi", tabs: list[str] | None = None, rows: int = 1) -> None:
        self.title = title
        self.tabs = list(tabs or [])
        self.rows = rows

    def render_lines(self, width: int) -> list[str]:
        if self.rows <= 0 or width <= 0:
            return []
        label = f" {self.title}"
        if self.tabs:
            label += "  |  " + "   ".join(self.tabs)
        first = truncate_to_width(label, width, pad=True)
        return [first] + [" " * width for _ in range(self.rows - 1)]


class Document:
    """Ordered overlay panels plus the navigation strip."""

    def __init__(self, char_size: CharSize, nav: NavStrip | None = None) -> None:
        self.char_size = char_size
        self.nav = nav if nav is not None else NavStrip(rows=0)
        self._panels: list[Panel] = []
        self._listeners: list[Callable[[], None]] = []

    @property
    def panels(self) -> list[Panel]:
        return list(self._panels)

    def add(self, panel: Panel) -> Panel:
        panel.document = self
        self._panels.append(panel)
        self._notify()
        return panel

    def remove(self, panel: Panel) -> None:
        try:
            self._panels.remove(panel)
        except ValueError:
            return
        panel.document = None
        self._notify()

    def get(self, panel_id: str) -> Panel | None:
        for panel in self._panels:
            if panel.id == panel_id:
                return panel
        return None

    def on_change(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in self._listeners:
            callback()

    # -- OverlaySource ------------------------------------------------------

    def overlay_elements(self) -> list[Panel]:
        return list(self._panels)

    def nav_bottom(self) -> float:
        return self.nav.rows * self.char_size()[1]


# ---------------------------------------------------------------------------
# Layouts
# ---------------------------------------------------------------------------

DEFAULT_LAYOUT: dict[str, Any] = {
    "panels": [
        {
            "id": "intro",
            "kind": "static",
            "col": 4,
            "row": 3,
            "text": "pi-backdrop\n\nDrag the other boxes around.\nDouble-click one to edit it.",
        },
        {
            "id": "notes",
            "kind": "dynamic",
            "col": 44,
            "row": 6,
            "text": "notes\n- enter saves\n- shift+enter adds a line\n- escape reverts",
        },
        {
            "id": "status",
            "kind": "dynamic",
            "col": 12,
            "row": 12,
            "text": "q quits",
        },
    ],
}


def _as_int(entry: dict[str, Any], key: str, default: int | None) -> int | None:
    value = entry.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise LayoutError(f"panel field {key!r} must be an integer, got {value!r}")
    return value


def layout_from_dict(
    data: dict[str, Any],
    char_size: CharSize,
    nav: NavStrip | None = None,
) -> Document:
    """Build a document from a layout description.

    ``{"panels": [{"text", "kind", "col", "row", "width", "height", "image",
    "id"}, ...]}``; only ``text`` is required.
    """
    if not isinstance(data, dict):
        raise LayoutError("layout must be a JSON object")
    entries = data.get("panels", [])
    if not isinstance(entries, list):
        raise LayoutError("layout 'panels' must be a list")

    document = Document(char_size, nav)
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise LayoutError(f"panel #{index} must be an object")
        text = entry.get("text")
        if not isinstance(text, str):
            raise LayoutError(f"panel #{index} needs a 'text' string")
        kind = entry.get("kind", DYNAMIC)
        if kind not in (DYNAMIC, STATIC):
            raise LayoutError(f"panel #{index} has unknown kind {kind!r}")
        panel_id = entry.get("id")
        if panel_id is not None and document.get(panel_id) is not None:
            raise LayoutError(f"panel #{index} reuses id {panel_id!r}")
        document.add(
            Panel(
                text,
                col=_as_int(entry, "col", 0) or 0,
                row=_as_int(entry, "row", 0) or 0,
                width=_as_int(entry, "width", None),
                height=_as_int(entry, "height", None),
                kind=kind,
                image=bool(entry.get("image", False)),
                panel_id=panel_id,
            )
        )
    logger.debug("Layout loaded with %d panels", len(entries))
    return document


def load_layout(path: str, char_size: CharSize, nav: NavStrip | None = None) -> Document:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise LayoutError(f"cannot read layout {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LayoutError(f"invalid JSON in layout {path}: {e}") from e
    return layout_from_dict(data, char_size, nav)
