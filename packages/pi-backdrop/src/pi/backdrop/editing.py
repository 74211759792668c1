"""Inline editing of dynamic boxes, plus the keyboard focus ring."""

from __future__ import annotations

import logging
import unicodedata

from pi.backdrop.boxes import BoxElement, BoxRegistry

logger = logging.getLogger(__name__)

_TAB_SPACES = "   "


def normalize_content(text: str) -> str:
    """Make edited text safe to display.

    Trims surrounding whitespace, unifies line breaks to ``\\n``, expands tabs
    and drops any other control characters.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", _TAB_SPACES)
    text = "".join(ch for ch in text if ch == "\n" or unicodedata.category(ch) != "Cc")
    return text.strip()


class EditController:
    """Double-click edit mode for dynamic boxes.

    While a box is being edited every key is consumed here; otherwise only
    focus navigation keys are.
    """

    def __init__(self, registry: BoxRegistry) -> None:
        self._registry = registry
        self.active: BoxElement | None = None
        self.focused: BoxElement | None = None

    @property
    def editing(self) -> bool:
        return self.active is not None

    # -- focus --------------------------------------------------------------

    def focus(self, element: BoxElement | None) -> None:
        if element is self.focused:
            return
        if self.active is not None and element is not self.active:
            self.commit(self.active)
        self.focused = element

    def focus_next(self, reverse: bool = False) -> None:
        elements = [box.element for box in self._registry if box.element.focusable]
        if not elements:
            self.focus(None)
            return
        if self.focused in elements:
            index = elements.index(self.focused) + (-1 if reverse else 1)
        else:
            index = -1 if reverse else 0
        self.focus(elements[index % len(elements)])

    # -- edit mode ----------------------------------------------------------

    def begin_at(self, x: float, y: float) -> bool:
        """Handle a double click; enter edit mode on the box under the point."""
        box = self._registry.hit_test(x, y)
        if box is None or not box.movable:
            return False
        return self.begin(box.element)

    def begin(self, element: BoxElement) -> bool:
        if element.image:
            return False
        if self.active is not None and self.active is not element:
            self.commit(self.active)
        if self.active is not element:
            element.original_content = element.text
        element.editable = True
        element.editing = True
        self.active = element
        self.focused = element
        logger.debug("Editing started")
        return True

    def commit(self, element: BoxElement) -> None:
        """Leave edit mode, normalising the element's content."""
        if self.active is element:
            self.active = None

        if element.kind != "dynamic":
            element.editable = False
            element.editing = False
            element.original_content = None
            return

        element.editable = False
        element.editing = False
        element.text = normalize_content(element.text)
        element.original_content = None
        # Content changes resize the box; pick up the new geometry now.
        self._registry.refresh()
        logger.debug("Editing committed")

    def blur(self) -> None:
        """Focus left the edited box (terminal focus-out or outside click)."""
        if self.active is not None:
            self.commit(self.active)

    def press(self, x: float, y: float) -> None:
        """A pointer press anywhere: a press outside the edited box blurs it."""
        box = self._registry.hit_test(x, y)
        if self.active is not None and (box is None or box.element is not self.active):
            self.blur()
        if box is not None:
            self.focused = box.element

    # -- keys ---------------------------------------------------------------

    def handle_key(self, key: str, text: str | None = None) -> bool:
        """Return ``True`` when the key was consumed."""
        element = self.active
        if element is None:
            if key in ("tab", "shift+tab"):
                self.focus_next(reverse=key == "shift+tab")
                return True
            return False

        if key == "enter":
            self.commit(element)
        elif key == "escape":
            element.text = element.original_content or element.text
            self.commit(element)
        elif key in ("shift+enter", "alt+enter"):
            element.text += "\n"
        elif key == "backspace":
            element.text = element.text[:-1]
        elif text:
            element.text += text
        return True
