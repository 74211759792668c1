"""Terminal text utilities: display width, column slicing, truncation.

Widths are measured per grapheme cluster so that wide (CJK, emoji) and
zero-width characters in box content line up with the character grid.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# CSI, OSC 8 and APC sequences
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;]*[mGKHJ]"
    r"|\x1b\]8;;[^\x07]*\x07"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Control characters and marks are zero-width, emoji sequences are two
    columns, everything else is decided by wcwidth on the first codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tone modifiers, regional indicators
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0
    return max(_wcwidth.wcwidth(g[0]), 0)


# ---------------------------------------------------------------------------
# visible_width
# ---------------------------------------------------------------------------


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*, ignoring ANSI codes."""
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text)
    if not stripped:
        return 0

    if all(0x20 <= ord(ch) <= 0x7E for ch in stripped):
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


# ---------------------------------------------------------------------------
# Slicing / truncation
# ---------------------------------------------------------------------------


def slice_by_column(line: str, start_col: int, length: int) -> str:
    """Extract *length* visible columns starting at *start_col*.

    Wide characters cut by either boundary are replaced with spaces so the
    result is exactly as wide as the part of *line* it covers.
    """
    if length <= 0:
        return ""

    end_col = start_col + length
    result: list[str] = []
    col = 0
    for g in grapheme.graphemes(line):
        if col >= end_col:
            break
        w = grapheme_width(g)
        g_end = col + w
        if g_end <= start_col:
            col = g_end
            continue
        if col < start_col or g_end > end_col:
            # Straddles a boundary: pad the visible part with spaces
            visible = min(g_end, end_col) - max(col, start_col)
            result.append(" " * visible)
        else:
            result.append(g)
        col = g_end
    return "".join(result)


def wrap_to_width(text: str, width: int) -> list[str]:
    """Hard-wrap *text* into chunks of at most *width* columns.

    Breaks fall between grapheme clusters, never inside one.
    """
    if width <= 0 or not text:
        return [text]
    chunks: list[str] = []
    current: list[str] = []
    current_width = 0
    for g in grapheme.graphemes(text):
        w = grapheme_width(g)
        if current and current_width + w > width:
            chunks.append("".join(current))
            current = []
            current_width = 0
        current.append(g)
        current_width += w
    chunks.append("".join(current))
    return chunks


def truncate_to_width(text: str, max_width: int, pad: bool = False) -> str:
    """Truncate *text* to at most *max_width* columns.

    With *pad*, the result is right-padded to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        return text + " " * (max_width - text_width) if pad else text

    result = slice_by_column(text, 0, max_width)
    if pad:
        result += " " * (max_width - visible_width(result))
    return result
