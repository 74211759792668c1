"""Keyboard input parsing for terminal key sequences.

Understands the kitty keyboard protocol (``CSI u``), xterm's
modifyOtherKeys, legacy escape sequences and plain bytes.  :func:`parse_key`
returns identifiers such as ``"a"``, ``"ctrl+c"`` or ``"shift+enter"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

# ---------------------------------------------------------------------------
# Global state: kitty keyboard protocol
# ---------------------------------------------------------------------------

_kitty_protocol_active: bool = False


def set_kitty_protocol_active(active: bool) -> None:
    global _kitty_protocol_active
    _kitty_protocol_active = active


def is_kitty_protocol_active() -> bool:
    return _kitty_protocol_active


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

LOCK_MASK = 64 + 128

CODEPOINTS: dict[int, str] = {
    27: "escape",
    9: "tab",
    13: "enter",
    32: "space",
    127: "backspace",
    57414: "enter",  # keypad enter
}

_ARROW_LETTERS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[Z": "shift+tab",
}


# ---------------------------------------------------------------------------
# Kitty protocol parsing
# ---------------------------------------------------------------------------


@dataclass
class ParsedKittySequence:
    codepoint: int
    shifted_key: Optional[int]
    modifier: int
    event_type: int  # 1 = press, 2 = repeat, 3 = release


# CSI u format: \x1b[<codepoint>(:<shifted_key>(:<base_layout_key>))?(;<modifier>(:<event_type>))?u
_KITTY_CSI_U_RE = re.compile(
    r"\x1b\[(\d+)(?::(\d+)(?::(\d+))?)?(?:;(\d+)(?::(\d+))?)?u$"
)

# Arrow / home / end with modifier: \x1b[1;<modifier>(:<event_type>)?[ABCDHF]
_KITTY_ARROW_RE = re.compile(r"\x1b\[1;(\d+)(?::(\d+))?([ABCDHF])$")

# modifyOtherKeys: \x1b[27;<modifier>;<keycode>~
_MODIFY_OTHER_KEYS_RE = re.compile(r"\x1b\[27;(\d+);(\d+)~$")


def parse_kitty_sequence(data: str) -> ParsedKittySequence | None:
    m = _KITTY_CSI_U_RE.match(data)
    if m:
        return ParsedKittySequence(
            codepoint=int(m.group(1)),
            shifted_key=int(m.group(2)) if m.group(2) else None,
            modifier=int(m.group(4)) if m.group(4) else 1,
            event_type=int(m.group(5)) if m.group(5) else 1,
        )
    return None


def is_key_release(data: str) -> bool:
    parsed = parse_kitty_sequence(data)
    return parsed is not None and parsed.event_type == 3


def _modifier_prefix(modifier: int) -> str:
    mod = (modifier - 1) & ~LOCK_MASK
    prefix = ""
    if mod & MODIFIERS["ctrl"]:
        prefix += "ctrl+"
    if mod & MODIFIERS["shift"]:
        prefix += "shift+"
    if mod & MODIFIERS["alt"]:
        prefix += "alt+"
    return prefix


def _name_for_codepoint(cp: int) -> str | None:
    name = CODEPOINTS.get(cp)
    if name is not None:
        return name
    if cp > 0:
        ch = chr(cp)
        if ch.isprintable():
            return ch.lower()
    return None


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


def parse_key(data: str) -> str | None:  # noqa: C901
    """Parse raw terminal input and return the key identifier, or ``None``."""
    if not data:
        return None

    parsed = parse_kitty_sequence(data)
    if parsed is not None:
        name = _name_for_codepoint(parsed.codepoint)
        return _modifier_prefix(parsed.modifier) + name if name else None

    m = _KITTY_ARROW_RE.match(data)
    if m:
        return _modifier_prefix(int(m.group(1))) + _ARROW_LETTERS[m.group(3)]

    m = _MODIFY_OTHER_KEYS_RE.match(data)
    if m:
        name = _name_for_codepoint(int(m.group(2)))
        return _modifier_prefix(int(m.group(1))) + name if name else None

    if data in LEGACY_KEY_SEQUENCES:
        return LEGACY_KEY_SEQUENCES[data]

    # --- Simple single-byte keys ---
    if data == "\x1b":
        return "escape"
    if data in ("\r", "\n"):
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data in ("\x7f", "\x08"):
        return "backspace"

    # --- Ctrl + letter (0x01 - 0x1a) ---
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch in ("\r", "\n"):
            return "alt+enter"
        if ch in ("\x7f", "\x08"):
            return "alt+backspace"
        if ch.isprintable():
            return "alt+" + ch.lower()

    if len(data) == 1 and data.isprintable():
        return data

    return None


def key_text(data: str) -> str | None:
    """Return the text a key press would insert, or ``None``.

    Plain printable input is returned as-is (pasted text included); kitty
    ``CSI u`` presses without ctrl/alt yield their (shifted) character.
    """
    parsed = parse_kitty_sequence(data)
    if parsed is not None:
        mod = (parsed.modifier - 1) & ~LOCK_MASK
        if mod & (MODIFIERS["ctrl"] | MODIFIERS["alt"]) or parsed.event_type == 3:
            return None
        cp = parsed.shifted_key if (mod & MODIFIERS["shift"] and parsed.shifted_key) else parsed.codepoint
        if cp in CODEPOINTS and cp != 32:
            return None
        ch = chr(cp)
        return ch if ch.isprintable() else None

    if data.startswith("\x1b"):
        return None
    if data and all(ch.isprintable() for ch in data):
        return data
    return None
