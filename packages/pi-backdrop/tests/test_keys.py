"""Tests for pi.backdrop.keys -- key identifiers and inserted text."""

from __future__ import annotations

import pytest

from pi.backdrop.keys import (
    is_key_release,
    is_kitty_protocol_active,
    key_text,
    parse_key,
    parse_kitty_sequence,
    set_kitty_protocol_active,
)


class TestParseKey:
    @pytest.mark.parametrize(
        "data,key",
        [
            ("a", "a"),
            ("Q", "Q"),
            (" ", "space"),
            ("\r", "enter"),
            ("\t", "tab"),
            ("\x1b", "escape"),
            ("\x7f", "backspace"),
            ("\x03", "ctrl+c"),
            ("\x1b[Z", "shift+tab"),
            ("\x1b[A", "up"),
            ("\x1bOD", "left"),
            ("\x1b[3~", "delete"),
            ("\x1b\r", "alt+enter"),
            ("\x1bx", "alt+x"),
        ],
    )
    def test_legacy_input(self, data: str, key: str) -> None:
        assert parse_key(data) == key

    @pytest.mark.parametrize(
        "data,key",
        [
            ("\x1b[13;2u", "shift+enter"),
            ("\x1b[13u", "enter"),
            ("\x1b[27u", "escape"),
            ("\x1b[9;2u", "shift+tab"),
            ("\x1b[99;5u", "ctrl+c"),
            ("\x1b[97:65;2u", "shift+a"),
            ("\x1b[1;5C", "ctrl+right"),
            ("\x1b[27;2;13~", "shift+enter"),
        ],
    )
    def test_extended_protocols(self, data: str, key: str) -> None:
        assert parse_key(data) == key

    def test_empty(self) -> None:
        assert parse_key("") is None


class TestKeyText:
    @pytest.mark.parametrize(
        "data,text",
        [
            ("a", "a"),
            (" ", " "),
            ("héllo", "héllo"),
            ("\x1b[97u", "a"),
            ("\x1b[97:65;2u", "A"),
            ("\x1b[32u", " "),
        ],
    )
    def test_insertable(self, data: str, text: str) -> None:
        assert key_text(data) == text

    @pytest.mark.parametrize("data", ["\r", "\x03", "\x1b[A", "\x1b[99;5u", "\x1b[13u", "\x1b[97;1:3u"])
    def test_not_insertable(self, data: str) -> None:
        assert key_text(data) is None


class TestKitty:
    def test_parse_sequence_fields(self) -> None:
        parsed = parse_kitty_sequence("\x1b[97:65;2:1u")
        assert parsed is not None
        assert (parsed.codepoint, parsed.shifted_key, parsed.modifier, parsed.event_type) == (97, 65, 2, 1)

    def test_release_detection(self) -> None:
        assert is_key_release("\x1b[97;1:3u")
        assert not is_key_release("\x1b[97u")
        assert not is_key_release("a")

    def test_protocol_flag(self) -> None:
        try:
            set_kitty_protocol_active(True)
            assert is_kitty_protocol_active()
        finally:
            set_kitty_protocol_active(False)
        assert not is_kitty_protocol_active()
