"""Tests for pi.backdrop.commands.CommandQueue."""

from __future__ import annotations

import dataclasses

import pytest

from pi.backdrop.commands import CommandQueue, KeyPress, PointerDown, PointerLeave, PointerMove


class TestCommandQueue:
    def test_drain_in_arrival_order(self) -> None:
        queue = CommandQueue()
        commands = [PointerMove(1, 2), PointerDown(1, 2), PointerLeave()]
        for command in commands:
            queue.push(command)
        assert len(queue) == 3
        assert list(queue.drain()) == commands
        assert len(queue) == 0

    def test_commands_pushed_while_draining_are_included(self) -> None:
        queue = CommandQueue()
        queue.push(PointerMove(0, 0))
        seen = []
        for command in queue.drain():
            seen.append(command)
            if len(seen) == 1:
                queue.push(KeyPress("a", "a"))
        assert seen == [PointerMove(0, 0), KeyPress("a", "a")]


class TestCommandValues:
    def test_defaults(self) -> None:
        down = PointerDown(3, 4)
        assert (down.button, down.detail) == (0, 1)
        assert KeyPress("enter").text is None

    def test_commands_are_immutable(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            PointerMove(1, 1).x = 2  # type: ignore[misc]
