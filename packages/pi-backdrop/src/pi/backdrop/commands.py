"""Input commands and the queue the engine drains once per step."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterator, Union


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclass(frozen=True)
class PointerLeave:
    pass


@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float
    button: int = 0
    detail: int = 1


@dataclass(frozen=True)
class PointerUp:
    x: float
    y: float


@dataclass(frozen=True)
class DoubleClick:
    x: float
    y: float


@dataclass(frozen=True)
class KeyPress:
    key: str
    text: str | None = None


@dataclass(frozen=True)
class FocusLost:
    pass


@dataclass(frozen=True)
class Resize:
    width: float
    height: float


@dataclass(frozen=True)
class FontChanged:
    pass


@dataclass(frozen=True)
class StructureChanged:
    pass


Command = Union[
    PointerMove,
    PointerLeave,
    PointerDown,
    PointerUp,
    DoubleClick,
    KeyPress,
    FocusLost,
    Resize,
    FontChanged,
    StructureChanged,
]


class CommandQueue:
    """FIFO of pending commands."""

    def __init__(self) -> None:
        self._items: deque[Command] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def push(self, command: Command) -> None:
        self._items.append(command)

    def drain(self) -> Iterator[Command]:
        """Yield queued commands in arrival order until the queue is empty.

        Commands pushed while draining are yielded in the same pass.
        """
        while self._items:
            yield self._items.popleft()
