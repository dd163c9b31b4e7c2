"""Positions, regions, and cursor/selection state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple


class Position(NamedTuple):
    """Buffer coordinate: 1-indexed ``row``, 0-indexed ``col``.

    Tuples order row-major, so ``Position`` values compare in buffer order.
    """

    row: int
    col: int


@dataclass(frozen=True, slots=True)
class Region:
    """Span of text to delete; ``end`` is inclusive."""

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Region end {self.end} precedes start {self.start}")

    @property
    def multiline(self) -> bool:
        return self.end.row > self.start.row


Selection = Tuple[Position, Position]


@dataclass(slots=True)
class BufferState:
    """Mutable cursor and selection for one buffer."""

    cursor: Position = Position(1, 0)
    selection: Optional[Selection] = None

    def set_cursor(self, row: int, col: int) -> None:
        self.cursor = Position(row, col)

    def clear_selection(self) -> None:
        self.selection = None

    def set_selection(self, start: Position, end: Position) -> None:
        self.selection = (start, end)

    def selected_rows(self) -> Optional[Tuple[int, int]]:
        if self.selection is None:
            return None
        first, second = self.selection
        return min(first.row, second.row), max(first.row, second.row)
