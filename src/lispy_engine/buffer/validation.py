"""Validation helpers shared across buffer services."""

from __future__ import annotations

from .document import BufferDocument
from .state import Position
from .sync import BufferValidationError


def ensure_row(document: BufferDocument, row: int) -> int:
    if row < 1 or row > document.line_count:
        raise BufferValidationError(f"Row {row} out of range")
    return row


def ensure_cursor(document: BufferDocument, cursor: Position) -> Position:
    row, col = cursor
    if row < 1 or row > document.line_count:
        raise BufferValidationError("Row out of range", cursor=cursor)
    line = document.get_line(row)
    if col < 0 or col > len(line):
        raise BufferValidationError("Column out of range", cursor=cursor)
    return Position(row, col)
