"""Buffer abstractions: line storage, cursor state, and registers."""

from .buffer import Buffer, Transaction
from .document import BufferDocument
from .registers import RegisterBank, RegisterValue
from .state import BufferState, Position, Region, Selection
from .sync import BufferMirror, BufferValidationError
from .validation import ensure_cursor, ensure_row

__all__ = [
    "BufferDocument",
    "BufferState",
    "Position",
    "Region",
    "Selection",
    "RegisterBank",
    "RegisterValue",
    "Buffer",
    "Transaction",
    "BufferMirror",
    "BufferValidationError",
    "ensure_cursor",
    "ensure_row",
]
