"""Buffer facade combining document, cursor state, and registers."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import ContextManager, Iterable, Optional, Sequence

from lispy_engine.runtime import telemetry

from .document import BufferDocument
from .registers import RegisterBank
from .state import BufferState, Position, Selection
from .sync import BufferMirror
from .validation import ensure_cursor, ensure_row


class Buffer:
    def __init__(
        self,
        *,
        name: str = "default",
        filetype: str = "lisp",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        registers: Optional[RegisterBank] = None,
    ) -> None:
        self.name = name
        self.filetype = filetype
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.registers = registers or RegisterBank()

    @classmethod
    def from_text(
        cls, text: str, *, name: str = "default", filetype: str = "lisp"
    ) -> "Buffer":
        return cls(
            name=name, filetype=filetype, document=BufferDocument.from_text(text)
        )

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        *,
        name: str = "default",
        filetype: str = "lisp",
        cursor: Optional[Position] = None,
    ) -> "Buffer":
        buffer = cls(
            name=name, filetype=filetype, document=BufferDocument.from_lines(lines)
        )
        if cursor is not None:
            buffer.move_cursor(cursor)
        return buffer

    @property
    def lines(self) -> Sequence[str]:
        return self.document.snapshot()

    @property
    def text(self) -> str:
        return self.document.text

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text=self.document.text,
            cursor=self.state.cursor,
            selection=self.state.selection,
            filetype=self.filetype,
            attributes=dict(attributes or {}),
        )

    def move_cursor(self, cursor: Position) -> Position:
        position = ensure_cursor(self.document, Position(*cursor))
        self.state.set_cursor(*position)
        return position

    def select(self, start: Position, end: Position) -> Selection:
        start = ensure_cursor(self.document, Position(*start))
        end = ensure_cursor(self.document, Position(*end))
        self.state.set_selection(start, end)
        return (start, end)

    def replace_rows(
        self, start_row: int, end_row: int, lines: Iterable[str], *, label: str
    ) -> None:
        """Replace rows ``start_row..end_row`` (inclusive, 1-indexed)."""

        ensure_row(self.document, start_row)
        ensure_row(self.document, end_row)
        new_lines = tuple(lines)
        with Transaction(self, label):
            self.document = self.document.replace_rows(start_row, end_row, new_lines)
            self._clamp_cursor()

    def _clamp_cursor(self) -> None:
        row, col = self.state.cursor
        row = max(1, min(row, self.document.line_count))
        col = max(0, min(col, len(self.document.get_line(row))))
        self.state.set_cursor(row, col)


class Transaction(AbstractContextManager["Transaction"]):
    """Wraps one buffer mutation in a telemetry span."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False
