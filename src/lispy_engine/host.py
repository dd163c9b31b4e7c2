"""Host capability contract and an in-memory host built on ``Buffer``."""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence, Tuple

from lispy_engine.buffer import Buffer, Position
from lispy_engine.config import LispyConfig
from lispy_engine.lisp.oracle import PygmentsOracle, SyntaxOracle
from lispy_engine.runtime import telemetry

Indenter = Callable[["BufferHost", int], None]


class EditorHost(Protocol):
    """Everything the engine needs from an editor.

    Rows are 1-indexed and row ranges inclusive. ``classify_in_string`` and
    ``classify_in_comment`` may raise ``OracleUnavailable``.
    """

    def get_buffer_line(self, row: int) -> str: ...

    def get_buffer_lines(self, start_row: int, end_row: int) -> Sequence[str]: ...

    def set_buffer_lines(
        self, start_row: int, end_row: int, replacement: Sequence[str]
    ) -> None: ...

    def line_count(self) -> int: ...

    def get_cursor(self) -> Position: ...

    def set_cursor(self, position: Position) -> None: ...

    def get_selected_rows(self) -> Optional[Tuple[int, int]]: ...

    def clear_selection(self) -> None: ...

    def current_filetype(self) -> str: ...

    def classify_in_string(self) -> bool: ...

    def classify_in_comment(self) -> bool: ...

    def store_killed_text(self, text: str, *, linewise: bool = False) -> None: ...

    def comment_prefix_for_current_context(self) -> str: ...

    def request_reindent_current_line(self) -> None: ...


class BufferHost:
    """``EditorHost`` over a ``Buffer``, a syntax oracle, and a ``LispyConfig``."""

    def __init__(
        self,
        buffer: Buffer,
        *,
        oracle: Optional[SyntaxOracle] = None,
        config: Optional[LispyConfig] = None,
        indenter: Optional[Indenter] = None,
    ) -> None:
        self.buffer = buffer
        self.config = config or LispyConfig()
        self.oracle = oracle or PygmentsOracle(buffer.filetype)
        self.indenter = indenter
        self.reindent_requests = 0

    def get_buffer_line(self, row: int) -> str:
        return self.buffer.document.get_line(row)

    def get_buffer_lines(self, start_row: int, end_row: int) -> Sequence[str]:
        return self.buffer.document.get_lines(start_row, end_row)

    def set_buffer_lines(
        self, start_row: int, end_row: int, replacement: Sequence[str]
    ) -> None:
        self.buffer.replace_rows(start_row, end_row, replacement, label="lispy_edit")

    def line_count(self) -> int:
        return self.buffer.document.line_count

    def get_cursor(self) -> Position:
        return self.buffer.state.cursor

    def set_cursor(self, position: Position) -> None:
        self.buffer.move_cursor(position)

    def get_selected_rows(self) -> Optional[Tuple[int, int]]:
        return self.buffer.state.selected_rows()

    def clear_selection(self) -> None:
        self.buffer.state.clear_selection()

    def select_rows(self, start_row: int, end_row: int) -> None:
        self.buffer.select(Position(start_row, 0), Position(end_row, 0))

    def extend_selection(self, row: int) -> None:
        """Move the free end of the selection to ``row``, keeping the anchor."""

        selection = self.buffer.state.selection
        anchor = selection[0] if selection else self.get_cursor()
        self.buffer.select(anchor, Position(row, 0))

    def current_filetype(self) -> str:
        return self.buffer.filetype

    def classify_in_string(self) -> bool:
        return self.oracle.in_string(self.buffer.lines, self.get_cursor())

    def classify_in_comment(self) -> bool:
        return self.oracle.in_comment(self.buffer.lines, self.get_cursor())

    def store_killed_text(self, text: str, *, linewise: bool = False) -> None:
        register_type = "line" if linewise else "character"
        self.buffer.registers.kill(text, register_type=register_type)

    def comment_prefix_for_current_context(self) -> str:
        return self.config.comment_prefix(self.buffer.filetype)

    def request_reindent_current_line(self) -> None:
        self.reindent_requests += 1
        row = self.get_cursor().row
        telemetry.record_event(
            "host.reindent",
            data={"buffer": self.buffer.name, "row": row},
        )
        if self.indenter is not None:
            self.indenter(self, row)


__all__ = ["EditorHost", "BufferHost", "Indenter"]
