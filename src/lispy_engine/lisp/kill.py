"""Balanced kill: one deletion chosen by the cursor's edit context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Optional

from lispy_engine.buffer.state import Position, Region
from lispy_engine.runtime import telemetry

from .context import ContextKind, EditContext, classify, cursor_in_bounds
from .delimiters import is_delimiter, is_open
from .scanner import char_at, find_sexp_end

if TYPE_CHECKING:
    from lispy_engine.host import EditorHost


@dataclass(frozen=True, slots=True)
class KillResult:
    context: EditContext
    killed: Optional[str] = None
    region: Optional[Region] = None

    @property
    def performed(self) -> bool:
        return self.killed is not None


class KillEngine:
    """Performs exactly one balanced deletion against an ``EditorHost``."""

    def __init__(self, host: "EditorHost") -> None:
        self.host = host
        self._actions: Dict[ContextKind, Callable[[EditContext], KillResult]] = {
            ContextKind.IN_COMMENT: self._kill_line,
            ContextKind.IN_STRING: self._kill_in_string,
            ContextKind.WHITESPACE_LINE: self._kill_whole_line,
            ContextKind.EMPTY_LIST: self._delete_empty_list,
            ContextKind.BALANCED_TAIL: self._kill_line,
            ContextKind.AT_OPEN_DELIMITER: self._kill_sexp,
            ContextKind.HAS_ENCLOSING_CLOSE: self._kill_to_list_end,
            ContextKind.FALLBACK: self._kill_sexp,
        }

    def run(self) -> Optional[KillResult]:
        if not cursor_in_bounds(self.host):
            telemetry.record_event(
                "kill.skipped", level="warning", data={"reason": "cursor_out_of_range"}
            )
            return None
        context = classify(self.host)
        with telemetry.span(
            "lispy::kill",
            component="kill",
            metadata={"context": context.kind.value, "cursor": context.cursor},
        ) as handle:
            result = self._actions[context.kind](context)
            handle.add_metadata("performed", result.performed)
        telemetry.record_event(
            "kill.context",
            data={
                "context": context.kind.value,
                "killed_chars": len(result.killed or ""),
            },
        )
        return result

    def _kill_line(self, context: EditContext) -> KillResult:
        row, col = context.cursor
        line = self.host.get_buffer_line(row)
        if col < len(line):
            self.host.set_buffer_lines(row, row, [line[:col]])
            return self._store(context, line[col:])

        if row >= self.host.line_count():
            return KillResult(context)
        following = self.host.get_buffer_line(row + 1)
        self.host.set_buffer_lines(row, row + 1, [line + following])
        self.host.set_cursor(Position(row, col))
        return self._store(context, "\n")

    def _kill_in_string(self, context: EditContext) -> KillResult:
        if context.string_end is None:
            return self._kill_line(context)
        row, col = context.cursor
        if context.string_end <= col:
            return KillResult(context)
        return self._kill_region(
            context, Region(context.cursor, Position(row, context.string_end - 1))
        )

    def _kill_whole_line(self, context: EditContext) -> KillResult:
        row = context.cursor.row
        killed = self.host.get_buffer_line(row) + "\n"
        total = self.host.line_count()
        if total <= 1:
            self.host.set_buffer_lines(row, row, [""])
            self.host.set_cursor(Position(row, 0))
            return self._store(context, killed, linewise=True)

        self.host.set_buffer_lines(row, row, [])
        self.host.set_cursor(Position(min(row, total - 1), 0))
        self.host.request_reindent_current_line()
        current = self.host.get_cursor().row
        line = self.host.get_buffer_line(current)
        self.host.set_cursor(Position(current, len(line) - len(line.lstrip())))
        return self._store(context, killed, linewise=True)

    def _delete_empty_list(self, context: EditContext) -> KillResult:
        row, col = context.cursor
        line = self.host.get_buffer_line(row)
        self.host.set_buffer_lines(row, row, [line[: col - 1] + line[col + 1 :]])
        self.host.set_cursor(Position(row, col - 1))
        region = Region(Position(row, col - 1), Position(row, col))
        return self._store(context, line[col - 1 : col + 1], region)

    def _kill_sexp(self, context: EditContext) -> KillResult:
        row, col = context.cursor
        lines = self.host.get_buffer_lines(1, self.host.line_count())
        if is_open(char_at(lines[row - 1], col)):
            end = find_sexp_end(lines, context.cursor)
            if end is not None:
                return self._kill_region(context, Region(context.cursor, end))
        return self._kill_symbol(context)

    def _kill_symbol(self, context: EditContext) -> KillResult:
        row, col = context.cursor
        line = self.host.get_buffer_line(row)
        end = col
        while end < len(line) and not line[end].isspace() and not is_delimiter(line[end]):
            end += 1
        if end == col:
            return KillResult(context)
        return self._kill_region(context, Region(context.cursor, Position(row, end - 1)))

    def _kill_to_list_end(self, context: EditContext) -> KillResult:
        close = context.enclosing_close
        if close is None or close <= context.cursor:
            return self._kill_sexp(context)
        return self._kill_region(
            context, Region(context.cursor, Position(close.row, close.col - 1))
        )

    def _kill_region(self, context: EditContext, region: Region) -> KillResult:
        start, end = region.start, region.end
        lines = list(self.host.get_buffer_lines(start.row, end.row))
        stop = end.col + 1
        if not region.multiline:
            line = lines[0]
            killed = line[start.col : stop]
            joined = line[: start.col] + line[stop:]
        else:
            pieces = [lines[0][start.col :], *lines[1:-1], lines[-1][:stop]]
            killed = "\n".join(pieces)
            joined = lines[0][: start.col] + lines[-1][stop:]
        self.host.set_buffer_lines(start.row, end.row, [joined])
        self.host.set_cursor(start)
        return self._store(context, killed, region)

    def _store(
        self,
        context: EditContext,
        killed: str,
        region: Optional[Region] = None,
        *,
        linewise: bool = False,
    ) -> KillResult:
        # Only a whole-line kill is linewise; other kills may still end in "\n".
        self.host.store_killed_text(killed, linewise=linewise)
        return KillResult(context=context, killed=killed, region=region)


def kill(host: "EditorHost") -> Optional[KillResult]:
    """Run one balanced kill at the host's cursor.

    Returns ``None`` without touching the buffer when the cursor is out of range.
    """

    return KillEngine(host).run()


__all__ = ["KillEngine", "KillResult", "kill"]
