"""Line comment toggling with sexp-aware range expansion."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from lispy_engine.buffer.state import Position
from lispy_engine.runtime import telemetry

from .context import CursorView, cursor_in_bounds
from .delimiters import LINE_COMMENT, is_open
from .scanner import char_at, find_sexp_end, skip_whitespace

if TYPE_CHECKING:
    from lispy_engine.host import EditorHost


@dataclass(frozen=True, slots=True)
class CommentResult:
    start_row: int
    end_row: int
    commented: bool
    trigger: str  # selection, in_comment, sexp, line


def _comment_pattern(prefix: str) -> "re.Pattern[str]":
    return re.compile(r"^(\s*)((?:%s)+)" % re.escape(prefix))


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())


def is_line_commented(line: str, prefix: str) -> bool:
    return _comment_pattern(prefix).match(line) is not None


def all_lines_commented(lines: Sequence[str], prefix: str) -> bool:
    """True when every non-blank line starts with ``prefix`` after its indent.

    Vacuously true for a range of blank lines, so toggling one is a no-op.
    """

    pattern = _comment_pattern(prefix)
    return all(pattern.match(line) for line in lines if line.strip())


def comment_lines(lines: Sequence[str], prefix: str) -> List[str]:
    widths = [_indent_width(line) for line in lines if line.strip()]
    indent = min(widths) if widths else 0
    commented = []
    for line in lines:
        if line.strip():
            commented.append(f"{line[:indent]}{prefix} {line[indent:]}")
        else:
            commented.append(line + prefix)
    return commented


def uncomment_lines(lines: Sequence[str], prefix: str) -> List[str]:
    """Drop the leading run of ``prefix`` and at most one following space."""

    pattern = _comment_pattern(prefix)
    uncommented = []
    for line in lines:
        match = pattern.match(line)
        if match is None:
            uncommented.append(line)
            continue
        rest = line[match.end() :]
        if rest.startswith(" "):
            rest = rest[1:]
        uncommented.append(match.group(1) + rest)
    return uncommented


def toggle_lines(lines: Sequence[str], prefix: str) -> Tuple[List[str], bool]:
    """Return the toggled lines and whether they ended up commented."""

    if all_lines_commented(lines, prefix):
        return uncomment_lines(lines, prefix), False
    return comment_lines(lines, prefix), True


def sexp_row_span(
    lines: Sequence[str], start: Position, count: int = 1
) -> Tuple[int, int]:
    """Rows covered by up to ``count`` consecutive sexps starting at ``start``."""

    end_row = start.row
    position = start
    for _ in range(max(count, 1)):
        end = find_sexp_end(lines, position)
        if end is None:
            break
        end_row = max(end_row, end.row)
        following = skip_whitespace(lines, Position(end.row, end.col + 1))
        if following is None or not is_open(char_at(lines[following.row - 1], following.col)):
            break
        position = following
    return start.row, end_row


class CommentEngine:
    def __init__(self, host: "EditorHost") -> None:
        self.host = host

    def run(self, count: int = 1) -> Optional[CommentResult]:
        if not cursor_in_bounds(self.host):
            telemetry.record_event(
                "comment.skipped", level="warning", data={"reason": "cursor_out_of_range"}
            )
            return None
        count = max(int(count or 1), 1)
        with telemetry.span(
            "lispy::comment", component="comment", metadata={"count": count}
        ) as handle:
            result = self._dispatch(count)
            handle.add_metadata("trigger", result.trigger)
        telemetry.record_event(
            "comment.toggle",
            data={
                "trigger": result.trigger,
                "rows": (result.start_row, result.end_row),
                "commented": result.commented,
            },
        )
        return result

    def prefix(self) -> str:
        prefix = (self.host.comment_prefix_for_current_context() or "").strip()
        return prefix or LINE_COMMENT

    def _dispatch(self, count: int) -> CommentResult:
        selected = self.host.get_selected_rows()
        if selected is not None:
            start_row, end_row = selected
            result = self._toggle(start_row, end_row, trigger="selection")
            self.host.clear_selection()
            return result

        view = CursorView(self.host)
        if view.in_comment():
            row = view.row
            lines = self.host.get_buffer_lines(row, row)
            self._apply(row, row, uncomment_lines(lines, self.prefix()))
            return CommentResult(row, row, commented=False, trigger="in_comment")

        if is_open(char_at(view.line, view.col)):
            start_row, end_row = sexp_row_span(view.lines, view.cursor, count)
            return self._toggle(start_row, end_row, trigger="sexp")

        return self._toggle(view.row, view.row, trigger="line")

    def _toggle(self, start_row: int, end_row: int, *, trigger: str) -> CommentResult:
        lines = self.host.get_buffer_lines(start_row, end_row)
        toggled, commented = toggle_lines(lines, self.prefix())
        self._apply(start_row, end_row, toggled)
        return CommentResult(start_row, end_row, commented=commented, trigger=trigger)

    def _apply(self, start_row: int, end_row: int, lines: Sequence[str]) -> None:
        cursor = self.host.get_cursor()
        self.host.set_buffer_lines(start_row, end_row, lines)
        line = self.host.get_buffer_line(cursor.row)
        self.host.set_cursor(Position(cursor.row, min(cursor.col, len(line))))


def comment(host: "EditorHost", count: int = 1) -> Optional[CommentResult]:
    """Toggle comments for the selection, the sexp(s) at point, or the line."""

    return CommentEngine(host).run(count)


__all__ = [
    "CommentEngine",
    "CommentResult",
    "comment",
    "comment_lines",
    "uncomment_lines",
    "toggle_lines",
    "all_lines_commented",
    "is_line_commented",
    "sexp_row_span",
]
