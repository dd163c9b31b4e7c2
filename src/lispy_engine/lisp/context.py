"""Cursor context classification for balanced edits.

Rules are tried top to bottom and the first match wins. The order is part of
the behaviour: an opening delimiter must be seen before the enclosing-list
rule, otherwise a kill at ``(`` would spill into the parent list.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, NamedTuple, Optional, Sequence

from lispy_engine.buffer.state import Position
from lispy_engine.runtime import telemetry

from .delimiters import is_open, is_pair
from .errors import OracleUnavailable
from .oracle import HeuristicOracle, SyntaxOracle
from .scanner import (
    balanced_to_end_of_line,
    char_at,
    find_enclosing_close,
    find_string_end,
)

if TYPE_CHECKING:
    from lispy_engine.host import EditorHost


class ContextKind(str, Enum):
    IN_COMMENT = "in_comment"
    IN_STRING = "in_string"
    WHITESPACE_LINE = "whitespace_line"
    EMPTY_LIST = "empty_list"
    BALANCED_TAIL = "balanced_tail"
    AT_OPEN_DELIMITER = "at_open_delimiter"
    HAS_ENCLOSING_CLOSE = "has_enclosing_close"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class EditContext:
    kind: ContextKind
    cursor: Position
    string_end: Optional[int] = None
    enclosing_close: Optional[Position] = None

    @property
    def has_end_on_line(self) -> bool:
        return self.string_end is not None


class CursorView:
    """Snapshot of the host state a classification needs.

    Oracle answers are fetched lazily, once, and fall back to
    ``HeuristicOracle`` when the host raises ``OracleUnavailable``.
    """

    def __init__(
        self, host: "EditorHost", *, fallback: Optional[SyntaxOracle] = None
    ) -> None:
        self.host = host
        self.cursor = Position(*host.get_cursor())
        self.lines: Sequence[str] = tuple(host.get_buffer_lines(1, host.line_count()))
        self.line = self.lines[self.cursor.row - 1]
        self._fallback = fallback or HeuristicOracle()
        self._answers: Dict[str, bool] = {}

    @property
    def row(self) -> int:
        return self.cursor.row

    @property
    def col(self) -> int:
        return self.cursor.col

    def in_comment(self) -> bool:
        return self._ask("comment", self.host.classify_in_comment)

    def in_string(self) -> bool:
        return self._ask("string", self.host.classify_in_string)

    def _ask(self, query: str, method: Callable[[], bool]) -> bool:
        if query not in self._answers:
            try:
                answer = bool(method())
            except OracleUnavailable as exc:
                telemetry.record_event(
                    "oracle.unavailable",
                    level="warning",
                    data={"query": query, "reason": str(exc)},
                )
                if query == "comment":
                    answer = self._fallback.in_comment(self.lines, self.cursor)
                else:
                    answer = self._fallback.in_string(self.lines, self.cursor)
            self._answers[query] = answer
        return self._answers[query]


# A rule test returns None when it does not apply, else the context payload.
RuleTest = Callable[[CursorView], Optional[Dict[str, Any]]]


class ContextRule(NamedTuple):
    kind: ContextKind
    test: RuleTest


def _in_comment(view: CursorView) -> Optional[Dict[str, Any]]:
    return {} if view.in_comment() else None


def _in_string(view: CursorView) -> Optional[Dict[str, Any]]:
    if not view.in_string():
        return None
    return {"string_end": find_string_end(view.line, view.col)}


def _whitespace_line(view: CursorView) -> Optional[Dict[str, Any]]:
    return {} if not view.line.strip() else None


def _empty_list(view: CursorView) -> Optional[Dict[str, Any]]:
    before = char_at(view.line, view.col - 1)
    return {} if is_pair(before, char_at(view.line, view.col)) else None


def _balanced_tail(view: CursorView) -> Optional[Dict[str, Any]]:
    return {} if balanced_to_end_of_line(view.line, view.col) else None


def _at_open_delimiter(view: CursorView) -> Optional[Dict[str, Any]]:
    return {} if is_open(char_at(view.line, view.col)) else None


def _has_enclosing_close(view: CursorView) -> Optional[Dict[str, Any]]:
    close = find_enclosing_close(view.lines, view.row, view.col)
    if close is None or close <= view.cursor:
        return None
    return {"enclosing_close": close}


def _fallback(view: CursorView) -> Optional[Dict[str, Any]]:
    del view
    return {}


RULES: tuple[ContextRule, ...] = (
    ContextRule(ContextKind.IN_COMMENT, _in_comment),
    ContextRule(ContextKind.IN_STRING, _in_string),
    ContextRule(ContextKind.WHITESPACE_LINE, _whitespace_line),
    ContextRule(ContextKind.EMPTY_LIST, _empty_list),
    ContextRule(ContextKind.BALANCED_TAIL, _balanced_tail),
    ContextRule(ContextKind.AT_OPEN_DELIMITER, _at_open_delimiter),
    ContextRule(ContextKind.HAS_ENCLOSING_CLOSE, _has_enclosing_close),
    ContextRule(ContextKind.FALLBACK, _fallback),
)


def cursor_in_bounds(host: "EditorHost") -> bool:
    """True when the host cursor addresses an existing row and column."""

    row, col = host.get_cursor()
    if row < 1 or row > host.line_count():
        return False
    return 0 <= col <= len(host.get_buffer_line(row))


def classify_view(
    view: CursorView, rules: Sequence[ContextRule] = RULES
) -> EditContext:
    for rule in rules:
        payload = rule.test(view)
        if payload is not None:
            return EditContext(kind=rule.kind, cursor=view.cursor, **payload)
    return EditContext(kind=ContextKind.FALLBACK, cursor=view.cursor)


def classify(
    host: "EditorHost", *, fallback: Optional[SyntaxOracle] = None
) -> EditContext:
    """Classify the host's cursor into exactly one ``EditContext``."""

    view = CursorView(host, fallback=fallback)
    with telemetry.span(
        "lispy::classify",
        component="classifier",
        metadata={"row": view.row, "col": view.col},
    ) as handle:
        context = classify_view(view)
        handle.add_metadata("context", context.kind.value)
    return context


__all__ = [
    "ContextKind",
    "EditContext",
    "CursorView",
    "ContextRule",
    "RULES",
    "classify",
    "classify_view",
    "cursor_in_bounds",
]
