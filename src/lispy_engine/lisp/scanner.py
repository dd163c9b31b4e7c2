"""Line-oriented delimiter scanning that skips strings and line comments.

String state never crosses a line boundary: a quote left open at the end of a
line is forgotten on the next one. Balance counters used by the multi-line
scans do carry over.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterator, NamedTuple, Optional, Sequence, Tuple

from lispy_engine.buffer.state import Position

from .delimiters import (
    CLOSE_TO_OPEN,
    ESCAPE,
    LINE_COMMENT,
    OPEN_TO_CLOSE,
    QUOTES,
    new_balance,
)


def char_at(line: str, col: int) -> Optional[str]:
    if col < 0 or col >= len(line):
        return None
    return line[col]


def is_escaped(line: str, index: int) -> bool:
    """True when ``line[index]`` follows an odd run of backslashes."""

    run = 0
    cursor = index - 1
    while cursor >= 0 and line[cursor] == ESCAPE:
        run += 1
        cursor -= 1
    return run % 2 == 1


@dataclass(slots=True)
class StringScanState:
    in_string: bool = False
    quote: Optional[str] = None
    quotes: FrozenSet[str] = QUOTES

    def reset(self) -> None:
        self.in_string = False
        self.quote = None

    def step(self, line: str, index: int) -> bool:
        """Consume ``line[index]``; return True if it is code outside a string."""

        char = line[index]
        if char in self.quotes and not is_escaped(line, index):
            if not self.in_string:
                self.in_string = True
                self.quote = char
            elif char == self.quote:
                self.reset()
            return False
        return not self.in_string


def iter_code(
    lines: Sequence[str], start: Position
) -> Iterator[Tuple[Position, str]]:
    """Yield ``(position, char)`` for every character outside strings and comments.

    Scanning starts at ``start`` (inclusive) and runs to the end of ``lines``.
    """

    state = StringScanState()
    for row in range(start.row, len(lines) + 1):
        line = lines[row - 1]
        state.reset()
        first = max(start.col, 0) if row == start.row else 0
        for index in range(first, len(line)):
            if not state.in_string and line[index] == LINE_COMMENT:
                break
            if state.step(line, index):
                yield Position(row, index), line[index]


def balanced_to_end_of_line(line: str, start_column: int) -> bool:
    balance = new_balance()
    for _, char in iter_code((line,), Position(1, start_column)):
        if char in OPEN_TO_CLOSE:
            balance[char] += 1
        elif char in CLOSE_TO_OPEN:
            open_char = CLOSE_TO_OPEN[char]
            balance[open_char] -= 1
            if balance[open_char] < 0:
                return False
    return all(depth == 0 for depth in balance.values())


def find_string_end(line: str, column: int) -> Optional[int]:
    """Column of the quote closing the string that contains ``column``.

    The active quote is the nearest unescaped quote before ``column``
    (``"`` when there is none). ``None`` means the string runs past the line.
    """

    quote = '"'
    for index in range(min(column, len(line)) - 1, -1, -1):
        if line[index] in QUOTES and not is_escaped(line, index):
            quote = line[index]
            break

    for index in range(max(column, 0), len(line)):
        if line[index] == quote and not is_escaped(line, index):
            return index
    return None


def find_enclosing_close(
    lines: Sequence[str], start_row: int, start_col: int
) -> Optional[Position]:
    """Position of the close delimiter that ends the list containing the start."""

    balance = new_balance()
    for position, char in iter_code(lines, Position(start_row, start_col)):
        if char in OPEN_TO_CLOSE:
            balance[char] += 1
        elif char in CLOSE_TO_OPEN:
            open_char = CLOSE_TO_OPEN[char]
            if balance[open_char] == 0:
                return position
            balance[open_char] -= 1
    return None


def find_sexp_end(lines: Sequence[str], position: Position) -> Optional[Position]:
    """Matching close for the open delimiter at ``position``.

    Only delimiters of the same kind are counted.
    """

    row, col = position
    if row < 1 or row > len(lines):
        return None
    open_char = char_at(lines[row - 1], col)
    if open_char not in OPEN_TO_CLOSE:
        return None
    close_char = OPEN_TO_CLOSE[open_char]

    depth = 0
    for current, char in iter_code(lines, Position(row, col)):
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return current
    return None


def skip_whitespace(lines: Sequence[str], position: Position) -> Optional[Position]:
    """First non-whitespace position at or after ``position``, across lines."""

    for row in range(position.row, len(lines) + 1):
        line = lines[row - 1]
        first = max(position.col, 0) if row == position.row else 0
        for index in range(first, len(line)):
            if not line[index].isspace():
                return Position(row, index)
    return None


class LineState(NamedTuple):
    in_string: bool
    in_comment: bool


def scan_line_state(
    line: str, column: int, quotes: FrozenSet[str] = QUOTES
) -> LineState:
    """String/comment state of the character at ``column``, judged from the line alone.

    An opening quote is outside its string; a closing quote is inside it. A
    ``;`` outside a string comments out itself and the rest of the line.
    Only characters in ``quotes`` open strings.
    """

    state = StringScanState(quotes=quotes)
    for index in range(min(column, len(line))):
        if not state.in_string and line[index] == LINE_COMMENT:
            return LineState(in_string=False, in_comment=True)
        state.step(line, index)
    if not state.in_string and char_at(line, column) == LINE_COMMENT:
        return LineState(in_string=False, in_comment=True)
    return LineState(in_string=state.in_string, in_comment=False)


__all__ = [
    "StringScanState",
    "LineState",
    "char_at",
    "is_escaped",
    "iter_code",
    "balanced_to_end_of_line",
    "find_string_end",
    "find_enclosing_close",
    "find_sexp_end",
    "skip_whitespace",
    "scan_line_state",
]
