"""List-of-lines text storage addressed by 1-indexed rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence


@dataclass(slots=True)
class BufferDocument:
    """Immutable-ish text storage; every edit returns a new document.

    A document always holds at least one (possibly empty) line.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        lines = text.split("\n")
        return cls(_lines=lines)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "BufferDocument":
        return cls(_lines=list(lines) or [""])

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    def replace_rows(
        self, start_row: int, end_row: int, new_lines: Iterable[str]
    ) -> "BufferDocument":
        """Return a document with rows ``start_row..end_row`` (inclusive) replaced.

        ``end_row == start_row - 1`` inserts before ``start_row`` without
        removing anything.
        """

        lines = list(self._lines)
        lines[start_row - 1 : end_row] = list(new_lines)
        if not lines:
            lines = [""]
        return BufferDocument(_lines=lines, version=self.version + 1)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, row: int) -> str:
        return self._lines[row - 1]

    def get_lines(self, start_row: int, end_row: int) -> Sequence[str]:
        return tuple(self._lines[start_row - 1 : end_row])

    @property
    def text(self) -> str:
        return "\n".join(self._lines)
