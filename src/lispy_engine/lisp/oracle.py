"""Syntax oracles answering "is the cursor inside a string / comment?".

Hosts with a real parser can supply their own oracle. ``PygmentsOracle``
classifies with a pygments lexer for the buffer's filetype and
``HeuristicOracle`` judges from the cursor's line alone.
"""

from __future__ import annotations

from typing import Any, FrozenSet, List, Mapping, Optional, Protocol, Sequence, Tuple

from pygments.lexers import get_lexer_by_name
from pygments.token import Comment, String
from pygments.util import ClassNotFound

from lispy_engine.buffer.state import Position

from .errors import OracleUnavailable
from .scanner import LineState, scan_line_state

# Host filetype -> pygments lexer alias.
FILETYPE_LEXERS: Mapping[str, str] = {
    "lisp": "common-lisp",
    "commonlisp": "common-lisp",
    "lfe": "common-lisp",
    "scheme": "scheme",
    "query": "scheme",
    "racket": "racket",
    "clojure": "clojure",
    "fennel": "fennel",
    "janet": "janet",
    "hy": "hylang",
    "elisp": "emacs-lisp",
}

Token = Tuple[int, Any, str]


class SyntaxOracle(Protocol):
    def in_string(self, lines: Sequence[str], position: Position) -> bool: ...

    def in_comment(self, lines: Sequence[str], position: Position) -> bool: ...


class HeuristicOracle:
    """Text-pattern classification using the line scanner's comment rules.

    Only ``"`` opens a string; a ``'`` quotes a symbol.
    """

    quotes: FrozenSet[str] = frozenset('"')

    def in_string(self, lines: Sequence[str], position: Position) -> bool:
        return self._state(lines, position).in_string

    def in_comment(self, lines: Sequence[str], position: Position) -> bool:
        return self._state(lines, position).in_comment

    def _state(self, lines: Sequence[str], position: Position) -> LineState:
        return scan_line_state(_line(lines, position), position.col, self.quotes)


class PygmentsOracle:
    """Token-based classification with a pygments Lisp-family lexer.

    Raises ``OracleUnavailable`` when no lexer exists for the filetype or the
    lexer fails on the buffer text.
    """

    def __init__(self, filetype: str, *, lexer: Any | None = None) -> None:
        self.filetype = filetype
        self._lexer = lexer if lexer is not None else _lexer_for(filetype)
        self._cache: Optional[Tuple[str, List[Token]]] = None

    @property
    def available(self) -> bool:
        return self._lexer is not None

    def in_string(self, lines: Sequence[str], position: Position) -> bool:
        token_type = self._token_at(lines, position, query="string")
        if token_type is None:
            return False
        # Quoted symbols and character literals share the String namespace.
        if token_type in String.Symbol or token_type in String.Char:
            return False
        return token_type in String

    def in_comment(self, lines: Sequence[str], position: Position) -> bool:
        token_type = self._token_at(lines, position, query="comment")
        return token_type is not None and token_type in Comment

    def _token_at(
        self, lines: Sequence[str], position: Position, *, query: str
    ) -> Optional[Any]:
        if self._lexer is None:
            raise OracleUnavailable(
                f"No pygments lexer for filetype '{self.filetype}'", query=query
            )
        text = "\n".join(lines)
        offset = sum(len(line) + 1 for line in lines[: position.row - 1])
        offset += position.col
        for start, token_type, value in self._tokens(text, query=query):
            if start <= offset < start + len(value):
                return token_type
            if start > offset:
                break
        return None

    def _tokens(self, text: str, *, query: str) -> List[Token]:
        if self._cache is not None and self._cache[0] == text:
            return self._cache[1]
        try:
            tokens = list(self._lexer.get_tokens_unprocessed(text))
        except Exception as exc:
            raise OracleUnavailable(
                f"pygments lexer failed: {exc}", query=query
            ) from exc
        self._cache = (text, tokens)
        return tokens


def _lexer_for(filetype: str) -> Any | None:
    alias = FILETYPE_LEXERS.get(filetype, filetype)
    try:
        return get_lexer_by_name(alias, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return None


def _line(lines: Sequence[str], position: Position) -> str:
    if position.row < 1 or position.row > len(lines):
        return ""
    return lines[position.row - 1]


__all__ = [
    "FILETYPE_LEXERS",
    "SyntaxOracle",
    "HeuristicOracle",
    "PygmentsOracle",
]
