"""Static delimiter tables for the three bracket kinds."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

OPEN_TO_CLOSE: Mapping[str, str] = MappingProxyType({"(": ")", "[": "]", "{": "}"})
CLOSE_TO_OPEN: Mapping[str, str] = MappingProxyType(
    {close: open_ for open_, close in OPEN_TO_CLOSE.items()}
)
OPENERS = frozenset(OPEN_TO_CLOSE)
CLOSERS = frozenset(CLOSE_TO_OPEN)
DELIMITERS = OPENERS | CLOSERS

QUOTES = frozenset({'"', "'"})
ESCAPE = "\\"
LINE_COMMENT = ";"


def is_open(char: Optional[str]) -> bool:
    return char is not None and char in OPENERS


def is_close(char: Optional[str]) -> bool:
    return char is not None and char in CLOSERS


def is_delimiter(char: Optional[str]) -> bool:
    return char is not None and char in DELIMITERS


def is_pair(open_char: Optional[str], close_char: Optional[str]) -> bool:
    """True when ``open_char`` followed by ``close_char`` forms an empty list."""

    if open_char is None or close_char is None:
        return False
    return OPEN_TO_CLOSE.get(open_char) == close_char


def new_balance() -> dict[str, int]:
    return {open_: 0 for open_ in OPEN_TO_CLOSE}


__all__ = [
    "OPEN_TO_CLOSE",
    "CLOSE_TO_OPEN",
    "OPENERS",
    "CLOSERS",
    "DELIMITERS",
    "QUOTES",
    "ESCAPE",
    "LINE_COMMENT",
    "is_open",
    "is_close",
    "is_delimiter",
    "is_pair",
    "new_balance",
]
