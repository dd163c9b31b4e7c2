from __future__ import annotations

import pytest

from lispy_engine.buffer import Position
from lispy_engine.lisp import HeuristicOracle, OracleUnavailable, PygmentsOracle
from lispy_engine.lisp.oracle import FILETYPE_LEXERS


class ExplodingLexer:
    def get_tokens_unprocessed(self, text: str):
        raise ValueError("boom")


def test_pygments_oracle_detects_strings() -> None:
    oracle = PygmentsOracle("lisp")
    lines = ['(message "hello world")']

    assert oracle.available
    assert oracle.in_string(lines, Position(1, 12))
    assert not oracle.in_string(lines, Position(1, 2))
    assert not oracle.in_comment(lines, Position(1, 12))


def test_pygments_oracle_detects_comments_on_later_rows() -> None:
    oracle = PygmentsOracle("scheme")
    lines = ["(define x 1)", "  ; trailing note", "(display x)"]

    assert oracle.in_comment(lines, Position(2, 6))
    assert not oracle.in_comment(lines, Position(3, 1))


def test_pygments_oracle_does_not_treat_char_literals_as_strings() -> None:
    oracle = PygmentsOracle("clojure")
    lines = ["(str \\a \"b\")"]

    assert not oracle.in_string(lines, Position(1, 5))
    assert oracle.in_string(lines, Position(1, 9))


def test_pygments_oracle_unknown_filetype_is_unavailable() -> None:
    oracle = PygmentsOracle("no-such-lisp-dialect")

    assert not oracle.available
    with pytest.raises(OracleUnavailable) as excinfo:
        oracle.in_string(["(a)"], Position(1, 0))
    assert excinfo.value.query == "string"


def test_pygments_oracle_wraps_lexer_failures() -> None:
    oracle = PygmentsOracle("lisp", lexer=ExplodingLexer())

    with pytest.raises(OracleUnavailable) as excinfo:
        oracle.in_comment(["(a)"], Position(1, 0))
    assert excinfo.value.query == "comment"
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_pygments_oracle_position_past_text_is_neither() -> None:
    oracle = PygmentsOracle("lisp")

    assert not oracle.in_string(["(a)"], Position(1, 3))
    assert not oracle.in_comment(["(a)"], Position(1, 3))


@pytest.mark.parametrize("filetype", ["lisp", "scheme", "racket", "clojure", "elisp"])
def test_filetype_lexers_resolve(filetype: str) -> None:
    assert filetype in FILETYPE_LEXERS
    assert PygmentsOracle(filetype).available


def test_heuristic_oracle_reads_only_current_line() -> None:
    oracle = HeuristicOracle()
    lines = ['(a "b', 'c" d)']

    assert oracle.in_string(lines, Position(1, 4))
    assert not oracle.in_string(lines, Position(2, 0))
    assert oracle.in_comment(["(a) ; x"], Position(1, 6))
    assert not oracle.in_comment(["(a) ; x"], Position(1, 3))
    assert not oracle.in_string(["(a)"], Position(5, 0))


def test_heuristic_oracle_treats_single_quote_as_symbol_quote() -> None:
    oracle = HeuristicOracle()
    lines = ["(foo 'bar) ; note"]

    assert not oracle.in_string(lines, Position(1, 6))
    assert oracle.in_comment(lines, Position(1, 13))
    assert oracle.in_string(['(f "it\'s")'], Position(1, 7))
