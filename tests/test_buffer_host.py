from __future__ import annotations

from typing import List

import pytest

from lispy_engine.buffer import Buffer, BufferValidationError, Position
from lispy_engine.config import LispyConfig
from lispy_engine.host import BufferHost
from lispy_engine.lisp import HeuristicOracle, PygmentsOracle


def make_host(*lines: str, **kwargs) -> BufferHost:
    buffer = Buffer.from_lines(lines or ("(a)",), filetype=kwargs.pop("filetype", "lisp"))
    return BufferHost(buffer, **kwargs)


def test_default_oracle_follows_buffer_filetype() -> None:
    host = make_host("(a)", filetype="scheme")

    assert isinstance(host.oracle, PygmentsOracle)
    assert host.oracle.filetype == "scheme"
    assert host.current_filetype() == "scheme"


def test_line_access_is_one_indexed_and_inclusive() -> None:
    host = make_host("(a", " b", " c)")

    assert host.line_count() == 3
    assert host.get_buffer_line(2) == " b"
    assert list(host.get_buffer_lines(2, 3)) == [" b", " c)"]


def test_set_buffer_lines_replaces_and_removes_rows() -> None:
    host = make_host("(a", " b", " c)")

    host.set_buffer_lines(1, 2, ["(a b"])
    assert host.buffer.lines == ("(a b", " c)")

    host.set_buffer_lines(2, 2, [])
    assert host.buffer.lines == ("(a b",)


def test_set_buffer_lines_rejects_rows_out_of_range() -> None:
    host = make_host("(a)")

    with pytest.raises(BufferValidationError):
        host.set_buffer_lines(2, 2, ["x"])


def test_set_cursor_validates_position() -> None:
    host = make_host("(a)")

    host.set_cursor(Position(1, 3))
    assert host.get_cursor() == Position(1, 3)
    with pytest.raises(BufferValidationError):
        host.set_cursor(Position(1, 4))


def test_selection_rows_are_normalized() -> None:
    host = make_host("a", "b", "c", oracle=HeuristicOracle())

    host.select_rows(3, 1)
    assert host.get_selected_rows() == (1, 3)

    host.clear_selection()
    assert host.get_selected_rows() is None


def test_extend_selection_keeps_anchor() -> None:
    host = make_host("a", "b", "c", oracle=HeuristicOracle())

    host.select_rows(2, 2)
    host.extend_selection(3)
    assert host.get_selected_rows() == (2, 3)

    host.extend_selection(1)
    assert host.get_selected_rows() == (1, 2)


def test_store_killed_text_sets_register_type() -> None:
    host = make_host("(a)")

    host.store_killed_text("(b)")
    assert host.buffer.registers.get('"').type == "character"

    host.store_killed_text("  \n", linewise=True)
    assert host.buffer.registers.get('"').type == "line"
    assert host.buffer.registers.kill_ring() == ["  \n", "(b)"]

    host.store_killed_text(")\n")
    assert host.buffer.registers.get('"').type == "character"


def test_comment_prefix_comes_from_config() -> None:
    config = LispyConfig(comment_strings={"lisp": "#| %s |#"})
    host = make_host("(a)", config=config)

    assert host.comment_prefix_for_current_context() == "#|"


def test_reindent_calls_indenter_with_current_row() -> None:
    rows: List[int] = []

    def indenter(target: BufferHost, row: int) -> None:
        rows.append(row)
        target.set_buffer_lines(row, row, ["  " + target.get_buffer_line(row).lstrip()])

    host = make_host("(a", "b)", indenter=indenter)
    host.set_cursor(Position(2, 0))

    host.request_reindent_current_line()

    assert rows == [2]
    assert host.reindent_requests == 1
    assert host.buffer.lines == ("(a", "  b)")


def test_mirror_reports_filetype_and_selection() -> None:
    host = make_host("(a)", "(b)", oracle=HeuristicOracle())
    host.select_rows(1, 2)

    mirror = host.buffer.mirror()

    assert mirror.filetype == "lisp"
    assert mirror.text == "(a)\n(b)"
    assert mirror.selection == (Position(1, 0), Position(2, 0))


def test_buffer_from_text_splits_lines_and_keeps_filetype() -> None:
    buffer = Buffer.from_text("(a)\n(b)", filetype="scheme")
    host = BufferHost(buffer)

    assert host.line_count() == 2
    assert host.get_buffer_line(2) == "(b)"
    assert host.current_filetype() == "scheme"
    assert buffer.document.version == 0
