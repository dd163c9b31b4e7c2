from __future__ import annotations

from typing import List, Sequence

import pytest

from lispy_engine.buffer import Buffer, Position
from lispy_engine.dispatch import CommandDispatcher, KeyInput, key_to_token
from lispy_engine.host import BufferHost
from lispy_engine.lisp import HeuristicOracle


def make_dispatcher(
    lines: Sequence[str],
    cursor: tuple[int, int] = (1, 0),
    *,
    filetype: str = "lisp",
) -> CommandDispatcher:
    buffer = Buffer.from_lines(lines, filetype=filetype, cursor=Position(*cursor))
    return CommandDispatcher(BufferHost(buffer, oracle=HeuristicOracle()))


def press(dispatcher: CommandDispatcher, *keys: str):
    result = None
    for key in keys:
        result = dispatcher.handle_key(KeyInput(key, text=key if len(key) == 1 else None))
    return result


def ctrl(key: str) -> KeyInput:
    return KeyInput(key, ("ctrl",))


def test_key_to_token_prefers_printable_text() -> None:
    assert key_to_token(KeyInput("semicolon", text=";")) == ";"
    assert key_to_token(KeyInput("k", ("ctrl",), text="k")) == "ctrl+k"
    assert key_to_token(KeyInput("escape")) == "escape"


def test_ctrl_k_kills_in_normal_mode() -> None:
    dispatcher = make_dispatcher(["(foo (bar))"], (1, 5))

    result = dispatcher.handle_key(ctrl("k"))

    assert result.message == "kill:at_open_delimiter"
    assert dispatcher.host.buffer.lines == ("(foo )",)


def test_ctrl_k_kills_in_insert_mode() -> None:
    dispatcher = make_dispatcher(["(foo (bar))"], (1, 5))
    press(dispatcher, "i")

    result = dispatcher.handle_key(ctrl("k"))

    assert dispatcher.mode == "insert"
    assert result.consumed
    assert dispatcher.host.buffer.lines == ("(foo )",)


def test_kill_emits_bus_event() -> None:
    dispatcher = make_dispatcher(["(foo (bar))"], (1, 5))
    payloads: List[object] = []
    dispatcher.bus.subscribe("lispy.kill", payloads.append)

    dispatcher.handle_key(ctrl("k"))

    assert payloads == [{"context": "at_open_delimiter", "killed": "(bar)"}]


def test_count_prefix_comments_several_sexps() -> None:
    dispatcher = make_dispatcher(["(foo)", "(bar)", "(baz)"])

    assert press(dispatcher, "2").status == "pending"
    assert dispatcher.pending_count == 2
    result = press(dispatcher, ";")

    assert result.message == "comment:sexp"
    assert dispatcher.host.buffer.lines == (";; (foo)", ";; (bar)", "(baz)")
    assert dispatcher.pending_count == 0


def test_zero_without_count_is_not_a_count() -> None:
    dispatcher = make_dispatcher(["(a)"])

    result = press(dispatcher, "0")

    assert result.status == "miss"
    assert dispatcher.pending_count == 0


def test_visual_selection_comment_returns_to_normal() -> None:
    dispatcher = make_dispatcher(["(a)", "(b)", "(c)"])

    press(dispatcher, "V")
    assert dispatcher.mode == "visual"
    press(dispatcher, "j")
    assert dispatcher.host.get_selected_rows() == (1, 2)

    result = press(dispatcher, ";")

    assert result.message == "comment:selection"
    assert dispatcher.mode == "normal"
    assert dispatcher.host.get_selected_rows() is None
    assert dispatcher.host.buffer.lines == (";; (a)", ";; (b)", "(c)")


def test_escape_leaves_visual_mode_and_clears_selection() -> None:
    dispatcher = make_dispatcher(["(a)", "(b)"])

    press(dispatcher, "V")
    press(dispatcher, "escape")

    assert dispatcher.mode == "normal"
    assert dispatcher.host.get_selected_rows() is None


def test_lispy_keys_are_disabled_for_other_filetypes() -> None:
    dispatcher = make_dispatcher(["(foo (bar))"], (1, 5), filetype="python")

    result = dispatcher.handle_key(ctrl("k"))

    assert result.status == "miss"
    assert dispatcher.host.buffer.lines == ("(foo (bar))",)


def test_run_command_by_name() -> None:
    dispatcher = make_dispatcher(["(foo)", "(bar)", "(baz)"])

    result = dispatcher.run_command("LispyComment", 2)

    assert result.message == "comment:sexp"
    assert dispatcher.host.buffer.lines == (";; (foo)", ";; (bar)", "(baz)")

    dispatcher.host.set_cursor(Position(3, 0))
    killed = dispatcher.run_command("LispyKill")
    assert killed.message == "kill:balanced_tail"
    assert dispatcher.host.buffer.lines[2] == ""


def test_run_command_unknown_and_disabled() -> None:
    dispatcher = make_dispatcher(["(a)"])
    assert dispatcher.run_command("LispyYank").message == "unknown_command:LispyYank"

    python = make_dispatcher(["(a)"], filetype="python")
    assert python.run_command("LispyKill").status == "disabled"


def test_insert_mode_typing() -> None:
    dispatcher = make_dispatcher(["(ab)"], (1, 2))
    press(dispatcher, "i")

    press(dispatcher, "x")
    assert dispatcher.host.buffer.lines == ("(axb)",)

    press(dispatcher, "backspace")
    assert dispatcher.host.buffer.lines == ("(ab)",)

    press(dispatcher, "enter")
    assert dispatcher.host.buffer.lines == ("(a", "b)")
    assert dispatcher.host.get_cursor() == Position(2, 0)

    assert press(dispatcher, "backspace").status == "noop"


def test_movement_takes_count() -> None:
    dispatcher = make_dispatcher(["(a)", "(b)", "(c)", "(d)"])

    press(dispatcher, "3", "j")

    assert dispatcher.host.get_cursor() == Position(4, 0)


def test_mode_switch_is_published() -> None:
    dispatcher = make_dispatcher(["(a)"])
    modes: List[object] = []
    dispatcher.bus.subscribe("mode.switch", modes.append)

    press(dispatcher, "i", "escape")

    assert modes == ["insert", "normal"]


def test_set_mode_rejects_unknown_mode() -> None:
    dispatcher = make_dispatcher(["(a)"])

    with pytest.raises(KeyError):
        dispatcher.set_mode("command")
