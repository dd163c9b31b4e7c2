from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pytest

from lispy_engine.adapters.textual import TextualLispyAdapter, TextualUIHooks
from lispy_engine.buffer import Buffer, Position
from lispy_engine.dispatch import CommandDispatcher
from lispy_engine.host import BufferHost
from lispy_engine.lisp import HeuristicOracle


def make_dispatcher(*lines: str, cursor: tuple[int, int] = (1, 0)) -> CommandDispatcher:
    buffer = Buffer.from_lines(lines, cursor=Position(*cursor))
    return CommandDispatcher(BufferHost(buffer, oracle=HeuristicOracle()))


class TextOnlyHost:
    def current_filetype(self) -> str:
        return "lisp"


def test_adapter_updates_buffer_and_status() -> None:
    dispatcher = make_dispatcher("(foo (bar))", cursor=(1, 5))
    updates: List[str] = []
    statuses: List[str] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: updates.append(mirror.text),
        update_status=lambda status: statuses.append(status),
    )
    adapter = TextualLispyAdapter(dispatcher, hooks)

    adapter.handle_textual_key("k", modifiers=("CTRL",))

    assert updates == ["(foo (bar))", "(foo )"]
    assert statuses == ["NORMAL kill:at_open_delimiter"]


def test_adapter_reports_mode_changes_in_status() -> None:
    dispatcher = make_dispatcher("(a)")
    statuses: List[str] = []
    adapter = TextualLispyAdapter(
        dispatcher,
        TextualUIHooks(update_buffer=lambda mirror: None, update_status=statuses.append),
    )

    adapter.handle_textual_key("i", text="i")
    adapter.handle_textual_key("escape")

    assert statuses == ["INSERT enter_insert", "NORMAL enter_normal"]


def test_adapter_relays_lispy_events() -> None:
    dispatcher = make_dispatcher("(foo)", "(bar)")
    events: List[Dict[str, Any]] = []
    hooks = TextualUIHooks(
        update_buffer=lambda mirror: None,
        handle_event=lambda name, payload: events.append(
            {"name": name, "payload": payload}
        ),
    )
    adapter = TextualLispyAdapter(dispatcher, hooks)

    adapter.handle_textual_key("semicolon", text=";")
    adapter.run_command("LispyKill")

    names = [event["name"] for event in events]
    assert names == ["lispy.comment", "lispy.kill"]
    assert events[0]["payload"] == {
        "rows": (1, 1),
        "commented": True,
        "trigger": "sexp",
    }


def test_adapter_emits_log_lines() -> None:
    dispatcher = make_dispatcher("(a)")
    logs: List[str] = []
    adapter = TextualLispyAdapter(
        dispatcher, TextualUIHooks(update_buffer=lambda mirror: None, log=logs.append)
    )

    adapter.handle_textual_key("i", text="i")

    assert any(line.startswith("key ->") for line in logs)
    assert any(line.startswith("result <-") for line in logs)
    assert "mode='insert'" in logs[-1]


def test_adapter_requires_buffer_host() -> None:
    dispatcher = CommandDispatcher(TextOnlyHost())  # type: ignore[arg-type]

    with pytest.raises(TypeError):
        TextualLispyAdapter(dispatcher, TextualUIHooks(update_buffer=lambda mirror: None))


def test_render_mirror_marks_cursor_and_selection() -> None:
    app = pytest.importorskip("lispy_engine.adapters.textual.app")
    buffer = Buffer.from_lines(["(a)", "(b)"], cursor=Position(1, 1))
    buffer.select(Position(2, 0), Position(2, 0))

    rendered = app.render_mirror(buffer.mirror())

    assert rendered.plain == "(a)\n(b)\n"
    styles = {str(span.style) for span in rendered.spans}
    assert "reverse" in styles
    assert "on grey23" in styles


@pytest.mark.parametrize(
    ("name", "filetype"),
    [("init.el", "elisp"), ("core.CLJ", "clojure"), ("notes.txt", "lisp")],
)
def test_filetype_follows_suffix(name: str, filetype: str) -> None:
    app = pytest.importorskip("lispy_engine.adapters.textual.app")

    assert app.filetype_for(Path(name)) == filetype
