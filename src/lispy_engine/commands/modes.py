"""Mode switches used by the dispatcher's built-in bindings."""

from __future__ import annotations

from typing import Optional

from lispy_engine.buffer import Position

from .base import CommandContext, CommandResult


def enter_insert_mode(
    context: CommandContext, match: Optional[object] = None
) -> CommandResult:
    del context, match
    return CommandResult(consumed=True, switch_to="insert", message="enter_insert")


def enter_visual_mode(
    context: CommandContext, match: Optional[object] = None
) -> CommandResult:
    del match
    host = context.host
    row = host.get_cursor().row
    select = getattr(host, "select_rows", None)
    if callable(select):
        select(row, row)
    return CommandResult(consumed=True, switch_to="visual", message="enter_visual")


def exit_to_normal_mode(
    context: CommandContext, match: Optional[object] = None
) -> CommandResult:
    del match
    context.host.clear_selection()
    return CommandResult(consumed=True, switch_to="normal", message="enter_normal")


def _move(context: CommandContext, rows: int = 0, cols: int = 0) -> CommandResult:
    host = context.host
    row, col = host.get_cursor()
    row = max(1, min(row + rows * context.count, host.line_count()))
    col = max(0, min(col + cols * context.count, len(host.get_buffer_line(row))))
    host.set_cursor(Position(row, col))
    extend = getattr(host, "extend_selection", None)
    if context.mode == "visual" and callable(extend):
        extend(row)
    return CommandResult(consumed=True, status="moved")


def move_left(context: CommandContext, match: Optional[object] = None) -> CommandResult:
    del match
    return _move(context, cols=-1)


def move_right(context: CommandContext, match: Optional[object] = None) -> CommandResult:
    del match
    return _move(context, cols=1)


def move_up(context: CommandContext, match: Optional[object] = None) -> CommandResult:
    del match
    return _move(context, rows=-1)


def move_down(context: CommandContext, match: Optional[object] = None) -> CommandResult:
    del match
    return _move(context, rows=1)


__all__ = [
    "enter_insert_mode",
    "enter_visual_mode",
    "exit_to_normal_mode",
    "move_left",
    "move_right",
    "move_up",
    "move_down",
]
