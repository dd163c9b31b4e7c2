"""Kill and comment actions bound to keys and command names."""

from __future__ import annotations

from typing import Optional

from lispy_engine.lisp import comment, kill

from .base import CommandContext, CommandResult


def kill_action(context: CommandContext, match: Optional[object] = None) -> CommandResult:
    del match
    result = kill(context.host)
    if result is None:
        return CommandResult(consumed=True, status="noop", message="cursor_out_of_range")
    context.bus.emit(
        "lispy.kill",
        {
            "context": result.context.kind.value,
            "killed": result.killed,
        },
    )
    if not result.performed:
        return CommandResult(consumed=True, status="noop", message="nothing_to_kill")
    return CommandResult(consumed=True, message=f"kill:{result.context.kind.value}")


def comment_action(
    context: CommandContext, match: Optional[object] = None
) -> CommandResult:
    del match
    result = comment(context.host, context.count)
    if result is None:
        return CommandResult(consumed=True, status="noop", message="cursor_out_of_range")
    context.bus.emit(
        "lispy.comment",
        {
            "rows": (result.start_row, result.end_row),
            "commented": result.commented,
            "trigger": result.trigger,
        },
    )
    verb = "comment" if result.commented else "uncomment"
    return CommandResult(consumed=True, message=f"{verb}:{result.trigger}")


def comment_region_action(
    context: CommandContext, match: Optional[object] = None
) -> CommandResult:
    """Toggle the visual selection and drop back to normal mode."""

    outcome = comment_action(context, match)
    outcome.switch_to = "normal"
    return outcome


__all__ = ["kill_action", "comment_action", "comment_region_action"]
