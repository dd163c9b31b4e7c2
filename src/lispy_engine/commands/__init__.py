"""Host-facing actions wrapping the kill and comment engines."""

from .base import CommandBus, CommandContext, CommandResult
from .lispy import comment_action, comment_region_action, kill_action

__all__ = [
    "CommandBus",
    "CommandContext",
    "CommandResult",
    "kill_action",
    "comment_action",
    "comment_region_action",
]
