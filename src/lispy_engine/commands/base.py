"""Shared command plumbing: invocation context, result, and event bus."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Optional

from lispy_engine.config import LispyConfig

if TYPE_CHECKING:
    from lispy_engine.host import EditorHost


@dataclass(slots=True)
class CommandResult:
    """Outcome returned from a command action."""

    consumed: bool
    switch_to: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None


class CommandBus:
    """Minimal event bus letting commands report structured signals."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


@dataclass(slots=True)
class CommandContext:
    """Everything an action needs for one invocation."""

    host: "EditorHost"
    bus: CommandBus
    count: int = 1
    mode: str = "normal"
    config: LispyConfig = field(default_factory=LispyConfig)


__all__ = ["CommandBus", "CommandContext", "CommandResult"]
