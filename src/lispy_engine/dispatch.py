"""Key and command dispatch for hosts that embed the engine.

The dispatcher keeps the active mode, a normal-mode count prefix, and any
pending multi-key sequence, and hands resolved bindings a ``CommandContext``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from lispy_engine.buffer import Position
from lispy_engine.commands import CommandBus, CommandContext, CommandResult
from lispy_engine.config import LispyConfig
from lispy_engine.host import EditorHost
from lispy_engine.keymaps import (
    LISP_FILETYPE_FLAG,
    ActionRef,
    KeymapRegistry,
    KeymapResolver,
    KeyStroke,
    ResolutionMatch,
    load_default_keymaps,
)
from lispy_engine.runtime import telemetry

MODES = ("normal", "insert", "visual")


@dataclass(slots=True)
class KeyInput:
    """Normalized key event handed to the dispatcher."""

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None


def key_to_token(key: KeyInput) -> str:
    modifiers = tuple(m.lower() for m in key.modifiers)
    if key.text and len(key.text) == 1 and not {"ctrl", "alt"} & set(modifiers):
        return key.text
    return KeyStroke(key.key, modifiers).token


class CommandDispatcher:
    def __init__(
        self,
        host: EditorHost,
        *,
        config: Optional[LispyConfig] = None,
        registry: Optional[KeymapRegistry] = None,
        resolver: Optional[KeymapResolver] = None,
        bus: Optional[CommandBus] = None,
        load_defaults: bool = True,
    ) -> None:
        self.host = host
        self.config = config or LispyConfig()
        self.bus = bus or CommandBus()
        self.registry = registry or KeymapRegistry(logger_name="lispy_engine.keymaps")
        if load_defaults and registry is None:
            load_default_keymaps(self.registry, config=self.config)
        self.resolver = resolver or KeymapResolver(
            self.registry, logger_name="lispy_engine.keymaps"
        )
        self.logger = telemetry.get_logger("lispy_engine.dispatch")
        self._mode = "normal"
        self._pending: List[str] = []
        self._count = ""

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def pending_count(self) -> int:
        """Count prefix typed so far; ``0`` when none."""

        return int(self._count) if self._count else 0

    @property
    def pending_keys(self) -> tuple[str, ...]:
        return tuple(self._pending)

    def flags(self) -> Dict[str, bool]:
        filetype = self.host.current_filetype()
        return {LISP_FILETYPE_FLAG: self.config.enabled_for(filetype)}

    def set_mode(self, name: str) -> None:
        if name not in MODES:
            raise KeyError(f"Unknown mode '{name}'")
        self._pending.clear()
        self._count = ""
        if name == self._mode:
            return
        previous, self._mode = self._mode, name
        telemetry.record_event("mode.switch", data={"from": previous, "to": name})
        self.bus.emit("mode.switch", name)

    def handle_key(self, key: KeyInput) -> CommandResult:
        token = key_to_token(key)
        with telemetry.span(
            name=f"dispatch::{self._mode}",
            component=True,
            metadata={"key": token, "mode": self._mode},
        ):
            return self._handle_token(token, key)

    def run_command(self, name: str, count: int = 1) -> CommandResult:
        """Run a named command such as ``LispyKill`` or ``LispyComment``."""

        action = self.registry.find_command(name)
        if action is None:
            return CommandResult(
                consumed=False, status="miss", message=f"unknown_command:{name}"
            )
        if not self.flags()[LISP_FILETYPE_FLAG]:
            return CommandResult(
                consumed=False, status="disabled", message="filetype_not_enabled"
            )
        return self._execute(action, None, max(count, 1))

    def _handle_token(self, token: str, key: KeyInput) -> CommandResult:
        if self._mode == "normal" and not self._pending and self._accepts_digit(token):
            self._count += token
            return CommandResult(consumed=True, status="pending", message="count")

        self._pending.append(token)
        result = self.resolver.resolve(
            self._mode, tuple(self._pending), flags=self.flags()
        )

        if result.status == "match" and result.match:
            self._pending.clear()
            count = self.pending_count or 1
            self._count = ""
            if not result.match.binding.accepts_count:
                count = 1
            return self._execute(result.match.action, result.match, count)

        if result.status == "pending":
            return CommandResult(
                consumed=True, status="pending", message="awaiting_sequence"
            )

        self._pending.clear()
        self._count = ""
        if self._mode == "insert":
            return self._insert(key)
        return CommandResult(consumed=False, status="miss")

    def _accepts_digit(self, token: str) -> bool:
        if len(token) != 1 or not token.isdigit():
            return False
        return token != "0" or bool(self._count)

    def _execute(
        self, action: ActionRef, match: Optional[ResolutionMatch], count: int
    ) -> CommandResult:
        context = CommandContext(
            host=self.host,
            bus=self.bus,
            count=count,
            mode=self._mode,
            config=self.config,
        )
        with telemetry.span(
            "keymaps::execute",
            component="keymaps",
            metadata={"action": action.id, "count": count},
        ):
            outcome = action(context, match)

        if not isinstance(outcome, CommandResult):
            outcome = CommandResult(consumed=True)
        if outcome.switch_to:
            self.set_mode(outcome.switch_to)
        return outcome

    def _insert(self, key: KeyInput) -> CommandResult:
        row, col = self.host.get_cursor()
        line = self.host.get_buffer_line(row)
        if key.key == "enter":
            self.host.set_buffer_lines(row, row, [line[:col], line[col:]])
            self.host.set_cursor(Position(row + 1, 0))
        elif key.key == "backspace":
            if col == 0:
                return CommandResult(consumed=True, status="noop")
            self.host.set_buffer_lines(row, row, [line[: col - 1] + line[col:]])
            self.host.set_cursor(Position(row, col - 1))
        elif key.text and key.text.isprintable():
            self.host.set_buffer_lines(row, row, [line[:col] + key.text + line[col:]])
            self.host.set_cursor(Position(row, col + len(key.text)))
        else:
            return CommandResult(consumed=False, status="miss")
        return CommandResult(consumed=True, status="inserted")


__all__ = ["CommandDispatcher", "KeyInput", "MODES", "key_to_token"]
