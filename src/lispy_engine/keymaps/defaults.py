"""Built-in actions and bindings, derived from a ``LispyConfig``."""

from __future__ import annotations

from typing import Iterable, Optional

from lispy_engine.commands import modes as mode_actions
from lispy_engine.commands import lispy as lispy_actions
from lispy_engine.config import LispyConfig

from .models import ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

LISP_FILETYPE_FLAG = "lisp_filetype"

DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef(
        id="lispy.kill",
        handler=lispy_actions.kill_action,
        description="Kill balanced text at the cursor",
        command="LispyKill",
    ),
    ActionRef(
        id="lispy.comment",
        handler=lispy_actions.comment_action,
        description="Toggle comments on the line or sexps at the cursor",
        command="LispyComment",
    ),
    ActionRef(
        id="lispy.comment_region",
        handler=lispy_actions.comment_region_action,
        description="Toggle comments on the selected rows",
    ),
    ActionRef(
        id="mode.insert",
        handler=mode_actions.enter_insert_mode,
        description="Enter insert mode",
    ),
    ActionRef(
        id="mode.visual",
        handler=mode_actions.enter_visual_mode,
        description="Enter linewise visual mode",
    ),
    ActionRef(
        id="mode.normal",
        handler=mode_actions.exit_to_normal_mode,
        description="Return to normal mode",
    ),
    ActionRef(id="cursor.left", handler=mode_actions.move_left),
    ActionRef(id="cursor.right", handler=mode_actions.move_right),
    ActionRef(id="cursor.up", handler=mode_actions.move_up),
    ActionRef(id="cursor.down", handler=mode_actions.move_down),
)

_MOVES = (("h", "left"), ("l", "right"), ("k", "up"), ("j", "down"))


def _sequence(spec: str) -> KeySequence:
    """Whitespace separates keys: ``"g c"`` is two presses, ``"ctrl+k"`` one."""

    return KeySequence.parse(*spec.split())


def build_default_bindings(config: LispyConfig) -> tuple[Binding, ...]:
    gate = (LISP_FILETYPE_FLAG,)
    bindings = [
        Binding(
            id="normal.lispy_kill",
            mode="normal",
            sequence=_sequence(config.kill_key),
            action_id="lispy.kill",
            description="Balanced kill",
            when=gate,
        ),
        Binding(
            id="insert.lispy_kill",
            mode="insert",
            sequence=_sequence(config.kill_key),
            action_id="lispy.kill",
            description="Balanced kill",
            when=gate,
        ),
        Binding(
            id="normal.lispy_comment",
            mode="normal",
            sequence=_sequence(config.comment_key),
            action_id="lispy.comment",
            description="Toggle comment",
            when=gate,
            accepts_count=True,
        ),
        Binding(
            id="visual.lispy_comment",
            mode="visual",
            sequence=_sequence(config.comment_key),
            action_id="lispy.comment_region",
            description="Toggle comment on selection",
            when=gate,
        ),
        Binding(
            id="normal.enter_insert",
            mode="normal",
            sequence=KeySequence.parse("i"),
            action_id="mode.insert",
        ),
        Binding(
            id="normal.enter_visual",
            mode="normal",
            sequence=KeySequence.parse("V"),
            action_id="mode.visual",
        ),
        Binding(
            id="insert.exit_escape",
            mode="insert",
            sequence=KeySequence.parse("escape"),
            action_id="mode.normal",
        ),
        Binding(
            id="visual.exit_escape",
            mode="visual",
            sequence=KeySequence.parse("escape"),
            action_id="mode.normal",
        ),
    ]
    for mode in ("normal", "visual", "insert"):
        for key, direction in _MOVES:
            keys = (direction,) if mode == "insert" else (key, direction)
            for spec in keys:
                bindings.append(
                    Binding(
                        id=f"{mode}.move_{direction}.{spec}",
                        mode=mode,
                        sequence=KeySequence.parse(spec),
                        action_id=f"cursor.{direction}",
                        accepts_count=True,
                    )
                )
    return tuple(bindings)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    config: Optional[LispyConfig] = None,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
) -> None:
    """Register the built-in actions and the bindings ``config`` asks for."""

    config = config or LispyConfig()
    for action in DEFAULT_ACTIONS:
        registry.register_action(action, replace=replace)
    for binding in build_default_bindings(config):
        registry.register_binding(binding, replace=replace)
    for binding in extra_bindings or ():
        registry.register_binding(binding, replace=replace)


__all__ = [
    "DEFAULT_ACTIONS",
    "LISP_FILETYPE_FLAG",
    "build_default_bindings",
    "load_default_keymaps",
]
