"""Bridge between ``CommandDispatcher`` and Textual widget callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from lispy_engine.buffer import BufferMirror
from lispy_engine.commands import CommandResult
from lispy_engine.dispatch import CommandDispatcher, KeyInput
from lispy_engine.host import BufferHost

BUS_EVENTS = ("lispy.kill", "lispy.comment", "mode.switch")


def _noop(*_args, **_kwargs) -> None:
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


class TextualLispyAdapter:
    """Feeds Textual key events to the dispatcher and pushes state back out."""

    def __init__(self, dispatcher: CommandDispatcher, hooks: TextualUIHooks) -> None:
        if not isinstance(dispatcher.host, BufferHost):
            raise TypeError("TextualLispyAdapter requires a BufferHost")
        self.dispatcher = dispatcher
        self.host: BufferHost = dispatcher.host
        self.hooks = hooks
        for event in BUS_EVENTS:
            dispatcher.bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )
        self._refresh_buffer()

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> CommandResult:
        """Translate a Textual key event into a ``KeyInput`` and dispatch it."""

        key_input = KeyInput(
            key=key, text=text, modifiers=tuple(str(m).lower() for m in modifiers)
        )
        self._log("key ->", key=key, text=text, mods=key_input.modifiers)
        result = self.dispatcher.handle_key(key_input)
        self._after_result(result)
        return result

    def run_command(self, name: str, count: int = 1) -> CommandResult:
        result = self.dispatcher.run_command(name, count)
        self._after_result(result)
        return result

    def _after_result(self, result: CommandResult) -> None:
        status = result.message or result.status
        if status:
            self.hooks.update_status(f"{self.dispatcher.mode.upper()} {status}")
        self._refresh_buffer()
        self._log(
            "result <-",
            consumed=result.consumed,
            status=result.status,
            message=result.message,
            switch_to=result.switch_to,
        )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.host.buffer.mirror())

    def _log(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix] + [f"{key}={value!r}" for key, value in snapshot.items()]
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        buffer = self.host.buffer
        return {
            "mode": self.dispatcher.mode,
            "cursor": tuple(buffer.state.cursor),
            "selection": buffer.state.selected_rows(),
            "count": self.dispatcher.pending_count,
            "buffer": buffer.name,
            "buffer_version": buffer.document.version,
        }


__all__ = ["TextualLispyAdapter", "TextualUIHooks", "BUS_EVENTS"]
