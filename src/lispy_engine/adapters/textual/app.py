"""Executable Textual app that edits a Lisp file with the lispy engine."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when the demo is run
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use lispy_engine.adapters.textual.app"
    ) from exc

from lispy_engine.buffer import Buffer, BufferMirror
from lispy_engine.config import LispyConfig
from lispy_engine.dispatch import CommandDispatcher
from lispy_engine.host import BufferHost
from lispy_engine.runtime import telemetry

from .controller import TextualLispyAdapter, TextualUIHooks

SAMPLE = """\
(defun greet (name)
  ;; say hello
  (format t "Hello, ~a!~%" name))

(let ((items '(1 2 3)))
  (mapcar #'print items))
"""

_FILETYPE_BY_SUFFIX = {
    ".lisp": "lisp",
    ".cl": "commonlisp",
    ".el": "elisp",
    ".scm": "scheme",
    ".ss": "scheme",
    ".rkt": "racket",
    ".clj": "clojure",
    ".cljs": "clojure",
    ".fnl": "fennel",
    ".janet": "janet",
    ".hy": "hy",
    ".lfe": "lfe",
    ".yuck": "yuck",
}


def filetype_for(path: Path) -> str:
    return _FILETYPE_BY_SUFFIX.get(path.suffix.lower(), "lisp")


def create_default_dispatcher(
    text: str = SAMPLE,
    *,
    name: str = "scratch",
    filetype: str = "lisp",
    config: Optional[LispyConfig] = None,
) -> CommandDispatcher:
    """Build a dispatcher over an in-memory buffer with the default keymaps."""

    config = config or LispyConfig.from_env()
    buffer = Buffer.from_text(text, name=name, filetype=filetype)
    return CommandDispatcher(BufferHost(buffer, config=config), config=config)


def render_mirror(mirror: BufferMirror) -> Text:
    """Render buffer text with the cursor cell and selected rows highlighted."""

    selected = None
    if mirror.selection is not None:
        first, second = mirror.selection
        selected = (min(first.row, second.row), max(first.row, second.row))
    row, col = mirror.cursor
    rendered = Text()
    for index, line in enumerate(mirror.text.split("\n"), start=1):
        style = "on grey23" if selected and selected[0] <= index <= selected[1] else ""
        if index == row:
            head, cell, tail = line[:col], line[col : col + 1] or " ", line[col + 1 :]
            rendered.append(head, style=style)
            rendered.append(cell, style="reverse")
            rendered.append(tail, style=style)
        else:
            rendered.append(line, style=style)
        rendered.append("\n")
    return rendered


@dataclass
class UIState:
    status_text: str = ""
    last_event: str = ""


class LispyEngineApp(App[None]):
    """Minimal Textual editor driving kill and comment from the keyboard."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
        ("ctrl+s", "save", "Save"),
    ]

    def __init__(self, *, path: Optional[Path] = None) -> None:
        super().__init__()
        self.path = path
        self._state = UIState()
        self.dispatcher: CommandDispatcher | None = None
        self.adapter: TextualLispyAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        if self.path is not None and self.path.exists():
            text = self.path.read_text(encoding="utf-8")
            self.dispatcher = create_default_dispatcher(
                text, name=self.path.name, filetype=filetype_for(self.path)
            )
        else:
            self.dispatcher = create_default_dispatcher()
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            handle_event=self._handle_event,
            log=self._log_line,
        )
        self.adapter = TextualLispyAdapter(self.dispatcher, hooks)
        self._update_status("NORMAL")

    def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, text, modifiers = normalized
        self.adapter.handle_textual_key(key, text=text, modifiers=modifiers)
        event.stop()

    def action_save(self) -> None:
        if self.path is None or self.dispatcher is None:
            self._update_status("no file to save")
            return
        host = self.dispatcher.host
        assert isinstance(host, BufferHost)
        self.path.write_text(host.buffer.text, encoding="utf-8")
        telemetry.record_event("app.save", data={"path": str(self.path)})
        self._update_status(f"wrote {self.path}")

    def _update_buffer(self, mirror: BufferMirror) -> None:
        if self._buffer_widget:
            self._buffer_widget.update(render_mirror(mirror))

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _handle_event(self, name: str, payload: Any | None) -> None:
        self._state.last_event = f"{name}:{payload}"

    def _log_line(self, line: str) -> None:
        telemetry.get_logger("lispy_engine.app").debug(line)

    @staticmethod
    def _normalize_key(
        event: events.Key,
    ) -> Optional[Tuple[str, Optional[str], Tuple[str, ...]]]:
        key = event.key
        if key in {"ctrl+c", "ctrl+q", "ctrl+s"}:
            return None
        if "+" in key and len(key) > 1:
            *modifiers, base = key.split("+")
            return (base, None, tuple(modifiers))
        character = event.character if event.is_printable else None
        return (key, character, ())


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edit a Lisp file with the lispy engine.")
    parser.add_argument("path", nargs="?", type=Path, help="File to open")
    parser.add_argument(
        "--telemetry",
        choices=("development", "editor", "quiet"),
        default="editor",
        help="Telemetry preset (default: editor, which logs to a file)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.telemetry)
    LispyEngineApp(path=args.path).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
