from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Tuple

import pytest

from lispy_engine.runtime import telemetry
from lispy_engine.runtime.telemetry import TelemetrySettings, preset_settings


class RecordingLogger:
    def __init__(self) -> None:
        self.lines: List[Tuple[str, str, Dict[str, str]]] = []
        self.context: Dict[str, str] = {}
        self.profiled: List[str] = []
        self.components: List[str] = []

    def add_context(self, key: str, value: str) -> None:
        self.context[key] = value

    def remove_context(self, key: str) -> None:
        self.context.pop(key, None)

    @contextmanager
    def profile(self, name: str):
        self.profiled.append(name)
        yield

    @contextmanager
    def track_component(self, name: str):
        self.components.append(name)
        yield

    def _record(self, level: str):
        def method(message: str, pairs: List[Tuple[str, str]]) -> None:
            self.lines.append((level, message, dict(pairs)))

        return method

    def __getattr__(self, name: str) -> Any:
        if name.endswith("_with"):
            return self._record(name[: -len("_with")])
        raise AttributeError(name)


@pytest.fixture
def recorder(monkeypatch: pytest.MonkeyPatch) -> RecordingLogger:
    logger = RecordingLogger()
    monkeypatch.setattr(telemetry, "get_logger", lambda name=None: logger)
    return logger


def test_settings_from_env() -> None:
    settings = TelemetrySettings.from_env(
        {
            "LISPY_ENGINE_LOG_LEVEL": "debug",
            "LISPY_ENGINE_DISABLE_CONSOLE": "yes",
            "LISPY_ENGINE_LOG_FILE": "engine.log",
            "LISPY_ENGINE_LOG_BUFFERED": "1",
            "LISPY_ENGINE_LOG_BUFFER_SIZE": "64",
        }
    )

    assert settings.level == "DEBUG"
    assert not settings.console
    assert settings.log_file == "engine.log"
    assert settings.buffered and settings.buffer_size == 64
    assert TelemetrySettings.from_env({}) == TelemetrySettings()


def test_editor_preset_stays_off_the_terminal() -> None:
    editor = preset_settings("Editor", {})

    assert not editor.console
    assert editor.log_file == "lispy_engine.log"
    assert preset_settings("editor", {"LISPY_ENGINE_LOG_FILE": "x.log"}).log_file == "x.log"
    assert preset_settings("quiet", {"LISPY_ENGINE_LOG_FILE": "x.log"}).log_file == ""


def test_unknown_preset_and_mixed_options_are_rejected() -> None:
    with pytest.raises(ValueError):
        preset_settings("verbose", {})
    with pytest.raises(ValueError):
        telemetry.configure(preset="quiet", settings=TelemetrySettings())


def test_record_event_logs_structured_pairs(recorder: RecordingLogger) -> None:
    telemetry.record_event("kill.context", level="warning", data={"rows": (1, 2)})

    assert recorder.lines == [
        ("warning", "event::kill.context", {"event": "kill.context", "rows": "(1, 2)"})
    ]


def test_span_logs_metadata_added_through_handle(recorder: RecordingLogger) -> None:
    with telemetry.span("lispy::kill", component="kill", metadata={"row": 3}) as handle:
        assert recorder.context == {"row": "3"}
        handle.add_metadata("performed", True)

    assert recorder.profiled == ["lispy::kill"]
    assert recorder.components == ["kill"]
    assert recorder.context == {}
    assert recorder.lines == [
        (
            "debug",
            "span::end",
            {"span": "lispy::kill", "row": "3", "performed": "True", "component": "kill"},
        )
    ]


def test_span_logs_failure_and_reraises(recorder: RecordingLogger) -> None:
    with pytest.raises(RuntimeError):
        with telemetry.span("lispy::comment"):
            raise RuntimeError("boom")

    level, message, payload = recorder.lines[-1]
    assert (level, message) == ("error", "span::fail")
    assert payload["reason"] == "boom"
    assert recorder.components == []
