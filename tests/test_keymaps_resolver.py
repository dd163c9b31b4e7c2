from __future__ import annotations

from lispy_engine.keymaps import (
    ActionRef,
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
    WhenClause,
)


def make_action(action_id: str) -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_binding(
    binding_id: str,
    *,
    mode: str = "normal",
    keys: tuple[str, ...] = ("g", "c"),
    action_id: str = "lispy.comment",
    when: tuple[WhenClause, ...] = (),
    priority: int = 0,
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=KeySequence.parse(*keys),
        action_id=action_id,
        when=when,
        priority=priority,
    )


def build_registry(bindings: list[Binding]) -> KeymapRegistry:
    registry = KeymapRegistry()
    for action_id in {binding.action_id for binding in bindings}:
        registry.register_action(make_action(action_id))
    for binding in bindings:
        registry.register_binding(binding)
    return registry


def test_resolver_matches_exact_sequence() -> None:
    binding = make_binding("normal.gc")
    resolver = KeymapResolver(build_registry([binding]))

    result = resolver.resolve("normal", ("g", "c"))

    assert result.status == "match"
    assert result.match is not None
    assert result.match.binding.id == binding.id
    assert result.match.action.id == "lispy.comment"
    assert result.consumed == 2


def test_resolver_reports_pending_for_prefix() -> None:
    resolver = KeymapResolver(build_registry([make_binding("normal.gc")]))

    result = resolver.resolve("normal", ("g",))

    assert result.status == "pending"
    assert result.next_expected == ("c",)


def test_resolver_misses_unknown_token() -> None:
    resolver = KeymapResolver(build_registry([make_binding("normal.gc")]))

    result = resolver.resolve("normal", ("g", "x"))

    assert result.status == "miss"
    assert result.consumed == 1


def test_resolver_honors_when_clauses() -> None:
    gated = make_binding(
        "normal.kill",
        keys=("ctrl+k",),
        action_id="lispy.kill",
        when=(WhenClause("lisp_filetype"),),
    )
    resolver = KeymapResolver(build_registry([gated]))

    assert resolver.resolve("normal", ("ctrl+k",), flags={}).status == "miss"
    hit = resolver.resolve("normal", ("ctrl+k",), flags={"lisp_filetype": True})
    assert hit.status == "match"


def test_resolver_prefers_higher_priority() -> None:
    low = make_binding(
        "normal.kill.low",
        keys=("ctrl+k",),
        action_id="lispy.kill",
        when=(WhenClause("lisp_filetype"),),
    )
    high = make_binding(
        "normal.kill.high",
        keys=("ctrl+k",),
        action_id="lispy.kill_sexp",
        when=(WhenClause("lisp_filetype"), WhenClause("sexp_mode")),
        priority=10,
    )
    resolver = KeymapResolver(build_registry([low, high]))

    result = resolver.resolve(
        "normal", ("ctrl+k",), flags={"lisp_filetype": True, "sexp_mode": True}
    )

    assert result.match is not None
    assert result.match.binding.id == "normal.kill.high"


def test_resolver_rebuilds_after_registry_changes() -> None:
    registry = build_registry([make_binding("normal.gc")])
    resolver = KeymapResolver(registry)
    assert resolver.resolve("normal", (";",)).status == "miss"

    registry.rebind("normal.gc", ";")

    assert resolver.resolve("normal", (";",)).status == "match"
    assert resolver.resolve("normal", ("g",)).status == "miss"


def test_resolver_keeps_modes_apart() -> None:
    resolver = KeymapResolver(
        build_registry([make_binding("visual.comment", mode="visual", keys=(";",))])
    )

    assert resolver.resolve("normal", (";",)).status == "miss"
    assert resolver.resolve("visual", (";",)).status == "match"
