"""Tests for the extension hook registry."""

import logging

import pytest

from chan_archive.core import hooks as hooks_module
from chan_archive.core.hooks import HookRegistry, get_hook_registry, init_hooks, reset_hooks


def test_dispatch_without_listeners_returns_value() -> None:
    registry = HookRegistry()
    assert registry.dispatch("anything", "value") == "value"
    assert registry.has_listeners("anything") is False


def test_listeners_chain_in_priority_order() -> None:
    registry = HookRegistry()
    registry.register("evt", lambda v: v + "-late", priority=10)
    registry.register("evt", lambda v: v + "-early", priority=1)
    assert registry.dispatch("evt", "x") == "x-early-late"


def test_none_result_keeps_value_and_params_are_passed() -> None:
    registry = HookRegistry()
    seen: dict[str, object] = {}

    @registry.listen("evt")
    def observe(value: str, **params: object) -> None:
        seen.update(params, value=value)

    assert registry.dispatch("evt", "v", post=3) == "v"
    assert seen == {"post": 3, "value": "v"}


def test_failing_listener_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    registry = HookRegistry()

    def broken(value: str) -> str:
        raise RuntimeError("boom")

    registry.register("evt", broken)
    registry.register("evt", lambda v: v.upper())
    with caplog.at_level(logging.ERROR, logger=hooks_module.__name__):
        assert registry.dispatch("evt", "ok") == "OK"
    assert "evt" in caplog.text


def test_unregister() -> None:
    registry = HookRegistry()

    def shout(value: str) -> str:
        return value.upper()

    registry.register("evt", shout)
    registry.unregister("evt", shout)
    assert registry.dispatch("evt", "quiet") == "quiet"


def test_process_registry_lifecycle() -> None:
    first = init_hooks()
    assert get_hook_registry() is first
    first.register("evt", lambda v: v * 2)
    reset_hooks()
    second = get_hook_registry()
    assert second is not first
    assert second.dispatch("evt", 2) == 2
