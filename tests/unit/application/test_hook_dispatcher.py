"""Unit tests for HookDispatcher."""

import pytest

from usersync.application.exceptions import DownstreamHookError
from usersync.application.hook_dispatcher import HookDispatcher


async def test_dispatch_without_handler_is_noop():
    await HookDispatcher().dispatch("user.created", {"id": "user_1"})


async def test_dispatch_calls_registered_handler(recording_hook):
    dispatcher = HookDispatcher()
    dispatcher.register(recording_hook)

    await dispatcher.dispatch("user.created", {"id": "user_1"})

    assert recording_hook.calls == [("user.created", {"id": "user_1"})]


async def test_register_replaces_previous_handler(recording_hook):
    calls = []

    async def first(event_type, data):
        calls.append(event_type)

    dispatcher = HookDispatcher(first)
    dispatcher.register(recording_hook)

    await dispatcher.dispatch("user.deleted", {"id": "user_1"})

    assert calls == []
    assert dispatcher.handler is recording_hook


async def test_handler_failure_is_wrapped(recording_hook):
    recording_hook.failures.append(ValueError("boom"))
    dispatcher = HookDispatcher(recording_hook)

    with pytest.raises(DownstreamHookError) as exc_info:
        await dispatcher.dispatch("user.updated", {"id": "user_1"})

    assert isinstance(exc_info.value.__cause__, ValueError)


async def test_register_event_hook_installs_app_wide_handler(recording_hook, monkeypatch):
    from usersync.api import dependencies

    monkeypatch.setattr(dependencies, "_hooks", None)

    assert dependencies.register_event_hook(recording_hook) is recording_hook
    await dependencies.get_hook_dispatcher().dispatch("user.created", {"id": "user_1"})

    assert recording_hook.calls == [("user.created", {"id": "user_1"})]
