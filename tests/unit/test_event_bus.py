"""
Unit tests for EventBus.
"""

import asyncio
import logging

import pytest

from irongolem.client.events import ClientEvent, EventBus


def test_handlers_called_in_registration_order():
    bus = EventBus()
    calls = []
    bus.on("x", lambda v: calls.append(("a", v)))
    bus.on("x", lambda v: calls.append(("b", v)))

    assert bus.emit("x", 1) is True
    assert calls == [("a", 1), ("b", 1)]


def test_enum_and_string_names_are_interchangeable():
    bus = EventBus()
    calls = []
    bus.on(ClientEvent.LOGIN, lambda: calls.append("login"))
    bus.emit("login")
    assert calls == ["login"]
    assert bus.listener_count("login") == 1


def test_emit_without_handlers_returns_false():
    assert EventBus().emit("nothing") is False


def test_unhandled_error_event_is_logged(caplog):
    with caplog.at_level(logging.WARNING):
        EventBus(owner="Steve").emit(ClientEvent.ERROR, ValueError("boom"))
    assert "Unhandled error event" in caplog.text


def test_once_handler_runs_once():
    bus = EventBus()
    calls = []
    bus.once("x", lambda: calls.append(1))
    bus.emit("x")
    bus.emit("x")
    assert calls == [1]
    assert bus.listener_count("x") == 0


def test_same_handler_registered_once_twice_runs_twice():
    bus = EventBus()
    calls = []

    def handler():
        calls.append(1)

    bus.once("x", handler)
    bus.once("x", handler)
    for _ in range(3):
        bus.emit("x")

    assert calls == [1, 1]
    assert bus.listener_count("x") == 0


def test_once_and_on_registrations_are_independent():
    bus = EventBus()
    calls = []

    def handler():
        calls.append(1)

    bus.on("x", handler)
    bus.once("x", handler)
    bus.emit("x")
    bus.emit("x")

    assert calls == [1, 1, 1]
    assert bus.listener_count("x") == 1


def test_off_removes_handler():
    bus = EventBus()
    calls = []

    def handler():
        calls.append(1)

    bus.on("x", handler)
    assert bus.off("x", handler) is True
    assert bus.off("x", handler) is False
    bus.emit("x")
    assert calls == []


def test_failing_handler_does_not_stop_others(caplog):
    bus = EventBus()
    calls = []

    def broken():
        raise RuntimeError("handler bug")

    bus.on("x", broken)
    bus.on("x", lambda: calls.append("ok"))
    with caplog.at_level(logging.ERROR):
        bus.emit("x")
    assert calls == ["ok"]
    assert "handler bug" in caplog.text


def test_remove_all_listeners():
    bus = EventBus()
    bus.on("x", lambda: None)
    bus.on("y", lambda: None)
    bus.remove_all_listeners("x")
    assert bus.listener_count("x") == 0
    assert bus.listener_count("y") == 1
    bus.remove_all_listeners()
    assert bus.listener_count("y") == 0


@pytest.mark.asyncio
async def test_coroutine_handlers_are_scheduled():
    bus = EventBus()
    done = asyncio.Event()
    seen = []

    async def handler(value):
        seen.append(value)
        done.set()

    bus.on("x", handler)
    bus.emit("x", 42)
    await asyncio.wait_for(done.wait(), timeout=1)
    assert seen == [42]


@pytest.mark.asyncio
async def test_failing_coroutine_handler_is_logged(caplog):
    bus = EventBus()

    async def handler():
        raise RuntimeError("async boom")

    bus.on("x", handler)
    with caplog.at_level(logging.ERROR):
        bus.emit("x")
        for _ in range(3):
            await asyncio.sleep(0)
    assert "async boom" in caplog.text
