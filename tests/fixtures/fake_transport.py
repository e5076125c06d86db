"""In-memory transport used by the client tests."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from irongolem.client.protocols import TransportOptions


class FakePacket:
    """Stands in for a chat packet; ``str()`` yields its text."""

    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return self.text


class FakeTransport:
    def __init__(self, options: TransportOptions) -> None:
        self.options = options
        self.listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self.sent: list[tuple[float, str]] = []
        self.quit_calls: list[str | None] = []
        self.listeners_removed = False
        self.chat_error: Exception | None = None

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        self.listeners[event].append(callback)

    def remove_all_listeners(self) -> None:
        self.listeners.clear()
        self.listeners_removed = True

    def chat(self, text: str) -> None:
        if self.chat_error is not None:
            raise self.chat_error
        self.sent.append((asyncio.get_running_loop().time(), text))

    def quit(self, reason: str | None = None) -> None:
        self.quit_calls.append(reason)

    def emit(self, event: str, *args: Any) -> None:
        for callback in list(self.listeners.get(event, [])):
            callback(*args)

    @property
    def sent_texts(self) -> list[str]:
        return [text for _, text in self.sent]


class FakeTransportFactory:
    def __init__(self, error: Exception | None = None) -> None:
        self.created: list[FakeTransport] = []
        self.error = error

    def __call__(self, options: TransportOptions) -> FakeTransport:
        if self.error is not None:
            raise self.error
        transport = FakeTransport(options)
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]


class EventRecorder:
    """Subscribes to client events and records (event, args) pairs."""

    def __init__(self, bus: Any, *events: str) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        for event in events:
            bus.on(event, self._make_handler(event))

    def _make_handler(self, event: str) -> Callable[..., None]:
        def handler(*args: Any) -> None:
            self.calls.append((event, args))

        return handler

    def named(self, event: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == event]

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.calls]
