"""Per-client publish/subscribe surface for external consumers."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

EventHandler = Callable[..., Any]


class ClientEvent(str, Enum):
    """Built-in event names. Chat rules add one event per rule name."""

    CONNECTION_STATUS = "connection_status"
    LOGIN = "login"
    END = "end"
    KICKED = "kicked"
    LOGIN_TIMEOUT = "login_timeout"
    MESSAGE = "message"
    ACTION_BAR = "action_bar"
    MESSAGE_UNKNOWN_TYPE = "message_unknown_type"
    ERROR = "error"
    SPAWN = "spawn"
    RESPAWN = "respawn"
    PLAYER_JOIN = "player_join"
    PLAYER_LEAVE = "player_leave"


def _event_name(event: str | ClientEvent) -> str:
    return event.value if isinstance(event, ClientEvent) else event


@dataclass(eq=False)
class _Subscription:
    handler: EventHandler
    once: bool = False


class EventBus:
    """Typed event emitter owned by a single client instance.

    Handlers are called synchronously in registration order. Coroutine
    handlers are scheduled as tasks on the running loop. A failing handler
    is logged and does not prevent delivery to the remaining handlers.
    Each registration is tracked separately, so a handler registered twice
    runs twice.
    """

    def __init__(self, owner: str = "client") -> None:
        self.owner = owner
        self._subscriptions: dict[str, list[_Subscription]] = defaultdict(list)
        self._tasks: set[asyncio.Task[Any]] = set()

    def on(self, event: str | ClientEvent, handler: EventHandler) -> EventHandler:
        """Subscribe ``handler`` to ``event`` and return it."""
        self._subscriptions[_event_name(event)].append(_Subscription(handler))
        return handler

    def once(self, event: str | ClientEvent, handler: EventHandler) -> EventHandler:
        self._subscriptions[_event_name(event)].append(_Subscription(handler, once=True))
        return handler

    def off(self, event: str | ClientEvent, handler: EventHandler) -> bool:
        """Remove the earliest registration of ``handler`` for ``event``."""
        subscriptions = self._subscriptions.get(_event_name(event), [])
        for subscription in subscriptions:
            if subscription.handler == handler:
                subscriptions.remove(subscription)
                return True
        return False

    def listener_count(self, event: str | ClientEvent) -> int:
        return len(self._subscriptions.get(_event_name(event), []))

    def remove_all_listeners(self, event: str | ClientEvent | None = None) -> None:
        if event is None:
            self._subscriptions.clear()
            return
        self._subscriptions.pop(_event_name(event), None)

    def emit(self, event: str | ClientEvent, *args: Any) -> bool:
        """Deliver ``args`` to every handler of ``event``.

        Returns:
            True if at least one handler was subscribed.
        """
        name = _event_name(event)
        current = self._subscriptions.get(name, [])
        subscriptions = list(current)
        if not subscriptions:
            if name == ClientEvent.ERROR.value:
                logging.warning(
                    f"⚠️ Unhandled error event owner={self.owner} error={args[0] if args else None}"
                )
            return False
        for subscription in subscriptions:
            if subscription.once:
                if subscription not in current:
                    continue
                current.remove(subscription)
            self._call(name, subscription.handler, args)
        return True

    def _call(self, name: str, handler: EventHandler, args: tuple[Any, ...]) -> None:
        try:
            result = handler(*args)
        except Exception as e:  # noqa: BLE001
            logging.error(
                f"💥 Event handler failed event={name} owner={self.owner} "
                f"error_type={type(e).__name__} error={str(e)}"
            )
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(lambda t: self._task_done(name, t))

    def _task_done(self, name: str, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)  # type: ignore[arg-type]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logging.error(
                f"💥 Async event handler failed event={name} owner={self.owner} "
                f"error_type={type(exc).__name__} error={str(exc)}"
            )


__all__ = ["ClientEvent", "EventBus", "EventHandler"]
