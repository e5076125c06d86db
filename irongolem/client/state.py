"""Connection lifecycle state machine and login waiters."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..errors.internal import (
    ConnectionTerminatedError,
    LoginAbortedError,
    LoginTimeoutError,
)
from .events import ClientEvent, EventBus
from .timers import CancellableTimer


class ConnectionState(str, Enum):
    """Enumeration of client connection states."""

    NOT_STARTED = "not_started"
    LOGGING_IN = "logging_in"
    LOGGED_IN = "logged_in"
    DISCONNECTED = "disconnected"


ALLOWED_TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.NOT_STARTED: frozenset(
        {ConnectionState.LOGGING_IN, ConnectionState.DISCONNECTED}
    ),
    ConnectionState.LOGGING_IN: frozenset(
        {ConnectionState.LOGGED_IN, ConnectionState.DISCONNECTED}
    ),
    ConnectionState.LOGGED_IN: frozenset({ConnectionState.DISCONNECTED}),
    ConnectionState.DISCONNECTED: frozenset({ConnectionState.LOGGING_IN}),
}


class TerminationKind(str, Enum):
    ENDED = "ended"
    KICKED = "kicked"
    FATAL = "fatal"


@dataclass(frozen=True)
class TerminationCause:
    """Why the connection ended.

    Attributes:
        kind: ended by the transport, kicked by the server, or a fatal error.
        reason: Kick text or fatal reason.
        was_logged_in: Transport's view of whether login had completed.
    """

    kind: TerminationKind
    reason: str | None = None
    was_logged_in: bool = False

    @classmethod
    def ended(cls) -> TerminationCause:
        return cls(TerminationKind.ENDED)

    @classmethod
    def kicked(cls, reason: str, was_logged_in: bool) -> TerminationCause:
        return cls(TerminationKind.KICKED, reason, was_logged_in)

    @classmethod
    def fatal(cls, reason: str) -> TerminationCause:
        return cls(TerminationKind.FATAL, reason)

    def to_error(self) -> ConnectionTerminatedError:
        if self.kind is TerminationKind.KICKED:
            return ConnectionTerminatedError(
                f"Kicked before login: {self.reason}", data={"reason": self.reason}
            )
        if self.kind is TerminationKind.FATAL:
            return ConnectionTerminatedError(
                f"Connection failed before login: {self.reason}",
                data={"reason": self.reason},
            )
        return ConnectionTerminatedError("Connection ended before login")


@dataclass
class _PendingLoginWait:
    attempt: int
    future: asyncio.Future[None]


class ConnectionStateMachine:
    """Single source of truth for the connection state.

    Transitions are driven by transport events (through the client) and by
    the login timeout. Every state change emits ``connection_status(new,
    old)``. Events that do not apply to the current state are ignored.

    Attributes:
        events (EventBus): Bus the lifecycle events are emitted on.
        login_timeout (float | None): Seconds to wait in LOGGING_IN.
        attempt (int): Number of login attempts started so far.
    """

    def __init__(
        self,
        events: EventBus,
        *,
        login_timeout: float | None = None,
        teardown: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            events: Bus to emit lifecycle events on.
            login_timeout: Seconds before a pending login is abandoned.
            teardown: Called before the timeout transition to close the
                transport connection.
        """
        self.events = events
        self.login_timeout = login_timeout
        self._teardown = teardown
        self._state = ConnectionState.NOT_STARTED
        self._waiters: list[_PendingLoginWait] = []
        self._timeout_timer = CancellableTimer(self.on_timeout_elapsed, name="login_timeout")
        self.attempt = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def pending_waiters(self) -> int:
        return len(self._waiters)

    @property
    def timeout_armed(self) -> bool:
        return self._timeout_timer.armed

    def _transition(self, new_state: ConnectionState) -> bool:
        old_state = self._state
        if new_state not in ALLOWED_TRANSITIONS[old_state]:
            logging.debug(
                f"🚫 Ignoring transition {old_state.value} -> {new_state.value}"
            )
            return False
        self._state = new_state
        logging.info(f"🔌 Connection status {old_state.value} -> {new_state.value}")
        self.events.emit(ClientEvent.CONNECTION_STATUS, new_state, old_state)
        return True

    def _settle_waiters(self, error: BaseException | None, *, max_attempt: int | None = None) -> int:
        """Resolve (error is None) or reject every waiter up to ``max_attempt``."""
        limit = self.attempt if max_attempt is None else max_attempt
        settling = [w for w in self._waiters if w.attempt <= limit]
        self._waiters = [w for w in self._waiters if w.attempt > limit]
        for waiter in settling:
            if waiter.future.done():
                continue
            if error is None:
                waiter.future.set_result(None)
            else:
                waiter.future.set_exception(error)
        return len(settling)

    def begin(self) -> None:
        """Start a login attempt.

        Raises:
            RuntimeError: If a connection is still live; ``reset()`` it first.
        """
        if self._state not in (ConnectionState.NOT_STARTED, ConnectionState.DISCONNECTED):
            raise RuntimeError(
                f"Cannot begin login while {self._state.value}; reset the connection first"
            )
        self.attempt += 1
        stale = self._settle_waiters(
            LoginAbortedError("Login wait belongs to an earlier attempt"),
            max_attempt=self.attempt - 1,
        )
        if stale:
            logging.debug(f"🧹 Rejected stale login waiters count={stale}")
        self._timeout_timer.disarm()
        self._transition(ConnectionState.LOGGING_IN)
        if self.login_timeout:
            self._timeout_timer.arm(self.login_timeout)

    def on_login_succeeded(self) -> None:
        if self._state is not ConnectionState.LOGGING_IN:
            logging.debug(f"🚫 Login event ignored state={self._state.value}")
            return
        self._timeout_timer.disarm()
        self._transition(ConnectionState.LOGGED_IN)
        resolved = self._settle_waiters(None)
        logging.info(f"✅ Logged in attempt={self.attempt} waiters={resolved}")
        self.events.emit(ClientEvent.LOGIN)

    def on_terminated(self, cause: TerminationCause) -> None:
        """Handle the end of the connection.

        Emits ``end`` or ``kicked`` for transport-driven causes even if the
        state was already DISCONNECTED; the transport may report both.
        """
        self._timeout_timer.disarm()
        if self._state is not ConnectionState.DISCONNECTED:
            self._transition(ConnectionState.DISCONNECTED)
        rejected = self._settle_waiters(cause.to_error())
        if rejected:
            logging.debug(f"🧹 Rejected login waiters count={rejected} cause={cause.kind.value}")

        if cause.kind is TerminationKind.KICKED:
            logging.warning(f"👢 Kicked reason={cause.reason} was_logged_in={cause.was_logged_in}")
            self.events.emit(ClientEvent.KICKED, cause.reason, cause.was_logged_in)
        elif cause.kind is TerminationKind.ENDED:
            logging.info("🔚 Connection ended")
            self.events.emit(ClientEvent.END)

    def on_timeout_elapsed(self) -> None:
        if self._state is not ConnectionState.LOGGING_IN:
            return
        logging.warning(f"⏰ Login timed out after {self.login_timeout}s attempt={self.attempt}")
        if self._teardown is not None:
            self._teardown()
        self._transition(ConnectionState.DISCONNECTED)
        self._settle_waiters(LoginTimeoutError("Timed out waiting for login"))
        self.events.emit(ClientEvent.LOGIN_TIMEOUT)

    def reset(self, reason: str | None = None) -> None:
        """Abandon the current connection without emitting end/kicked."""
        self._timeout_timer.disarm()
        if self._state in (ConnectionState.LOGGING_IN, ConnectionState.LOGGED_IN):
            self._transition(ConnectionState.DISCONNECTED)
            self._settle_waiters(
                LoginAbortedError(f"Login attempt abandoned: {reason or 'restart'}")
            )

    def wait_for_login(self) -> asyncio.Future[None]:
        """Return a future settled by the next login outcome.

        Resolves immediately when already logged in. Waiters registered while
        idle belong to the next attempt.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[None] = loop.create_future()
        if self._state is ConnectionState.LOGGED_IN:
            future.set_result(None)
            return future
        attempt = self.attempt if self._state is ConnectionState.LOGGING_IN else self.attempt + 1
        self._waiters.append(_PendingLoginWait(attempt, future))
        return future


__all__ = [
    "ALLOWED_TRANSITIONS",
    "ConnectionState",
    "ConnectionStateMachine",
    "TerminationCause",
    "TerminationKind",
]
