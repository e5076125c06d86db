"""Protocol definitions for the client's external collaborators.

The transport owns the wire protocol and the game session; the credential
store owns login credentials. The client only depends on these shapes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol


class TransportEvent:
    """Names of the events a transport emits."""

    LOGIN = "login"
    END = "end"
    KICKED = "kicked"
    MESSAGE = "message"
    ACTION_BAR = "action_bar"
    RESPAWN = "respawn"
    PLAYER_JOINED = "player_joined"
    PLAYER_LEFT = "player_left"
    SPAWN = "spawn"
    ERROR = "error"


class Transport(Protocol):
    """Low-level game connection."""

    def on(self, event: str, callback: Callable[..., Any]) -> Any:
        """Subscribe to a transport event."""
        ...

    def remove_all_listeners(self) -> None:
        """Detach every subscriber."""
        ...

    def chat(self, text: str) -> None:
        """Send one chat line."""
        ...

    def quit(self, reason: str | None = None) -> None:
        """Close the connection."""
        ...


@dataclass(frozen=True)
class TransportOptions:
    """Everything a transport factory needs to open a connection."""

    host: str
    port: int
    username: str
    password: str | None = None
    version: str | None = None
    session: Any = None


TransportFactory = Callable[[TransportOptions], Transport]


class CredentialStore(Protocol):
    """Source of valid login sessions."""

    async def get_valid_session(
        self, username: str, password: str, cache_name: str | None = None
    ) -> Any:
        """Return a session usable for one login attempt."""
        ...


__all__ = [
    "CredentialStore",
    "Transport",
    "TransportEvent",
    "TransportFactory",
    "TransportOptions",
]
