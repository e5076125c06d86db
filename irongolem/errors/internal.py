"""Centralized internal error hierarchy.

These exceptions give semantic categories to everything the client raises
or hands to ``error`` listeners. Raw transport / aiohttp errors are wrapped
into one of these before they cross the client boundary.

Classes:
  GolemError                 – Base for all internal errors.
  ConnectionTerminatedError  – The login attempt ended without success.
  LoginTimeoutError          – The login attempt was abandoned after the timeout.
  LoginAbortedError          – The login attempt was superseded by a new ``init()``.
  FatalConnectionError       – A transport error that ends the connection.
  NotOnlineError             – An outbound message was requested while not logged in.
  RuleDefinitionError        – A chat rule is inconsistent with its pattern.
  AuthenticationError        – The auth server rejected the credentials or session.
  NetworkError               – Transient network/IO issue talking to the auth server.
"""

from __future__ import annotations

from collections.abc import Mapping


class GolemError(Exception):
    """Base class for all internal errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class ConnectionTerminatedError(GolemError):
    """Raised into pending login waiters when the connection ends before login."""


class LoginTimeoutError(ConnectionTerminatedError):
    """Raised into pending login waiters when the login timeout elapses."""


class LoginAbortedError(ConnectionTerminatedError):
    """Raised into pending login waiters when ``init()`` restarts the client."""


class FatalConnectionError(GolemError):
    """A transport failure classified as fatal.

    The message is always prefixed with ``FATAL:`` so listeners that only
    look at the text can tell it apart from passthrough errors.

    Args:
        reason: Human readable reason produced by error triage.
        data: Optional mapping of additional context data.
    """

    def __init__(
        self, reason: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(f"FATAL: {reason}", data=data)
        self.reason = reason


class NotOnlineError(GolemError):
    """Raised when sending while the client is not logged in."""

    def __init__(self, message: str = "Client is not logged in") -> None:
        super().__init__(message)


class RuleDefinitionError(GolemError, ValueError):
    """Raised when a chat rule's capture names do not fit its pattern."""


class AuthenticationError(GolemError):
    """Authentication / session failures reported by the auth server.

    Not suitable for automatic retry.
    """


class NetworkError(GolemError):
    """Transient network/IO issues talking to the auth server (safe to retry)."""


__all__ = [
    "GolemError",
    "ConnectionTerminatedError",
    "LoginTimeoutError",
    "LoginAbortedError",
    "FatalConnectionError",
    "NotOnlineError",
    "RuleDefinitionError",
    "AuthenticationError",
    "NetworkError",
]
