"""Credential store backed by the auth server and an on-disk session cache."""

from .session_cache import AuthServerClient, Session, SessionCache

__all__ = ["AuthServerClient", "Session", "SessionCache"]
