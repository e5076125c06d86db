"""irongolem: resilient chat client runtime on top of a game transport."""

from .auth import AuthServerClient, Session, SessionCache
from .chat import ChatClassifier, ChatRule, ChatRuleSet, ParsedMessage
from .client import (
    ClientEvent,
    ConnectionState,
    EventBus,
    GolemClient,
    Transport,
    TransportOptions,
)
from .config import ClientConfig, ServerProfile
from .errors import (
    ConnectionTerminatedError,
    ErrorTriage,
    FatalConnectionError,
    GolemError,
    LoginTimeoutError,
    NotOnlineError,
)

__version__ = "0.1.0"

__all__ = [
    "AuthServerClient",
    "Session",
    "SessionCache",
    "ChatClassifier",
    "ChatRule",
    "ChatRuleSet",
    "ParsedMessage",
    "ClientEvent",
    "ConnectionState",
    "EventBus",
    "GolemClient",
    "Transport",
    "TransportOptions",
    "ClientConfig",
    "ServerProfile",
    "ConnectionTerminatedError",
    "ErrorTriage",
    "FatalConnectionError",
    "GolemError",
    "LoginTimeoutError",
    "NotOnlineError",
]
