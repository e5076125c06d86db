"""Error hierarchy and transport error triage."""

from .internal import (
    AuthenticationError,
    ConnectionTerminatedError,
    FatalConnectionError,
    GolemError,
    LoginAbortedError,
    LoginTimeoutError,
    NetworkError,
    NotOnlineError,
    RuleDefinitionError,
)
from .triage import Disposition, ErrorTriage, Verdict

__all__ = [
    "AuthenticationError",
    "ConnectionTerminatedError",
    "FatalConnectionError",
    "GolemError",
    "LoginAbortedError",
    "LoginTimeoutError",
    "NetworkError",
    "NotOnlineError",
    "RuleDefinitionError",
    "Disposition",
    "ErrorTriage",
    "Verdict",
]
