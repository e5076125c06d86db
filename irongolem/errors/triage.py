"""Classification of transport failures into fatal, transient and passthrough."""

from __future__ import annotations

import errno
import socket
from dataclasses import dataclass
from enum import Enum


class Disposition(str, Enum):
    """What the client should do with a transport error."""

    FATAL = "fatal"
    TRANSIENT = "transient"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class Verdict:
    """Result of classifying a transport error.

    Attributes:
        disposition: The category the error falls into.
        reason: Human readable reason, only set for fatal verdicts.
    """

    disposition: Disposition
    reason: str | None = None

    @classmethod
    def fatal(cls, reason: str) -> Verdict:
        return cls(Disposition.FATAL, reason)

    @classmethod
    def transient(cls) -> Verdict:
        return cls(Disposition.TRANSIENT)

    @classmethod
    def passthrough(cls) -> Verdict:
        return cls(Disposition.PASSTHROUGH)

    @property
    def is_fatal(self) -> bool:
        return self.disposition is Disposition.FATAL


DECODE_MARKERS = (
    "deserialization error",
    "partialreaderror",
    "read error for",
    "beyond buffer length",
    "unexpected buffer end",
)
CREDENTIAL_MARKERS = (
    "invalid username or password",
    "invalid credentials",
)

AUTH_REJECTED_REASON = "authentication rejected or rate-limited"
CONNECTION_RESET_REASON = "connection forcibly closed by remote host"
CONNECTION_REFUSED_REASON = "remote host refused connection"
DNS_FAILURE_REASON = "host name could not be resolved"

_RESET_CODES = {"ECONNRESET", errno.ECONNRESET}
_REFUSED_CODES = {"ECONNREFUSED", errno.ECONNREFUSED}
_DNS_CODES = {
    "ENOTFOUND",
    "EAI_AGAIN",
    "EAI_NONAME",
    socket.EAI_NONAME,
    socket.EAI_AGAIN,
}


def _error_codes(error: object) -> set[object]:
    """Collect the error codes carried by an error object.

    Node-style transports put a string on ``code``; Python socket errors
    carry ``errno``. Either may be missing.
    """
    codes: set[object] = set()
    for attr in ("code", "errno"):
        value = getattr(error, attr, None)
        if isinstance(value, str):
            codes.add(value.upper())
        elif isinstance(value, int):
            codes.add(value)
    return codes


def _error_text(error: object) -> str:
    return str(error).lower()


class ErrorTriage:
    """Classifies opaque transport failures.

    Rules are evaluated in order and the first match wins:

    1. deserialization / buffer decode glitches are transient;
    2. rejected credentials are fatal;
    3. connection reset, 4. connection refused and 5. DNS failures are fatal;
    6. anything else is passed through to listeners untouched.
    """

    def classify(self, error: object) -> Verdict:
        text = _error_text(error)
        if any(marker in text for marker in DECODE_MARKERS):
            return Verdict.transient()
        if any(marker in text for marker in CREDENTIAL_MARKERS):
            return Verdict.fatal(AUTH_REJECTED_REASON)

        codes = _error_codes(error)
        if codes & _RESET_CODES or isinstance(error, ConnectionResetError):
            return Verdict.fatal(CONNECTION_RESET_REASON)
        if codes & _REFUSED_CODES or isinstance(error, ConnectionRefusedError):
            return Verdict.fatal(CONNECTION_REFUSED_REASON)
        if codes & _DNS_CODES or isinstance(error, socket.gaierror):
            return Verdict.fatal(DNS_FAILURE_REASON)
        return Verdict.passthrough()


__all__ = ["Disposition", "Verdict", "ErrorTriage"]
