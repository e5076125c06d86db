"""
Unit tests for ErrorTriage.
"""

import errno
import socket

import pytest

from irongolem.errors.triage import (
    AUTH_REJECTED_REASON,
    CONNECTION_REFUSED_REASON,
    CONNECTION_RESET_REASON,
    DNS_FAILURE_REASON,
    Disposition,
    ErrorTriage,
    Verdict,
)


class CodedError(Exception):
    """Transport error carrying a Node-style string code."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


@pytest.fixture
def triage():
    return ErrorTriage()


@pytest.mark.parametrize(
    "message",
    [
        "Deserialization error for play.toClient : Read error for undefined",
        "PartialReadError: Unexpected buffer end while reading VarInt",
        "RangeError: Trying to access beyond buffer length",
    ],
)
def test_decode_glitches_are_transient(triage, message):
    assert triage.classify(Exception(message)) == Verdict.transient()


def test_invalid_credentials_are_fatal(triage):
    verdict = triage.classify(Exception("Invalid credentials. Invalid username or password."))
    assert verdict.is_fatal
    assert verdict.reason == AUTH_REJECTED_REASON


def test_decode_marker_checked_before_credentials(triage):
    verdict = triage.classify(Exception("deserialization error: invalid username or password"))
    assert verdict.disposition is Disposition.TRANSIENT


@pytest.mark.parametrize(
    ("error", "reason"),
    [
        (CodedError("read ECONNRESET", "ECONNRESET"), CONNECTION_RESET_REASON),
        (ConnectionResetError(errno.ECONNRESET, "Connection reset by peer"), CONNECTION_RESET_REASON),
        (OSError(errno.ECONNRESET, "reset"), CONNECTION_RESET_REASON),
        (CodedError("connect ECONNREFUSED 127.0.0.1:25565", "ECONNREFUSED"), CONNECTION_REFUSED_REASON),
        (ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused"), CONNECTION_REFUSED_REASON),
        (CodedError("getaddrinfo ENOTFOUND nowhere.invalid", "ENOTFOUND"), DNS_FAILURE_REASON),
        (socket.gaierror(socket.EAI_NONAME, "Name or service not known"), DNS_FAILURE_REASON),
    ],
)
def test_network_codes_are_fatal(triage, error, reason):
    verdict = triage.classify(error)
    assert verdict.is_fatal
    assert verdict.reason == reason


def test_lowercase_code_still_matches(triage):
    assert triage.classify(CodedError("reset", "econnreset")).reason == CONNECTION_RESET_REASON


def test_anything_else_passes_through(triage):
    verdict = triage.classify(ValueError("something odd happened"))
    assert verdict == Verdict.passthrough()
    assert not verdict.is_fatal
    assert verdict.reason is None


def test_unrelated_code_passes_through(triage):
    assert triage.classify(CodedError("timeout", "ETIMEDOUT")).disposition is Disposition.PASSTHROUGH


def test_plain_string_errors_are_classified(triage):
    assert triage.classify("invalid username or password").is_fatal
