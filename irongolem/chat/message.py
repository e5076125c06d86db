"""Structured chat message produced by the classifier."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

ReplyFormatter = Callable[[str, str | None], str]

UNKNOWN_TYPE = "unknown"


def identity_reply(text: str, sender: str | None = None) -> str:
    """Default reply formatter: send the text unchanged."""
    return text


@dataclass(frozen=True)
class ParsedMessage:
    """A classified chat line.

    Attributes:
        type: Name of the rule that matched, or ``"unknown"``.
        full_text: The whole line as the server sent it.
        text: Only what the sender typed; extra decoration removed.
        sender: Who sent the message, None for server messages.
        rank: Sender's rank, if the server shows one.
        level: Sender's level, if the server shows one.
        target: Recipient of a private/staff message, if any.
        prefix: Server message channel prefix, if any.
        reply_formatter: ``(text, sender) -> str`` used when replying.
    """

    type: str
    full_text: str
    text: str
    sender: str | None = None
    rank: str | None = None
    level: int | None = None
    target: str | None = None
    prefix: str | None = None
    reply_formatter: ReplyFormatter = field(default=identity_reply, compare=False)

    @property
    def is_unknown(self) -> bool:
        return self.type == UNKNOWN_TYPE

    def format_reply(self, text: str) -> str:
        """Format ``text`` as a reply to this message.

        Messages we sent ourselves have no sender; replies go to the target.
        """
        formatter = self.reply_formatter or identity_reply
        recipient = self.sender if self.sender is not None else self.target
        return formatter(text, recipient)

    @classmethod
    def unknown(cls, raw_text: str) -> ParsedMessage:
        return cls(type=UNKNOWN_TYPE, full_text=raw_text, text=raw_text)


__all__ = ["ParsedMessage", "ReplyFormatter", "UNKNOWN_TYPE", "identity_reply"]
