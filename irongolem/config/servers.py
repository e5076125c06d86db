"""Known server profiles and their chat rules."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..chat.rules import ChatRule, ChatRuleSet

NAME = r"(\$|[A-Za-z0-9_]{1,16})"


@dataclass(frozen=True)
class ServerProfile:
    """Per-server settings the client applies automatically.

    Attributes:
        name: Readable server name.
        host_pattern: Matched against the configured server host.
        version: Protocol version hint passed to the transport.
        chat_delay: Minimum milliseconds between outbound messages, if the
            server enforces one.
        chat_rules: Ordered chat classification rules.
    """

    name: str
    host_pattern: re.Pattern[str]
    version: str | None = None
    chat_delay: int | None = None
    chat_rules: ChatRuleSet = field(default_factory=ChatRuleSet)

    def matches(self, host: str) -> bool:
        return bool(self.host_pattern.search(host))


MINEPLEX_RANKS = (
    "ULTRA|HERO|LEGEND|TITAN|ETERNAL|TWITCH|YT|YOUTUBE|TRAINEE|MOD|CMA|SR.MOD|"
    "C.MOD|SUPPORT|JR.DEV|ADMIN|DEV|LEADER|OWNER"
)

MINEPLEX = ServerProfile(
    name="Mineplex",
    host_pattern=re.compile(r"\.?mineplex\.com$", re.IGNORECASE),
    version="1.8",
    chat_rules=ChatRuleSet(
        [
            # Prefix ends glued to ">", so "Alex > Steve" and "-> ..." fall through
            ChatRule(
                name="server-message",
                pattern=re.compile(r"^([A-Za-z](?:[^>]*[^\s>])?)> (.+)$"),
                capture_names=("full_text", "prefix", "text"),
            ),
            ChatRule(
                name="chat",
                pattern=re.compile(
                    rf"^(\d{{1,3}})\s+(?:({MINEPLEX_RANKS})\s+)?{NAME}\s+(.+)$"
                ),
                capture_names=("full_text", "level", "rank", "sender", "text"),
                reply_formatter=lambda text, sender: f"{sender}: {text}",
            ),
            ChatRule(
                name="private-message",
                pattern=re.compile(rf"^{NAME} > {NAME} (.+)$"),
                capture_names=("full_text", "sender", "target", "text"),
                reply_formatter=lambda text, sender: f"/m {sender} {text}",
            ),
            ChatRule(
                name="staff-message-receive",
                pattern=re.compile(rf"^<- ([A-Za-z.]{{1,16}}) {NAME} (.+)$"),
                capture_names=("full_text", "rank", "sender", "text"),
                reply_formatter=lambda text, sender: f"/ma {sender}: {text}",
            ),
            ChatRule(
                name="staff-message-send",
                pattern=re.compile(rf"^-> ([A-Za-z.]{{1,16}}) {NAME} (.+)$"),
                capture_names=("full_text", "rank", "target", "text"),
                reply_formatter=lambda text, sender: f"/ma {sender} {text}",
            ),
            # GWEN is the anti-cheat's announcer, never a staff member
            ChatRule(
                name="staff-chat",
                pattern=re.compile(rf"^([A-Za-z.]+) (?!GWEN){NAME} (.+)$"),
                capture_names=("full_text", "rank", "sender", "text"),
                reply_formatter=lambda text, sender: f"/a {sender}: {text}",
            ),
        ]
    ),
)

BUILTIN_PROFILES: tuple[ServerProfile, ...] = (MINEPLEX,)


def find_profile(
    host: str,
    name: str | None = None,
    extra_profiles: Iterable[ServerProfile] = (),
    *,
    include_builtin: bool = True,
) -> ServerProfile | None:
    """Resolve the profile for a server.

    User-supplied profiles are consulted before the built-in ones. An
    explicit ``name`` wins over host matching; an unknown name resolves to
    None.
    """
    candidates = list(extra_profiles)
    if include_builtin:
        candidates.extend(BUILTIN_PROFILES)
    if name:
        lowered = name.lower()
        return next((p for p in candidates if p.name.lower() == lowered), None)
    return next((p for p in candidates if p.matches(host)), None)


__all__ = ["ServerProfile", "MINEPLEX", "BUILTIN_PROFILES", "find_profile"]
