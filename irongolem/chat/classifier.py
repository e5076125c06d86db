"""Chat line classification against an ordered rule set."""

from __future__ import annotations

import logging

from .message import ParsedMessage, identity_reply
from .rules import EMPTY_RULE_SET, FULL_TEXT, ChatRule, ChatRuleSet


def _to_level(value: str | None) -> int | None:
    if value is None:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value)
    logging.debug(f"🔢 Ignoring non-numeric level capture value={value!r}")
    return None


def _build_message(rule: ChatRule, raw_text: str, parts: dict[str, str | None]) -> ParsedMessage:
    full_text = parts.get(FULL_TEXT) or raw_text
    text = parts.get("text")
    return ParsedMessage(
        type=rule.name,
        full_text=full_text,
        text=text if text is not None else full_text,
        sender=parts.get("sender"),
        rank=parts.get("rank"),
        level=_to_level(parts.get("level")),
        target=parts.get("target"),
        prefix=parts.get("prefix"),
        reply_formatter=rule.reply_formatter or identity_reply,
    )


class ChatClassifier:
    """Turns raw chat text into a :class:`ParsedMessage`.

    Rules are tried in the order the rule set declares them and the first
    match wins; later rules are never consulted. A line no rule matches is
    reported as an ``unknown`` message, never as an error.
    """

    def __init__(self, rule_set: ChatRuleSet | None = None) -> None:
        self.rule_set = rule_set if rule_set is not None else EMPTY_RULE_SET

    def classify(self, raw_text: str, rule_set: ChatRuleSet | None = None) -> ParsedMessage:
        rules = rule_set if rule_set is not None else self.rule_set
        for rule in rules:
            match = rule.pattern.search(raw_text)
            if match is None:
                continue
            return _build_message(rule, raw_text, rule.bind(match))
        return ParsedMessage.unknown(raw_text)


def classify(raw_text: str, rule_set: ChatRuleSet) -> ParsedMessage:
    """Classify a single line with a throwaway classifier."""
    return ChatClassifier(rule_set).classify(raw_text)


__all__ = ["ChatClassifier", "classify"]
