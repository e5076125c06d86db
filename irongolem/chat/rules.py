"""Chat classification rules.

A rule binds a regular expression to a message type name. Capture group
values are bound positionally to ``capture_names``; the binding is checked
when the rule is built so a bad rule never reaches the classifier.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from ..errors.internal import RuleDefinitionError
from .message import ReplyFormatter

FULL_TEXT = "full_text"
CAPTURE_FIELDS = frozenset(
    {FULL_TEXT, "text", "sender", "rank", "level", "target", "prefix"}
)


@dataclass(frozen=True)
class ChatRule:
    """A single named chat pattern.

    Attributes:
        name: Message type name, also the event name the client emits.
        pattern: Compiled pattern; strings are compiled on construction.
        capture_names: ``full_text`` followed by one name per group.
        reply_formatter: Optional ``(text, sender) -> str``.
    """

    name: str
    pattern: re.Pattern[str]
    capture_names: tuple[str, ...]
    reply_formatter: ReplyFormatter | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise RuleDefinitionError("chat rule name must not be empty")
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))
        object.__setattr__(self, "capture_names", tuple(self.capture_names))
        self._validate_captures()

    def _validate_captures(self) -> None:
        names = self.capture_names
        expected = self.pattern.groups + 1
        if len(names) != expected:
            raise RuleDefinitionError(
                f"chat rule '{self.name}' names {len(names)} captures but its "
                f"pattern yields {expected} (full text + {self.pattern.groups} groups)",
                data={"rule": self.name},
            )
        if names[0] != FULL_TEXT:
            raise RuleDefinitionError(
                f"chat rule '{self.name}' must name capture 0 '{FULL_TEXT}', got '{names[0]}'",
                data={"rule": self.name},
            )
        unknown = [n for n in names if n not in CAPTURE_FIELDS]
        if unknown:
            raise RuleDefinitionError(
                f"chat rule '{self.name}' uses unknown capture names: {', '.join(unknown)}",
                data={"rule": self.name, "unknown": unknown},
            )
        if len(set(names)) != len(names):
            raise RuleDefinitionError(
                f"chat rule '{self.name}' repeats a capture name",
                data={"rule": self.name},
            )

    def bind(self, match: re.Match[str]) -> dict[str, str | None]:
        """Map a match onto capture names (index 0 is the full match)."""
        values = (match.group(0), *match.groups())
        return dict(zip(self.capture_names, values, strict=True))


class ChatRuleSet(Sequence[ChatRule]):
    """Ordered, immutable collection of chat rules.

    Order is the contract: the classifier stops at the first matching rule,
    so more specific patterns must come before general ones.
    """

    def __init__(self, rules: Iterable[ChatRule] = ()) -> None:
        self._rules: tuple[ChatRule, ...] = tuple(rules)
        seen: set[str] = set()
        for rule in self._rules:
            if rule.name in seen:
                raise RuleDefinitionError(
                    f"duplicate chat rule name '{rule.name}'", data={"rule": rule.name}
                )
            seen.add(rule.name)

    def __getitem__(self, index):  # type: ignore[override]
        return self._rules[index]

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[ChatRule]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"ChatRuleSet({[r.name for r in self._rules]!r})"

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(rule.name for rule in self._rules)


EMPTY_RULE_SET = ChatRuleSet()


__all__ = ["ChatRule", "ChatRuleSet", "CAPTURE_FIELDS", "EMPTY_RULE_SET", "FULL_TEXT"]
