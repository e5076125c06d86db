"""Chat classification pipeline: rules, parsed messages and the classifier."""

from .classifier import ChatClassifier, classify
from .message import UNKNOWN_TYPE, ParsedMessage, ReplyFormatter, identity_reply
from .rules import EMPTY_RULE_SET, ChatRule, ChatRuleSet

__all__ = [
    "ChatClassifier",
    "classify",
    "ParsedMessage",
    "ReplyFormatter",
    "UNKNOWN_TYPE",
    "identity_reply",
    "ChatRule",
    "ChatRuleSet",
    "EMPTY_RULE_SET",
]
