"""Plain-text helpers for chat packets and names."""

from __future__ import annotations

import json
import re
from typing import Any

SECTION_CODE_RE = re.compile(r"§[0-9A-FK-OR]", re.IGNORECASE)
ANSI_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
WHITESPACE_RE = re.compile(r"\s+")
NAME_RE = re.compile(r"^([A-Za-z0-9_]{1,16}|\$)$")


def strip_color(text: str) -> str:
    """Remove section-sign color codes and ANSI escapes."""
    return ANSI_RE.sub("", SECTION_CODE_RE.sub("", text))


def packet_to_text(packet: object, strip_spaces: bool = True) -> str:
    """Turn a chat packet into text, optionally collapsing whitespace runs."""
    text = str(packet)
    return WHITESPACE_RE.sub(" ", text) if strip_spaces else text


def _flatten(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, list):
        return "".join(_flatten(element) for element in item)
    if isinstance(item, dict):
        text = item.get("text", "")
        text = text if isinstance(text, str) else str(text)
        return text + _flatten(item.get("extra", []))
    return ""


def json_to_text(raw: str | dict | list | None) -> str:
    """Flatten a chat component (JSON text or decoded) into plain text.

    Kick reasons arrive as chat JSON; anything that is not valid JSON is
    returned unchanged.
    """
    if raw is None:
        return ""
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return raw
        if not isinstance(decoded, dict | list | str):
            return raw
        raw = decoded
    return strip_color(_flatten(raw))


def is_valid_name(value: str) -> bool:
    """Check whether a string could be a player name (not whether it exists)."""
    return bool(NAME_RE.match(value))
