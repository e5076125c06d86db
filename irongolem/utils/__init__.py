"""Utility helpers."""

from .text import is_valid_name, json_to_text, packet_to_text, strip_color

__all__ = ["is_valid_name", "json_to_text", "packet_to_text", "strip_color"]
