"""
Utilities Module
Helper functions for AI service
"""

from .ai_helpers import (
    extract_json_string,
    safe_parse_json,
    strip_regex_chars,
    truncate_text,
    format_price,
    unique
)

__all__ = [
    "extract_json_string",
    "safe_parse_json",
    "strip_regex_chars",
    "truncate_text",
    "format_price",
    "unique"
]
