"""
AI Helper Utilities
Common utility functions for reading LLM output and formatting hotel data
"""

import json
import re
from typing import Any, Dict, Iterable, List, Optional


_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_INVISIBLE = re.compile(r"[\u200b-\u200d\ufeff]")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_REGEX_SPECIALS = re.compile(r"[.*+?^${}()|\[\]\\]")


def extract_json_string(text: Optional[str]) -> Optional[str]:
    """
    Extract the first top-level JSON object from a model response

    Removes code fences, zero-width characters and smart quotes, then walks
    the text balancing braces from the first "{".

    Args:
        text: Raw model output

    Returns:
        str: JSON object text (trailing commas removed), or None

    Example:
        >>> extract_json_string('Sure! ```json {"intent": "greeting",} ```')
        '{"intent": "greeting"}'
    """
    if not text:
        return None

    cleaned = _CODE_FENCE.sub("", text)
    cleaned = _INVISIBLE.sub("", cleaned).strip()
    cleaned = cleaned.replace("\u201c", '"').replace("\u201d", '"')
    cleaned = cleaned.replace("\u2018", "'").replace("\u2019", "'")

    start = cleaned.find("{")
    if start == -1:
        return None

    depth = 0
    for index in range(start, len(cleaned)):
        char = cleaned[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                candidate = cleaned[start:index + 1]
                return _TRAILING_COMMA.sub(r"\1", candidate).strip()

    return None


def safe_parse_json(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Parse a JSON object out of model output, trying progressively looser cleanups

    Returns:
        dict or None when nothing parseable (or not an object) was found
    """
    if not text:
        return None

    try:
        parsed = json.loads(text)
        return parsed if isinstance(parsed, dict) else None
    except json.JSONDecodeError:
        pass

    block = extract_json_string(text)
    if not block:
        return None

    for candidate in (block, _TRAILING_COMMA.sub(r"\1", block).replace("\n", " ")):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        return parsed if isinstance(parsed, dict) else None

    return None


def strip_regex_chars(text: str) -> str:
    """Remove regex metacharacters so user text can be used as a loose pattern"""
    return _REGEX_SPECIALS.sub("", text).strip()


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to maximum length

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add (default: "...")

    Returns:
        str: Truncated text
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def format_price(price: float) -> str:
    """
    Format a nightly price as currency string

    Returns:
        str: Formatted price (e.g., "$120")
    """
    if float(price).is_integer():
        return f"${int(price)}"
    return f"${price:.2f}"


def unique(items: Iterable[str]) -> List[str]:
    """Remove duplicates (case-insensitive) while preserving order"""
    seen = set()
    result = []
    for item in items:
        key = item.lower()
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result
