"""Unit tests for the LLM output and formatting helpers."""

from aibookify.utils import (
    extract_json_string,
    format_price,
    safe_parse_json,
    strip_regex_chars,
    truncate_text,
    unique,
)


class TestExtractJsonString:
    """Tests for extract_json_string."""

    def test_strips_code_fence_and_trailing_comma(self):
        text = 'Sure! ```json {"intent": "greeting",} ```'
        assert extract_json_string(text) == '{"intent": "greeting"}'

    def test_balances_nested_braces(self):
        text = 'noise {"a": {"b": 1}} trailing {"c": 2}'
        assert extract_json_string(text) == '{"a": {"b": 1}}'

    def test_returns_none_without_object(self):
        assert extract_json_string("no json here") is None
        assert extract_json_string("") is None
        assert extract_json_string(None) is None

    def test_unbalanced_object_is_rejected(self):
        assert extract_json_string('{"a": 1') is None


class TestSafeParseJson:
    """Tests for safe_parse_json."""

    def test_plain_json(self):
        assert safe_parse_json('{"intent": "question"}') == {"intent": "question"}

    def test_json_wrapped_in_prose(self):
        raw = 'Here you go:\n```json\n{"intent": "search_hotels", "entities": {"location": "Nairobi"},}\n```'
        parsed = safe_parse_json(raw)
        assert parsed["intent"] == "search_hotels"
        assert parsed["entities"]["location"] == "Nairobi"

    def test_smart_quotes_are_normalized(self):
        raw = "{\u201cintent\u201d: \u201cgreeting\u201d}"
        assert safe_parse_json(raw) == {"intent": "greeting"}

    def test_non_object_json_is_rejected(self):
        assert safe_parse_json("[1, 2, 3]") is None

    def test_garbage_returns_none(self):
        assert safe_parse_json("{not: valid") is None
        assert safe_parse_json(None) is None


class TestFormatting:
    """Tests for the small string helpers."""

    def test_strip_regex_chars(self):
        assert strip_regex_chars("Hilton (Nairobi)*") == "Hilton Nairobi"

    def test_truncate_text(self):
        assert truncate_text("short", 10) == "short"
        assert truncate_text("a" * 20, 10) == "aaaaaaa..."

    def test_format_price(self):
        assert format_price(120) == "$120"
        assert format_price(99.5) == "$99.50"

    def test_unique_is_case_insensitive_and_ordered(self):
        assert unique(["Pool", "wifi", "pool", "Spa", "WIFI"]) == ["Pool", "wifi", "Spa"]
