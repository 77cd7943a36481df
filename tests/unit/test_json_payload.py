"""
Tests for JSON extraction from model output.
"""

import pytest

from weather_chat.core.json_payload import coerce_flag, extract_json_candidate, parse_model_json
from weather_chat.errors import MalformedModelOutputError


class TestExtractJsonCandidate:
    """Test picking the JSON span out of free text."""

    def test_fenced_block_preferred(self):
        """Test a fenced json block wins over surrounding braces."""
        text = 'Here {not this}\n```json\n{"intent": "FORECAST"}\n```\ntrailing'
        assert extract_json_candidate(text) == '{"intent": "FORECAST"}'

    def test_fenced_block_without_language(self):
        """Test a bare fence is accepted when it holds an object."""
        text = '```\n{"a": 1}\n```'
        assert extract_json_candidate(text) == '{"a": 1}'

    def test_non_json_fence_skipped(self):
        """Test a fence holding prose falls through to brace matching."""
        text = '```\nsome prose\n```\nresult: {"a": 1} done'
        assert extract_json_candidate(text) == '{"a": 1}'

    def test_balanced_braces_in_prose(self):
        """Test the first balanced object is taken from prose."""
        text = 'Sure! {"a": {"b": 2}} and then {"c": 3}'
        assert extract_json_candidate(text) == '{"a": {"b": 2}}'

    def test_braces_inside_strings_ignored(self):
        """Test braces inside string literals do not close the object."""
        text = 'x {"reasoning": "use } carefully \\" {", "intent": "PLANNING"} y'
        assert extract_json_candidate(text) == (
            '{"reasoning": "use } carefully \\" {", "intent": "PLANNING"}'
        )

    def test_raw_text_fallback(self):
        """Test text without braces is returned stripped."""
        assert extract_json_candidate("  no json here  ") == "no json here"


class TestParseModelJson:
    """Test decoding and validating model JSON."""

    def test_parses_object(self):
        """Test a plain object decodes."""
        assert parse_model_json('{"intent": "FORECAST", "confidence": 0.8}') == {
            "intent": "FORECAST",
            "confidence": 0.8,
        }

    def test_parses_fenced_object_with_unicode(self):
        """Test Vietnamese text survives extraction."""
        payload = parse_model_json('```json\n{"locations": ["Hà Nội"]}\n```')
        assert payload["locations"] == ["Hà Nội"]

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_output_rejected(self, text):
        """Test empty output raises."""
        with pytest.raises(MalformedModelOutputError, match="Empty"):
            parse_model_json(text)

    def test_invalid_json_rejected(self):
        """Test undecodable output raises and keeps the raw text."""
        with pytest.raises(MalformedModelOutputError) as exc_info:
            parse_model_json("{intent: FORECAST")
        assert exc_info.value.raw_text == "{intent: FORECAST"

    def test_non_object_rejected(self):
        """Test a JSON array is not accepted as a payload."""
        with pytest.raises(MalformedModelOutputError, match="Expected a JSON object"):
            parse_model_json('```json\n[1, 2]\n```')

    def test_missing_required_field(self):
        """Test required keys must be present and non-null."""
        with pytest.raises(MalformedModelOutputError, match="intent"):
            parse_model_json('{"intent": null, "confidence": 0.9}', required=("intent",))


class TestCoerceFlag:
    """Test reading booleans from model output."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            (False, False),
            ("true", True),
            (" TRUE ", True),
            ("false", False),
            ("False", False),
            ("yes", False),
            (1, False),
            (None, False),
            ([True], False),
        ],
    )
    def test_coerce_flag(self, value, expected):
        """Test only true or the string "true" read as set."""
        assert coerce_flag(value) is expected
