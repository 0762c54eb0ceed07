"""Unit tests for tolerant parsing of model replies."""

import pytest
from pydantic import ValidationError

from src.detection.schemas import CornerReply, parse_json_reply, sanitize_json


class TestSanitizeJson:
    """Test sanitize_json repairs."""

    def test_strips_fences(self):
        assert sanitize_json('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fences(self):
        assert sanitize_json('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_escapes_newline_inside_string(self):
        assert sanitize_json('{"note": "two\nlines"}') == '{"note": "two\\nlines"}'

    def test_keeps_newline_outside_string(self):
        assert sanitize_json('{\n"a": 1\n}') == '{\n"a": 1\n}'

    def test_doubles_invalid_escape(self):
        assert sanitize_json('{"path": "C:\\docs"}') == '{"path": "C:\\\\docs"}'

    def test_keeps_valid_escape(self):
        assert sanitize_json('{"q": "say \\"hi\\""}') == '{"q": "say \\"hi\\""}'

    def test_removes_trailing_commas(self):
        assert sanitize_json('{"a": [1, 2,], "b": 3,}') == '{"a": [1, 2], "b": 3}'

    def test_escaped_backslash_before_closing_quote(self):
        raw = '{"path": "C:\\\\", "note": "a\nb"}'

        assert sanitize_json(raw) == '{"path": "C:\\\\", "note": "a\\nb"}'

    def test_escaped_backslash_before_letter_kept(self):
        assert sanitize_json('{"p": "\\\\x"}') == '{"p": "\\\\x"}'


class TestParseJsonReply:
    """Test parse_json_reply strategies."""

    def test_direct(self):
        assert parse_json_reply('{"found": false}') == {"found": False}

    def test_after_sanitizing(self):
        assert parse_json_reply('```json\n{"found": true,}\n```') == {"found": True}

    def test_trailing_backslash_in_value(self):
        reply = '{"path": "C:\\\\", "note": "a\nb",}'

        assert parse_json_reply(reply) == {"path": "C:\\", "note": "a\nb"}

    def test_embedded_object(self):
        text = 'Here are the corners: {"found": false} Hope this helps.'
        assert parse_json_reply(text) == {"found": False}

    def test_non_object_rejected(self):
        with pytest.raises(ValueError, match="Could not parse"):
            parse_json_reply("[1, 2, 3]")

    def test_garbage_rejected(self):
        with pytest.raises(ValueError, match="Could not parse"):
            parse_json_reply("no json here")


class TestCornerReply:
    """Test CornerReply schema."""

    def test_camel_case_corners(self):
        reply = CornerReply.model_validate(
            {
                "found": True,
                "corners": {
                    "topLeft": {"x": 1, "y": 2},
                    "topRight": {"x": 3, "y": 4},
                    "bottomRight": {"x": 5, "y": 6},
                    "bottomLeft": {"x": 7, "y": 8},
                },
            }
        )

        assert reply.has_document
        assert reply.corners.bottom_left.x == 7

    def test_found_omitted_with_corners(self):
        reply = CornerReply.model_validate(
            {
                "corners": {
                    "topLeft": {"x": 1, "y": 2},
                    "topRight": {"x": 3, "y": 4},
                    "bottomRight": {"x": 5, "y": 6},
                    "bottomLeft": {"x": 7, "y": 8},
                }
            }
        )

        assert reply.has_document

    def test_not_found(self):
        assert not CornerReply.model_validate({"found": False}).has_document

    def test_incomplete_corners(self):
        with pytest.raises(ValidationError):
            CornerReply.model_validate({"corners": {"topLeft": {"x": 1, "y": 2}}})
