"""Tests for terminal-safe string rendering."""

import pytest

from jwtdebug.sanitize import sanitize_string, token_snippet


class TestSanitizeString:
    """Escaping of control and invisible characters."""

    def test_plain_text_unchanged(self):
        assert sanitize_string("hello world") == "hello world"
        assert sanitize_string("") == ""

    def test_unicode_text_unchanged(self):
        """Ordinary non-ASCII text is left alone."""
        assert sanitize_string("café ✓ 日本") == "café ✓ 日本"

    def test_named_escapes(self):
        assert sanitize_string("a\nb\rc\td") == "a\\nb\\rc\\td"

    def test_ansi_escape_neutralized(self):
        """ESC becomes \\x1B so terminal escape sequences cannot take effect."""
        assert sanitize_string("\x1b[31mred\x1b[0m") == "\\x1B[31mred\\x1B[0m"

    def test_other_controls_and_del(self):
        assert sanitize_string("\x00\x07\x7f") == "\\x00\\x07\\x7F"

    def test_c1_controls(self):
        assert sanitize_string("\x85\x9b") == "\\u0085\\u009B"

    @pytest.mark.parametrize(
        "char,expected",
        [
            ("\u200b", "\\u200B"),
            ("\u200f", "\\u200F"),
            ("\u202e", "\\u202E"),
            ("\u2066", "\\u2066"),
            ("\u2069", "\\u2069"),
            ("\ufeff", "\\uFEFF"),
        ],
    )
    def test_bidi_and_zero_width(self, char, expected):
        """Trojan Source characters are made visible."""
        assert sanitize_string(f"x{char}y") == f"x{expected}y"

    def test_output_has_no_dangerous_characters(self):
        """Nothing dangerous survives sanitizing."""
        raw = "".join(chr(c) for c in range(0, 0xA0)) + "\u202e\u2067\ufeff\u200d"
        result = sanitize_string(raw)
        for char in result:
            code = ord(char)
            assert code >= 0x20 and code != 0x7F
            assert not 0x80 <= code <= 0x9F
            assert char not in "\u202e\u2067\ufeff\u200d"


class TestTokenSnippet:
    """Truncated previews for error messages."""

    def test_short_token_unchanged(self):
        assert token_snippet("abc.def") == "abc.def"

    def test_twenty_chars_unchanged(self):
        assert token_snippet("a" * 20) == "a" * 20

    def test_long_token_truncated(self):
        snippet = token_snippet("a" * 100)
        assert snippet == "a" * 17 + "..."
        assert len(snippet) == 20

    def test_snippet_is_sanitized(self):
        assert token_snippet("\x1b[31m") == "\\x1B[31m"
