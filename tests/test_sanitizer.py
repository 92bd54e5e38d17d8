# ==============================================
# Tests for the Identifier Sanitizer
# ==============================================

import re

import pytest

from dynamic_tables.schema.registry import SchemaRegistry
from dynamic_tables.schema.sanitizer import is_safe_identifier, sanitize

RAW_VALUES = [
    "wikipedia.org",
    "google.com",
    "sub-domain.example.co.uk",
    "already_clean_123",
    "spaces and\ttabs\n",
    "quote\"semicolon;drop table x;--",
    "ünïcödé.de",
    "日本.jp",
    "%_%",
    "",
    "...",
]


class TestSanitize:
    @pytest.mark.parametrize("raw", RAW_VALUES)
    def test_only_identifier_characters_remain(self, raw):
        assert re.fullmatch(r"[A-Za-z0-9_]*", sanitize(raw))

    @pytest.mark.parametrize("raw", RAW_VALUES)
    def test_remaining_characters_keep_their_order(self, raw):
        expected = "".join(c for c in raw if c.isascii() and (c.isalnum() or c == "_"))
        assert sanitize(raw) == expected

    @pytest.mark.parametrize("raw", RAW_VALUES)
    def test_idempotent(self, raw):
        assert sanitize(sanitize(raw)) == sanitize(raw)

    def test_dots_are_stripped(self):
        assert sanitize("wikipedia.org") == "wikipediaorg"

    def test_unicode_letters_are_stripped(self):
        assert sanitize("café") == "caf"

    def test_collisions_are_not_resolved(self):
        # Distinct raw values may map to the same identifier
        assert sanitize("a.b") == sanitize("a-b") == sanitize("ab")

    def test_no_length_limit(self):
        raw = "x" * 500
        assert sanitize(raw) == raw


class TestIsSafeIdentifier:
    def test_clean_name(self):
        assert is_safe_identifier("dt1_wikipediaorg")

    def test_empty_name(self):
        assert not is_safe_identifier("")

    def test_name_with_quote(self):
        assert not is_safe_identifier('dt1_"x')


class TestFormatTableName:
    def test_prefix_is_prepended(self):
        registry = SchemaRegistry(table_prefix="test_")
        assert registry.format_table_name("example") == "test_example"

    def test_deterministic(self):
        registry = SchemaRegistry(table_prefix="dt1_")
        assert registry.format_table_name("wikipedia.org") == registry.format_table_name("wikipedia.org")

    def test_prefix_is_not_sanitized(self):
        registry = SchemaRegistry(table_prefix="my-prefix.")
        assert registry.format_table_name("a.b") == "my-prefix.ab"

    def test_default_prefix(self):
        assert SchemaRegistry().format_table_name("google.com") == "dtbl_googlecom"
