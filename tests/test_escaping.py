"""
Tests for connection-string value escaping and keyword DSN parsing.
"""

import pytest
from psycopg.conninfo import conninfo_to_dict

from connkit.core.escaping import escape_value, parse_keyword_dsn
from connkit.exceptions import ConfigurationError


class TestEscapeValue:
    """Test cases for escape_value."""

    def test_plain_value_unchanged(self):
        """Values without whitespace, quotes or backslashes pass through."""
        assert escape_value("s3cret") == "s3cret"
        assert escape_value("utf8mb4") == "utf8mb4"

    def test_empty_value_is_quoted(self):
        """An empty value becomes an empty quoted string."""
        assert escape_value("") == "''"

    def test_quote_and_backslash(self):
        """Quotes and backslashes are escaped inside single quotes."""
        assert escape_value(r"O'Brien \pass") == r"'O\'Brien \\pass'"

    def test_whitespace_only_triggers_quoting(self):
        """A value with a space is quoted without any escaping."""
        assert escape_value("a b") == "'a b'"
        assert escape_value("tab\there") == "'tab\there'"

    def test_backslash_not_escaped_twice(self):
        """Backslashes inserted for quotes are not escaped again."""
        assert escape_value("\\'") == "'\\\\\\''"

    def test_double_quote_triggers_quoting(self):
        """A double quote is quoted but left unescaped."""
        assert escape_value('say"hi') == "'say\"hi'"

    @pytest.mark.parametrize("value", [
        "a b",
        "it's",
        "back\\slash",
        r"O'Brien \pass",
        "'leading and trailing'",
        "\\",
        " ",
        "multi\nline",
    ])
    def test_round_trip_through_parser(self, value):
        """Parsing the escaped value reproduces the original."""
        parsed = parse_keyword_dsn(f"password={escape_value(value)}")
        assert parsed == {"password": value}

    @pytest.mark.parametrize("value", [
        "a b",
        "it's",
        "back\\slash",
        r"O'Brien \pass",
        'say"hi',
        "\\",
        " ",
        "",
    ])
    def test_round_trip_through_libpq(self, value):
        """libpq parses the escaped value back to the original."""
        parsed = conninfo_to_dict(f"host=db1 password={escape_value(value)}")
        assert parsed["password"] == value


class TestParseKeywordDsn:
    """Test cases for parse_keyword_dsn."""

    def test_parses_pairs_in_order(self):
        """Pairs come back in order of appearance."""
        parsed = parse_keyword_dsn("host=db1 port=5432 dbname=orders")

        assert list(parsed.items()) == [("host", "db1"), ("port", "5432"), ("dbname", "orders")]

    def test_spaces_around_equals(self):
        """Whitespace around '=' is ignored, as libpq does."""
        assert parse_keyword_dsn("host = db1") == {"host": "db1"}

    def test_missing_equals(self):
        """A key without '=' is rejected."""
        with pytest.raises(ConfigurationError, match="missing '='"):
            parse_keyword_dsn("host db1")

    def test_empty_key(self):
        """A pair without a key is rejected."""
        with pytest.raises(ConfigurationError, match="empty parameter name"):
            parse_keyword_dsn("=db1")

    def test_unterminated_quote(self):
        """An unterminated quoted value is rejected."""
        with pytest.raises(ConfigurationError, match="unterminated"):
            parse_keyword_dsn("password='abc")
