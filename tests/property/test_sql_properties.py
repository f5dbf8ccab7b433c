"""Property-based tests for SQL quoting helpers."""

from hypothesis import given
from hypothesis import strategies as st

from knimesql.translators.sql import quote_identifier, quote_literal, translate_wildcard
from tests.property.settings import STANDARD_SETTINGS


class TestQuotingProperties:
    """Quoted text can always be unquoted back."""

    @given(name=st.text())
    @STANDARD_SETTINGS
    def test_identifier_unquotes(self, name: str) -> None:
        quoted = quote_identifier(name)

        assert quoted.startswith('"') and quoted.endswith('"')
        assert quoted[1:-1].replace('""', '"') == name
        # No lone quote can terminate the identifier early
        assert '"' not in quoted[1:-1].replace('""', "")

    @given(value=st.text())
    @STANDARD_SETTINGS
    def test_literal_unquotes(self, value: str) -> None:
        quoted = quote_literal(value)

        assert quoted[1:-1].replace("''", "'") == value
        assert "'" not in quoted[1:-1].replace("''", "")


class TestWildcardProperties:
    """LIKE pattern escaping."""

    @given(pattern=st.text(alphabet="ab%_\\*?", max_size=12))
    @STANDARD_SETTINGS
    def test_escape_flag_matches_literal_specials(self, pattern: str) -> None:
        _, escaped = translate_wildcard(pattern)

        assert escaped == any(ch in pattern for ch in "%_\\")

    @given(pattern=st.text(alphabet="abc*?", max_size=12))
    @STANDARD_SETTINGS
    def test_plain_wildcards_map_one_to_one(self, pattern: str) -> None:
        like, escaped = translate_wildcard(pattern)

        assert not escaped
        assert like == pattern.replace("*", "%").replace("?", "_")
