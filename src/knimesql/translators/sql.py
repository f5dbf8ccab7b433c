# src/knimesql/translators/sql.py
"""SQL text helpers shared by the translators.

Identifiers are double-quoted with embedded ``"`` doubled; string literals
are single-quoted with embedded ``'`` doubled. Everything else targets
standard SQL; dialect-specific spots are flagged with comments in the
generated text rather than resolved here.
"""

import re

_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_UNSAFE_ALIAS_CHARS = re.compile(r"[^A-Za-z0-9_]")

LIKE_ESCAPE_CHAR = "\\"


def quote_identifier(name: str) -> str:
    """``a"b`` -> ``"a""b"``."""
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """``it's`` -> ``'it''s'``."""
    return "'" + value.replace("'", "''") + "'"


def is_numeric_literal(value: str) -> bool:
    """True if ``value`` can be emitted unquoted as a SQL number.

    Stricter than float(): ``nan``, ``inf`` and ``1_000`` are not SQL numbers.
    """
    return _NUMBER_PATTERN.fullmatch(value.strip()) is not None


def safe_alias_part(text: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_]`` with ``_``."""
    return _UNSAFE_ALIAS_CHARS.sub("_", text)


def translate_wildcard(pattern: str) -> tuple[str, bool]:
    """Translate a KNIME wildcard pattern into a LIKE pattern.

    ``*`` -> ``%`` and ``?`` -> ``_``. Literal ``%``, ``_`` and the escape
    character itself are escaped first.

    Returns:
        (like_pattern, escaped) where ``escaped`` tells whether an
        ``ESCAPE`` clause is needed.
    """
    escaped = pattern.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
    escaped = escaped.replace("%", LIKE_ESCAPE_CHAR + "%").replace("_", LIKE_ESCAPE_CHAR + "_")
    needs_escape = escaped != pattern
    return escaped.replace("*", "%").replace("?", "_"), needs_escape


def select_from(alias: str, columns: list[str] | None = None) -> str:
    """``SELECT <cols> FROM "<alias>"`` with ``*`` when no columns are given."""
    projection = ", ".join(quote_identifier(c) for c in columns) if columns else "*"
    return f"SELECT {projection} FROM {quote_identifier(alias)}"


def with_comments(comments: list[str], statement: str) -> str:
    """Prefix a statement with ``-- `` comment lines, keeping ``;`` last."""
    # Column names can contain newlines; a comment must stay on one line.
    lines = [f"-- {' '.join(comment.splitlines())}" for comment in comments]
    lines.append(statement)
    return "\n".join(lines)
