# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategies produce KNIME-shaped settings trees, including messy ones
(missing fields, odd operators, hostile column names), for the translators.

Usage:
    from tests.property.conftest import row_filter_settings

    @given(settings=row_filter_settings)
    def test_something(settings: ConfigTree) -> None:
        ...
"""

from __future__ import annotations

from hypothesis import strategies as st

from knimesql.contracts import PredecessorContext
from tests.helpers.knime import (
    DOUBLE_CELL,
    INT_CELL,
    STRING_CELL,
    column_filter,
    concatenate,
    criterion,
    group_by,
    predicate,
    row_filter,
    sorter,
)

# Column names with quotes, spaces, wildcards and newlines
column_names = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="\x00"),
    min_size=1,
    max_size=12,
)

aliases = st.text(min_size=1, max_size=12).filter(lambda s: "\x00" not in s)

operators = st.sampled_from(
    ["EQ", "NEQ", "LT", "LE", "GT", "GE", "LIKE", "WILDCARD", "REGEX", "IS_MISSING", "IS_NOT_MISSING", "BOGUS"]
)

values = st.one_of(st.none(), st.text(max_size=10), st.integers().map(str), st.floats(allow_nan=False).map(repr))

predicates = st.builds(
    predicate,
    st.one_of(st.none(), column_names),
    st.one_of(st.none(), operators),
    values,
    cell_class=st.sampled_from([STRING_CELL, INT_CELL, DOUBLE_CELL]),
    case_matching=st.sampled_from([None, "CASESENSITIVE", "CASEINSENSITIVE"]),
    is_null=st.booleans(),
    with_value=st.booleans(),
)

row_filter_settings = st.builds(
    row_filter,
    st.lists(predicates, max_size=5),
    match_criteria=st.sampled_from(["AND", "OR"]),
    output_mode=st.sampled_from(["MATCHING", "NON_MATCHING"]),
)

group_by_settings = st.builds(
    group_by,
    st.lists(column_names, max_size=3),
    st.lists(
        st.tuples(
            column_names,
            st.sampled_from(["Sum", "Count", "Mean", "Concatenate", "Unique count", "Median", "Sum_V2.5.2"]),
        ),
        max_size=4,
    ),
    policy=st.sampled_from(
        [None, "Aggregation method (column name)", "Column name (aggregation method)", "Keep original name(s)", "odd"]
    ),
)

sorter_settings = st.builds(
    sorter,
    st.one_of(
        st.none(),
        st.lists(
            st.builds(
                criterion,
                st.one_of(st.none(), column_names),
                st.sampled_from([None, "ASCENDING", "DESCENDING", "UP"]),
                st.sampled_from(["NATURAL", "ALPHANUMERIC"]),
            ),
            max_size=4,
        ),
    ),
    missing_to_end=st.booleans(),
)

column_filter_settings = st.builds(
    column_filter,
    st.lists(column_names, max_size=4),
    st.lists(column_names, max_size=4),
    enforce=st.sampled_from(["EnforceInclusion", "EnforceExclusion"]),
)

concatenate_settings = st.builds(concatenate, intersection=st.booleans())

contexts = st.builds(PredecessorContext.of, aliases, st.lists(column_names, max_size=4))
