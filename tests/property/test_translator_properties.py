"""Property-based tests for translator invariants.

- Every translator returns a result for any settings tree; nothing raises
- Successful SQL always ends with ';', diagnostics always start with 'Error: '
- Translating the same input twice gives byte-identical output
"""

from __future__ import annotations

import re

from hypothesis import given
from hypothesis import strategies as st

from knimesql.contracts import ConfigTree, PredecessorContext, TranslationResult
from knimesql.translators.column_filter import ColumnFilterTranslator
from knimesql.translators.concatenate import ConcatenateTranslator
from knimesql.translators.group_by import GroupByTranslator
from knimesql.translators.row_filter import RowFilterTranslator
from knimesql.translators.sorter import SorterTranslator
from tests.helpers.knime import concatenate
from tests.property.conftest import (
    aliases,
    column_filter_settings,
    concatenate_settings,
    contexts,
    group_by_settings,
    row_filter_settings,
    sorter_settings,
)
from tests.property.settings import DETERMINISM_SETTINGS, STANDARD_SETTINGS

# Aliases are built from [A-Za-z0-9_] only; quotes inside identifiers are doubled
ALIAS_PATTERN = re.compile(r' AS "([A-Za-z0-9_]+)"(?=, | FROM )')


def _assert_well_formed(result: TranslationResult) -> None:
    if result.status == "success":
        assert result.text.rstrip().endswith(";")
    else:
        assert result.text.startswith("Error: ")


class TestUnaryTranslatorProperties:
    """Row Filter, GroupBy, Sorter and Column Filter."""

    @given(settings=row_filter_settings, context=contexts)
    @STANDARD_SETTINGS
    def test_row_filter_well_formed(self, settings: ConfigTree, context: PredecessorContext) -> None:
        _assert_well_formed(RowFilterTranslator().translate(settings, context))

    @given(settings=group_by_settings, context=contexts)
    @STANDARD_SETTINGS
    def test_group_by_well_formed(self, settings: ConfigTree, context: PredecessorContext) -> None:
        _assert_well_formed(GroupByTranslator().translate(settings, context))

    @given(settings=sorter_settings, context=contexts)
    @STANDARD_SETTINGS
    def test_sorter_well_formed(self, settings: ConfigTree, context: PredecessorContext) -> None:
        _assert_well_formed(SorterTranslator().translate(settings, context))

    @given(settings=column_filter_settings, context=contexts)
    @STANDARD_SETTINGS
    def test_column_filter_well_formed(self, settings: ConfigTree, context: PredecessorContext) -> None:
        _assert_well_formed(ColumnFilterTranslator().translate(settings, context))

    @given(settings=row_filter_settings, alias=aliases)
    @DETERMINISM_SETTINGS
    def test_row_filter_idempotent(self, settings: ConfigTree, alias: str) -> None:
        assert RowFilterTranslator().translate(settings, alias) == RowFilterTranslator().translate(settings, alias)

    @given(settings=group_by_settings, alias=aliases)
    @DETERMINISM_SETTINGS
    def test_group_by_idempotent(self, settings: ConfigTree, alias: str) -> None:
        translator = GroupByTranslator()
        assert translator.translate(settings, alias) == translator.translate(settings, alias)

    @given(settings=group_by_settings, alias=aliases)
    @STANDARD_SETTINGS
    def test_group_by_aliases_unique(self, settings: ConfigTree, alias: str) -> None:
        result = GroupByTranslator().translate(settings, alias)
        if result.is_error:
            return
        found = ALIAS_PATTERN.findall(result.text.split("\n")[-1])
        assert len(found) == len(set(found))


class TestConcatenateProperties:
    """UNION ALL shape."""

    @given(settings=concatenate_settings, inputs=st.lists(contexts, max_size=4))
    @STANDARD_SETTINGS
    def test_well_formed(self, settings: ConfigTree, inputs: list[PredecessorContext]) -> None:
        _assert_well_formed(ConcatenateTranslator().translate(settings, inputs))

    @given(inputs=st.lists(contexts, min_size=2, max_size=4))
    @STANDARD_SETTINGS
    def test_one_select_per_input(self, inputs: list[PredecessorContext]) -> None:
        result = ConcatenateTranslator().translate(concatenate(), inputs)
        if result.is_error:
            return
        assert result.text.count("\nUNION ALL\n") == len(inputs) - 1
