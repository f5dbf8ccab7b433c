"""Tests for the Concatenate translator."""

import pytest

from knimesql.contracts import PredecessorContext
from knimesql.translators.concatenate import ConcatenateTranslator
from tests.helpers.knime import concatenate, flag


@pytest.fixture
def translator() -> ConcatenateTranslator:
    return ConcatenateTranslator()


def _ctx(alias: str, *columns: str) -> PredecessorContext:
    return PredecessorContext.of(alias, columns)


class TestConcatenateUnion:
    """Union of columns (default)."""

    def test_union_fills_missing_columns_with_null(self, translator: ConcatenateTranslator) -> None:
        result = translator.translate(concatenate(), [_ctx("p1", "a", "b"), _ctx("p2", "b", "c")])

        assert result.status == "success"
        statement = result.text.split("\n", 2)[2]
        assert statement == (
            'SELECT "p1"."a", "p1"."b", NULL AS "c" FROM "p1"\n'
            "UNION ALL\n"
            'SELECT NULL AS "a", "p2"."b", "p2"."c" FROM "p2";'
        )

    def test_header_comments_record_mode(self, translator: ConcatenateTranslator) -> None:
        text = translator.translate(concatenate(), [_ctx("p1", "a"), _ctx("p2", "a")]).text

        assert text.startswith("-- Concatenate Node Conversion (using UNION ALL)\n-- Mode: Union of columns (default)\n")

    def test_three_inputs(self, translator: ConcatenateTranslator) -> None:
        text = translator.translate(concatenate(), [_ctx("x", "a"), _ctx("y", "a"), _ctx("z", "a")]).text

        assert text.count("UNION ALL\n") == 2

    def test_settings_read_from_root_without_model(self, translator: ConcatenateTranslator) -> None:
        result = translator.translate(
            concatenate(intersection=True, in_model=False),
            [_ctx("p1", "a", "b"), _ctx("p2", "b")],
        )

        assert "Mode: Intersection of columns" in result.text
        assert "Model node not found" in result.warnings[0]


class TestConcatenateIntersection:
    """Intersection of columns."""

    def test_intersection_keeps_common_columns(self, translator: ConcatenateTranslator) -> None:
        text = translator.translate(concatenate(intersection=True), [_ctx("p1", "a", "b"), _ctx("p2", "b", "c")]).text

        assert text.endswith('SELECT "p1"."b" FROM "p1"\nUNION ALL\nSELECT "p2"."b" FROM "p2";')

    def test_empty_intersection_is_error(self, translator: ConcatenateTranslator) -> None:
        result = translator.translate(concatenate(intersection=True), [_ctx("p1", "a"), _ctx("p2", "b")])

        assert result.text == "Error: Intersection of columns resulted in an empty column set."

    def test_unknown_columns_give_empty_union_error(self, translator: ConcatenateTranslator) -> None:
        result = translator.translate(concatenate(), [_ctx("p1"), _ctx("p2")])

        assert result.text == "Error: No columns determined for the output."


class TestConcatenatePredecessors:
    """Input validation."""

    @pytest.mark.parametrize("count", [0, 1])
    def test_fewer_than_two_inputs_is_error(self, translator: ConcatenateTranslator, count: int) -> None:
        contexts = [_ctx(f"p{i}", "a") for i in range(count)]

        result = translator.translate(concatenate(), contexts)

        assert result.text == f"Error: Concatenate node requires at least two predecessors, but found {count}."

    def test_bare_alias_counts_as_one_input(self, translator: ConcatenateTranslator) -> None:
        assert "found 1" in translator.translate(concatenate(), "only").text

    def test_empty_alias_is_error(self, translator: ConcatenateTranslator) -> None:
        result = translator.translate(concatenate(), [_ctx("p1", "a"), _ctx("", "a")])

        assert result.text == "Error: Invalid predecessor context at index 1: empty alias."

    def test_duplicate_handling_options_noted(self, translator: ConcatenateTranslator) -> None:
        settings = concatenate(extra=[flag("fail_on_duplicates", False), flag("append_suffix", True)])

        text = translator.translate(settings, [_ctx("p1", "a"), _ctx("p2", "a")]).text

        assert "fail_on_duplicates" in text
        assert "column types are not reconciled" in text
        assert text.endswith(";")
