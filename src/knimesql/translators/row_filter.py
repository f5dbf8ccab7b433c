# src/knimesql/translators/row_filter.py
"""Row Filter node -> ``SELECT * ... WHERE``."""

from __future__ import annotations

from dataclasses import dataclass

from knimesql.contracts import ConfigNode, ConfigTree, PredecessorContext, TranslationResult
from knimesql.core.tree import find_child, find_leaf, find_path, get_bool, get_indexed_nodes, get_text
from knimesql.translators.base import UnaryTranslator, WarningCollector
from knimesql.translators.sql import (
    LIKE_ESCAPE_CHAR,
    is_numeric_literal,
    quote_identifier,
    quote_literal,
    select_from,
    translate_wildcard,
    with_comments,
)

# KNIME comparison operator -> SQL operator. Aliases cover the spellings
# used by different Row Filter versions.
OPERATOR_MAP: dict[str, str] = {
    "EQ": "=",
    "NEQ": "!=",
    "LT": "<",
    "LE": "<=",
    "LTE": "<=",
    "GT": ">",
    "GE": ">=",
    "GTE": ">=",
    "LIKE": "LIKE",
    "WILDCARD": "LIKE",
    "REGEX": "REGEXP",
    "IS_MISSING": "IS NULL",
    "IS_NOT_MISSING": "IS NOT NULL",
}

_NULL_TESTS = frozenset({"IS NULL", "IS NOT NULL"})
_CASE_FOLDABLE = frozenset({"=", "!=", "LIKE", "REGEXP"})
_COMBINATORS = frozenset({"AND", "OR"})

EXCLUDE_OUTPUT_MODE = "NON_MATCHING"
CASE_SENSITIVE = "CASESENSITIVE"


@dataclass(frozen=True, slots=True)
class _TypedValue:
    value: str | None
    cell_class: str
    is_null: bool
    case_sensitive: bool


def _read_value(predicate: ConfigNode) -> _TypedValue | None:
    """Read ``predicateValues/values/0`` of a predicate, or None if absent."""
    value_node = find_child(find_path(predicate, "predicateValues", "values"), "0")
    if value_node is None:
        return None
    type_identifier = find_child(value_node, "typeIdentifier")
    case_matching = get_text(find_child(value_node, "stringCaseMatching"), "caseMatching")
    value_leaf = find_leaf(value_node, "value")
    return _TypedValue(
        value=None if value_leaf is None or value_leaf.is_null else value_leaf.value,
        cell_class=get_text(type_identifier, "cell_class"),
        is_null=get_bool(type_identifier, "is_null") is True,
        case_sensitive=case_matching == CASE_SENSITIVE,
    )


class RowFilterTranslator(UnaryTranslator):
    """Translate a Row Filter into a WHERE clause.

    Each predicate becomes ``<column> <op> <literal>``; predicates are joined
    with the configured AND/OR and the whole clause is negated when the node
    outputs non-matching rows. Predicates that cannot be read are dropped
    with a warning. When none survive, the input passes through unchanged.
    """

    name = "Row Filter"
    factory = "org.knime.base.node.preproc.filter.row3.RowFilterNodeFactory"

    def _translate_unary(
        self,
        settings: ConfigTree,
        source: PredecessorContext,
        warnings: WarningCollector,
    ) -> TranslationResult:
        model = find_child(settings, "model")
        if model is None:
            return TranslationResult.error("Model configuration not found.")

        output_mode = get_text(model, "outputMode")
        match_criteria = get_text(model, "matchCriteria")
        predicates = find_child(model, "predicates")
        if not output_mode or not match_criteria or predicates is None:
            return TranslationResult.error("Essential filtering parameters (outputMode, matchCriteria, predicates) not found.")

        combinator = match_criteria.strip().upper()
        if combinator not in _COMBINATORS:
            return TranslationResult.error(f"Unsupported matchCriteria {match_criteria!r}; expected AND or OR.")

        conditions = [
            condition
            for index, predicate in enumerate(get_indexed_nodes(predicates))
            if (condition := self._condition(index, predicate, warnings)) is not None
        ]

        if not conditions:
            warnings.add("No valid filter conditions generated from predicates")
            return TranslationResult.success(
                with_comments(["Warning: No valid filter conditions generated or applied"], f"{select_from(source.alias)};"),
                warnings=warnings.messages,
            )

        clause = f" {combinator} ".join(conditions)
        if output_mode == EXCLUDE_OUTPUT_MODE:
            clause = f"NOT ({clause})"

        return TranslationResult.success(f"{select_from(source.alias)} WHERE {clause};", warnings=warnings.messages)

    def _condition(self, index: int, predicate: ConfigNode, warnings: WarningCollector) -> str | None:
        """Render one predicate, or None (with a warning) when it must be dropped."""
        column = get_text(find_child(predicate, "column"), "selected")
        knime_operator = get_text(predicate, "operator")
        if not column or not knime_operator:
            warnings.add(f"Skipping predicate {index}: missing column or operator", predicate=index)
            return None

        sql_operator = OPERATOR_MAP.get(knime_operator)
        if sql_operator is None:
            warnings.add(
                f"Skipping predicate {index}: unsupported operator {knime_operator!r}",
                predicate=index,
                operator=knime_operator,
            )
            return None

        quoted_column = quote_identifier(column)
        if sql_operator in _NULL_TESTS:
            return f"{quoted_column} {sql_operator}"

        typed = _read_value(predicate)
        if typed is None:
            warnings.add(f"Skipping predicate {index} on {column!r}: no value configured", predicate=index, column=column)
            return None
        if typed.is_null:
            return f"{quoted_column} IS NULL"
        if typed.value is None:
            warnings.add(f"Skipping predicate {index} on {column!r}: value is missing", predicate=index, column=column)
            return None

        is_string_type = "StringCell" in typed.cell_class
        needs_quotes = is_string_type or not is_numeric_literal(typed.value)

        escaped = False
        if sql_operator == "LIKE":
            pattern, escaped = translate_wildcard(typed.value)
            literal = quote_literal(pattern)
        elif sql_operator == "REGEXP" or needs_quotes:
            literal = quote_literal(typed.value)
        else:
            literal = typed.value.strip()

        if needs_quotes and not typed.case_sensitive and sql_operator in _CASE_FOLDABLE:
            condition = f"LOWER({quoted_column}) {sql_operator} LOWER({literal})"
        else:
            condition = f"{quoted_column} {sql_operator} {literal}"

        if escaped:
            condition += f" ESCAPE {quote_literal(LIKE_ESCAPE_CHAR)}"
        return condition
