# src/knimesql/translators/sorter.py
"""Sorter node -> ``SELECT * ... ORDER BY``."""

from __future__ import annotations

from knimesql.contracts import ConfigNode, ConfigTree, PredecessorContext, TranslationResult
from knimesql.core.tree import find_child, get_bool, get_indexed_nodes, get_text
from knimesql.translators.base import UnaryTranslator, WarningCollector
from knimesql.translators.sql import quote_identifier, select_from, with_comments

SORT_DIRECTIONS: dict[str, str] = {
    "ASCENDING": "ASC",
    "DESCENDING": "DESC",
}

ALPHANUMERIC = "ALPHANUMERIC"


class SorterTranslator(UnaryTranslator):
    """Translate a Sorter into an ORDER BY clause.

    KNIME stores one ``missingToEnd`` flag for the whole node, so every
    criterion gets the same NULLS FIRST/LAST. Alphanumeric ("natural")
    string comparison has no portable SQL form and is flagged with a comment.
    """

    name = "Sorter"
    factory = "org.knime.base.node.preproc.sorter.SorterNodeFactory"

    def _translate_unary(
        self,
        settings: ConfigTree,
        source: PredecessorContext,
        warnings: WarningCollector,
    ) -> TranslationResult:
        model = find_child(settings, "model")
        if model is None:
            return TranslationResult.error("Model configuration not found or invalid.")

        passthrough = f"{select_from(source.alias)};"
        criteria = find_child(model, "sortingCriteria")
        if criteria is None:
            warnings.add("Sorter node has no sorting criteria defined; outputting data as is")
            return TranslationResult.success(
                with_comments(["Warning: No sorting criteria found"], passthrough),
                warnings=warnings.messages,
            )

        nulls = "NULLS LAST" if get_bool(model, "missingToEnd") is True else "NULLS FIRST"
        order_by: list[str] = []
        notes: list[str] = []
        for index, criterion in enumerate(get_indexed_nodes(criteria)):
            term = self._order_term(index, criterion, nulls, warnings)
            if term is None:
                continue
            order_by.append(term)
            if get_text(criterion, "stringComparison") == ALPHANUMERIC:
                column = get_text(find_child(criterion, "column"), "selected")
                notes.append(
                    f"Note: Alphanumeric string comparison requested for {column}. "
                    "Standard ORDER BY used; verify behavior with DB."
                )

        if not order_by:
            warnings.add("Sorter criteria found, but none were valid; outputting data as is")
            return TranslationResult.success(
                with_comments(["Warning: No valid sorting criteria processed"], passthrough),
                warnings=warnings.messages,
            )

        sql = f"{select_from(source.alias)} ORDER BY {', '.join(order_by)};"
        if notes:
            sql = with_comments(notes, sql)
        return TranslationResult.success(sql, warnings=warnings.messages)

    def _order_term(self, index: int, criterion: ConfigNode, nulls: str, warnings: WarningCollector) -> str | None:
        column = get_text(find_child(criterion, "column"), "selected")
        order = get_text(criterion, "sortingOrder")
        if not column or not order:
            warnings.add(f"Skipping incomplete sorting criterion {index}", criterion=index)
            return None
        direction = SORT_DIRECTIONS.get(order.strip().upper())
        if direction is None:
            warnings.add(
                f"Skipping sorting criterion {index} on {column!r}: unknown sorting order {order!r}",
                criterion=index,
                column=column,
            )
            return None
        return f"{quote_identifier(column)} {direction} {nulls}"
