# src/knimesql/translators/concatenate.py
"""Concatenate node -> ``UNION ALL`` over every upstream table."""

from __future__ import annotations

from knimesql.contracts import Arity, ConfigTree, PredecessorContext, TranslationResult
from knimesql.core.tree import find_child, find_leaf, get_bool
from knimesql.translators.base import BaseTranslator, TranslatorContext, WarningCollector
from knimesql.translators.sql import quote_identifier, with_comments

MIN_PREDECESSORS = 2


def output_columns(contexts: tuple[PredecessorContext, ...], *, intersection: bool) -> list[str]:
    """Intersection or union of the exposed columns, sorted."""
    column_sets = [context.exposed_columns for context in contexts]
    if intersection:
        combined = frozenset.intersection(*column_sets)
    else:
        combined = frozenset().union(*column_sets)
    return sorted(combined)


def _select_part(context: PredecessorContext, columns: list[str]) -> str:
    table = quote_identifier(context.alias)
    select_list = [
        f"{table}.{quote_identifier(column)}" if column in context.exposed_columns else f"NULL AS {quote_identifier(column)}"
        for column in columns
    ]
    return f"SELECT {', '.join(select_list)} FROM {table}"


class ConcatenateTranslator(BaseTranslator):
    """Translate a Concatenate into ``UNION ALL``.

    Each upstream table contributes one SELECT over the combined columns,
    with ``NULL AS <col>`` for columns it lacks. Column types are not
    reconciled across inputs.
    """

    name = "Concatenate"
    factory = "org.knime.base.node.preproc.append.row.AppendedRowsNodeFactory"
    arity = Arity.NARY

    def _translate(
        self,
        settings: ConfigTree,
        context: TranslatorContext,
        warnings: WarningCollector,
    ) -> TranslationResult:
        contexts = context if isinstance(context, tuple) else ()
        if len(contexts) < MIN_PREDECESSORS:
            return TranslationResult.error(
                f"Concatenate node requires at least two predecessors, but found {len(contexts)}."
            )
        for index, predecessor in enumerate(contexts):
            if not predecessor.alias:
                return TranslationResult.error(f"Invalid predecessor context at index {index}: empty alias.")

        model = find_child(settings, "model")
        if model is None:
            warnings.add("Model node not found; reading concatenation settings from the root entries")
        options = model if model is not None else settings

        intersection = get_bool(options, "intersection_of_columns") is True
        comments = [
            "Concatenate Node Conversion (using UNION ALL)",
            "Mode: Intersection of columns" if intersection else "Mode: Union of columns (default)",
        ]
        if find_leaf(options, "fail_on_duplicates") is not None or find_leaf(options, "append_suffix") is not None:
            comments.append(
                "Note: KNIME options 'fail_on_duplicates' and 'append_suffix' for column names are not "
                "directly translated. SQL UNION ALL requires columns in SELECT lists to align; "
                "column types are not reconciled."
            )

        columns = output_columns(contexts, intersection=intersection)
        if not columns:
            if intersection:
                return TranslationResult.error(
                    "Intersection of columns resulted in an empty column set.", warnings=warnings.messages
                )
            return TranslationResult.error("No columns determined for the output.", warnings=warnings.messages)

        body = "\nUNION ALL\n".join(_select_part(predecessor, columns) for predecessor in contexts)
        return TranslationResult.success(with_comments(comments, f"{body};"), warnings=warnings.messages)
