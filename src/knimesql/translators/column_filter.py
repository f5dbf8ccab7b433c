# src/knimesql/translators/column_filter.py
"""Column Filter node -> projection."""

from __future__ import annotations

from knimesql.contracts import ConfigTree, PredecessorContext, TranslationResult
from knimesql.core.tree import find_child, find_path, get_indexed_values, get_text
from knimesql.translators.base import UnaryTranslator, WarningCollector
from knimesql.translators.sql import select_from, with_comments

ENFORCE_INCLUSION = "EnforceInclusion"
ENFORCE_EXCLUSION = "EnforceExclusion"


class ColumnFilterTranslator(UnaryTranslator):
    """Translate a Column Filter into a SELECT list.

    With ``EnforceInclusion`` (KNIME's default) the included names are
    projected in their configured order. With ``EnforceExclusion`` the
    projection is the upstream columns minus the excluded names, which
    requires the upstream columns to be known.
    """

    name = "Column Filter"
    factory = "org.knime.base.node.preproc.filter.column.DataColumnSpecFilterNodeFactory"

    def _translate_unary(
        self,
        settings: ConfigTree,
        source: PredecessorContext,
        warnings: WarningCollector,
    ) -> TranslationResult:
        column_filter = find_path(settings, "model", "column-filter")
        if column_filter is None:
            return TranslationResult.error("Column filter configuration not found.")

        included = get_indexed_values(find_child(column_filter, "included_names"))
        excluded = get_indexed_values(find_child(column_filter, "excluded_names"))
        enforce = get_text(column_filter, "enforce_option", ENFORCE_INCLUSION)

        if enforce == ENFORCE_EXCLUSION:
            if not excluded and not source.exposed_columns:
                return TranslationResult.success(f"{select_from(source.alias)};")
            if not source.exposed_columns:
                warnings.add("Upstream columns unknown; cannot apply exclusion list", excluded=len(excluded))
                return TranslationResult.success(
                    with_comments(
                        [f"Warning: Upstream columns unknown; excluded columns not removed: {', '.join(excluded)}"],
                        f"{select_from(source.alias)};",
                    ),
                    warnings=warnings.messages,
                )
            columns = sorted(source.exposed_columns - set(excluded))
        else:
            if enforce != ENFORCE_INCLUSION:
                warnings.add(f"Unknown enforce option {enforce!r}; using the include list", enforce_option=enforce)
            # Keep configured order, drop repeats
            columns = list(dict.fromkeys(included))

        if not columns:
            return TranslationResult.error("Column filter removes every column.", warnings=warnings.messages)
        return TranslationResult.success(f"{select_from(source.alias, columns)};", warnings=warnings.messages)
