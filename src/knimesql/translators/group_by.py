# src/knimesql/translators/group_by.py
"""GroupBy node -> ``SELECT ... GROUP BY`` (or ``SELECT DISTINCT``)."""

from __future__ import annotations

import re
from enum import StrEnum

from knimesql.contracts import ConfigTree, PredecessorContext, TranslationResult
from knimesql.core.tree import find_child, find_path, get_indexed_slots, get_indexed_values, get_text
from knimesql.translators.base import UnaryTranslator, WarningCollector
from knimesql.translators.sql import quote_identifier, quote_literal, safe_alias_part, with_comments

COLUMN_PLACEHOLDER = "$$col$$"

# KNIME aggregation method -> SQL aggregate name, or a template with
# COLUMN_PLACEHOLDER. Median and Mode need window functions and are not mapped.
AGGREGATION_MAP: dict[str, str] = {
    "Sum": "SUM",
    "Count": "COUNT",
    "Mean": "AVG",
    "Average": "AVG",
    "Minimum": "MIN",
    "Maximum": "MAX",
    "StandardDeviation": "STDDEV_SAMP",
    "Variance": "VAR_SAMP",
    # LISTAGG: Oracle, DB2, Snowflake, Redshift. STRING_AGG / GROUP_CONCAT elsewhere.
    "Concatenate": "LISTAGG",
    "List": "LISTAGG",
    # MIN/MAX approximate first/last of an unordered group
    "First": "MIN",
    "Last": "MAX",
    "Unique count": f"COUNT(DISTINCT {COLUMN_PLACEHOLDER})",
    "Missing value count": f"SUM(CASE WHEN {COLUMN_PLACEHOLDER} IS NULL THEN 1 ELSE 0 END)",
}

_LIST_METHODS = frozenset({"Concatenate", "List"})
_VERSION_SUFFIX = re.compile(r"_V\d+(?:\.\d+)*$")

DEFAULT_VALUE_DELIMITER = ", "


class ColumnNamePolicy(StrEnum):
    """How aggregation output columns are named. Values are KNIME's labels."""

    METHOD_COLUMN = "Aggregation method (column name)"
    COLUMN_METHOD = "Column name (aggregation method)"
    KEEP_ORIGINAL = "Keep original name(s)"


_POLICY_ALIASES: dict[str, ColumnNamePolicy] = {
    "method(column)": ColumnNamePolicy.METHOD_COLUMN,
    "column(method)": ColumnNamePolicy.COLUMN_METHOD,
    "keep original name": ColumnNamePolicy.KEEP_ORIGINAL,
    "original": ColumnNamePolicy.KEEP_ORIGINAL,
}


def normalize_method(method: str) -> str:
    """Strip KNIME's operator version suffix ("Sum_V2.5.2" -> "Sum")."""
    return _VERSION_SUFFIX.sub("", method.strip())


def parse_policy(raw: str, warnings: WarningCollector) -> ColumnNamePolicy:
    if not raw:
        return ColumnNamePolicy.METHOD_COLUMN
    try:
        return ColumnNamePolicy(raw)
    except ValueError:
        pass
    key = raw.strip().lower()
    alias = _POLICY_ALIASES.get(key) or _POLICY_ALIASES.get(key.replace(" ", ""))
    if alias is not None:
        return alias
    warnings.add(f"Unknown column name policy {raw!r}; keeping original names with a suffix", policy=raw)
    return ColumnNamePolicy.KEEP_ORIGINAL


def _alias(column: str, method: str, policy: ColumnNamePolicy) -> str:
    clean_column = safe_alias_part(column)
    clean_method = safe_alias_part(method)
    if policy is ColumnNamePolicy.METHOD_COLUMN:
        return f"{clean_method}_{clean_column}"
    if policy is ColumnNamePolicy.COLUMN_METHOD:
        return f"{clean_column}_{clean_method}"
    # Suffix keeps the aggregate from shadowing the input column
    return f"{clean_column}_agg"


def _unique(alias: str, used: set[str]) -> str:
    candidate = alias
    suffix = 2
    while candidate in used:
        candidate = f"{alias}_{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


class GroupByTranslator(UnaryTranslator):
    """Translate a GroupBy into an aggregate query.

    Aggregation column names and methods are zipped positionally; if their
    lengths differ only the common prefix is used. A pair with a missing
    column or method, and a pair with an unmapped method, is dropped with a
    warning; the pairs after it keep their positions.
    """

    name = "GroupBy"
    factory = "org.knime.base.node.preproc.groupby.GroupByNodeFactory"

    def _translate_unary(
        self,
        settings: ConfigTree,
        source: PredecessorContext,
        warnings: WarningCollector,
    ) -> TranslationResult:
        model = find_child(settings, "model")
        if model is None:
            return TranslationResult.error("Model configuration not found or invalid.")

        # "grouByColumns" is KNIME's spelling
        grouping_columns = get_indexed_values(find_path(model, "grouByColumns", "InclList"))
        if not grouping_columns:
            warnings.add("No grouping columns specified; aggregating the entire table")

        aggregation = find_child(model, "aggregationColumn")
        column_names = get_indexed_slots(find_child(aggregation, "columnNames"))
        methods = get_indexed_slots(find_child(aggregation, "aggregationMethod"))
        if len(column_names) != len(methods):
            warnings.add(
                "Mismatch between aggregation column names and methods count; using the common prefix",
                columns=len(column_names),
                methods=len(methods),
            )

        policy = parse_policy(get_text(model, "columnNamePolicy"), warnings)
        delimiter = get_text(model, "valueDelimiter") or DEFAULT_VALUE_DELIMITER

        used_aliases = set(grouping_columns)
        aggregations: list[str] = []
        notes: list[str] = []
        for position, (column, raw_method) in enumerate(zip(column_names, methods, strict=False)):
            if not column or not raw_method:
                warnings.add(f"Aggregation {position} has no column name or method; dropped", position=position)
                continue
            method = normalize_method(raw_method)
            template = AGGREGATION_MAP.get(method)
            if template is None:
                warnings.add(f"Unsupported aggregation method {raw_method!r} for {column!r}; dropped", method=raw_method, column=column)
                continue

            quoted = quote_identifier(column)
            if COLUMN_PLACEHOLDER in template:
                call = template.replace(COLUMN_PLACEHOLDER, quoted)
            elif method in _LIST_METHODS:
                call = f"{template}({quoted}, {quote_literal(delimiter)})"
                note = "LISTAGG is dialect-specific (STRING_AGG in PostgreSQL/SQL Server, GROUP_CONCAT in MySQL/SQLite)"
                if note not in notes:
                    notes.append(note)
            else:
                # Count counts the column's non-missing values, not rows
                call = f"{template}({quoted})"

            alias = _unique(_alias(column, method, policy), used_aliases)
            aggregations.append(f"{call} AS {quote_identifier(alias)}")

        quoted_grouping = [quote_identifier(c) for c in grouping_columns]
        from_clause = f"FROM {quote_identifier(source.alias)}"

        if not quoted_grouping and not aggregations:
            return TranslationResult.error(
                "GroupBy node has neither grouping columns nor successfully mapped aggregations.",
                warnings=warnings.messages,
            )

        if not aggregations:
            sql = f"SELECT DISTINCT {', '.join(quoted_grouping)} {from_clause};"
        else:
            sql = f"SELECT {', '.join([*quoted_grouping, *aggregations])} {from_clause}"
            if quoted_grouping:
                sql += f" GROUP BY {', '.join(quoted_grouping)}"
            sql += ";"

        if notes:
            sql = with_comments([f"Note: {note}" for note in notes], sql)
        return TranslationResult.success(sql, warnings=warnings.messages)
