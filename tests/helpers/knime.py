# tests/helpers/knime.py
"""Builders for KNIME-shaped settings trees.

    row_filter(predicates=[predicate("colA", "EQ", "5", cell_class=INT_CELL)])

returns the children of a settings.xml root config, ready for translate().
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from knimesql.contracts import ConfigElement, ConfigLeaf, ConfigNode, ConfigTree

ROW_FILTER = "org.knime.base.node.preproc.filter.row3.RowFilterNodeFactory"
GROUP_BY = "org.knime.base.node.preproc.groupby.GroupByNodeFactory"
SORTER = "org.knime.base.node.preproc.sorter.SorterNodeFactory"
CONCATENATE = "org.knime.base.node.preproc.append.row.AppendedRowsNodeFactory"
COLUMN_FILTER = "org.knime.base.node.preproc.filter.column.DataColumnSpecFilterNodeFactory"
CSV_READER = "org.knime.base.node.io.filehandling.csv.reader.CSVTableReaderNodeFactory"

STRING_CELL = "org.knime.core.data.def.StringCell"
INT_CELL = "org.knime.core.data.def.IntCell"
DOUBLE_CELL = "org.knime.core.data.def.DoubleCell"


def leaf(key: str, value: str | None, type_tag: str | None = "xstring") -> ConfigLeaf:
    if value is None:
        return ConfigLeaf(key=key, value=None, type_tag=type_tag, is_null=True)
    return ConfigLeaf(key=key, value=value, type_tag=type_tag)


def flag(key: str, value: bool) -> ConfigLeaf:
    return ConfigLeaf(key=key, value="true" if value else "false", type_tag="xboolean")


def node(key: str, *children: ConfigElement) -> ConfigNode:
    return ConfigNode(key=key, children=tuple(children))


def string_array(key: str, values: Iterable[str | None]) -> ConfigNode:
    """KNIME string array: ``array-size`` plus entries keyed "0", "1", ..."""
    items = list(values)
    return node(key, leaf("array-size", str(len(items)), "xint"), *(leaf(str(i), v) for i, v in enumerate(items)))


def settings_tree(factory: str | None, *children: ConfigElement, name: str | None = None) -> ConfigTree:
    head: list[ConfigElement] = []
    if factory is not None:
        head.append(leaf("factory", factory))
    if name is not None:
        head.append(leaf("name", name))
    return (*head, *children)


# === Row Filter ===


def predicate(
    column: str | None,
    operator: str | None,
    value: str | None = None,
    *,
    cell_class: str = STRING_CELL,
    case_matching: str | None = None,
    is_null: bool = False,
    with_value: bool = True,
) -> ConfigNode:
    children: list[ConfigElement] = []
    if column is not None:
        children.append(node("column", leaf("selected", column)))
    if operator is not None:
        children.append(leaf("operator", operator))
    if with_value:
        value_children: list[ConfigElement] = [
            node("typeIdentifier", leaf("cell_class", cell_class), flag("is_null", is_null)),
            leaf("value", value),
        ]
        if case_matching is not None:
            value_children.append(node("stringCaseMatching", leaf("caseMatching", case_matching)))
        children.append(node("predicateValues", node("values", node("0", *value_children))))
    return node("", *children)


def row_filter(
    predicates: Sequence[ConfigNode],
    *,
    match_criteria: str = "AND",
    output_mode: str = "MATCHING",
    factory: str = ROW_FILTER,
) -> ConfigTree:
    indexed = [ConfigNode(key=str(i), children=p.children) for i, p in enumerate(predicates)]
    return settings_tree(
        factory,
        node(
            "model",
            leaf("outputMode", output_mode),
            leaf("matchCriteria", match_criteria),
            node("predicates", *indexed),
        ),
    )


# === GroupBy ===


def group_by(
    grouping: Sequence[str],
    aggregations: Sequence[tuple[str, str]] = (),
    *,
    policy: str | None = "Aggregation method (column name)",
    delimiter: str | None = None,
    columns: Sequence[str | None] | None = None,
    methods: Sequence[str | None] | None = None,
) -> ConfigTree:
    """``aggregations`` is (column, method) pairs; pass columns/methods to misalign them."""
    agg_columns: list[str | None] = list(columns) if columns is not None else [c for c, _ in aggregations]
    agg_methods: list[str | None] = list(methods) if methods is not None else [m for _, m in aggregations]
    model: list[ConfigElement] = [
        node("grouByColumns", string_array("InclList", grouping)),
        node(
            "aggregationColumn",
            string_array("columnNames", agg_columns),
            string_array("aggregationMethod", agg_methods),
        ),
    ]
    if policy is not None:
        model.append(leaf("columnNamePolicy", policy))
    if delimiter is not None:
        model.append(leaf("valueDelimiter", delimiter))
    return settings_tree(GROUP_BY, node("model", *model))


# === Sorter ===


def criterion(column: str | None, order: str | None, comparison: str = "NATURAL", *, index: int = 0) -> ConfigNode:
    children: list[ConfigElement] = []
    if column is not None:
        children.append(node("column", leaf("selected", column)))
    if order is not None:
        children.append(leaf("sortingOrder", order))
    children.append(leaf("stringComparison", comparison))
    return node(str(index), *children)


def sorter(criteria: Sequence[ConfigNode] | None, *, missing_to_end: bool = False) -> ConfigTree:
    model: list[ConfigElement] = [flag("missingToEnd", missing_to_end)]
    if criteria is not None:
        indexed = [ConfigNode(key=str(i), children=c.children) for i, c in enumerate(criteria)]
        model.append(node("sortingCriteria", leaf("array-size", str(len(indexed)), "xint"), *indexed))
    return settings_tree(SORTER, node("model", *model))


# === Concatenate ===


def concatenate(*, intersection: bool = False, extra: Sequence[ConfigElement] = (), in_model: bool = True) -> ConfigTree:
    options = [flag("intersection_of_columns", intersection), *extra]
    if in_model:
        return settings_tree(CONCATENATE, node("model", *options))
    return settings_tree(CONCATENATE, *options)


# === Column Filter ===


def column_filter(
    included: Sequence[str] = (),
    excluded: Sequence[str] = (),
    *,
    enforce: str = "EnforceInclusion",
) -> ConfigTree:
    return settings_tree(
        COLUMN_FILTER,
        node(
            "model",
            node(
                "column-filter",
                leaf("filter-type", "STANDARD"),
                string_array("included_names", included),
                string_array("excluded_names", excluded),
                leaf("enforce_option", enforce),
            ),
        ),
    )


# === CSV Reader ===


def csv_reader(path: str | None, columns: Sequence[str] | None = None) -> ConfigTree:
    model: list[ConfigElement] = []
    if path is not None:
        model.append(
            node(
                "settings",
                node(
                    "file_selection",
                    node("path", leaf("location_present", "true", "xboolean"), leaf("file_system_type", "LOCAL"), leaf("path", path)),
                ),
            )
        )
    if columns is not None:
        specs = [node(str(i), leaf("name", name), node("type", leaf("cell_class", STRING_CELL))) for i, name in enumerate(columns)]
        model.append(
            node(
                "table_spec_config_Internals",
                leaf("source_id", path or ""),
                node("individual_specs_Internals", node("individual_spec_0", leaf("path", path or ""), *specs)),
            )
        )
    return settings_tree(CSV_READER, node("model", *model))


# === Workflow descriptor ===


def descriptor(nodes: Sequence[tuple[int, str]], connections: Sequence[tuple[int, int]] = ()) -> ConfigTree:
    """``nodes`` is (id, folder) pairs; ``connections`` is (source, dest) pairs."""
    return (
        node(
            "nodes",
            *(
                node(f"node_{node_id}", leaf("id", str(node_id), "xint"), leaf("node_settings_file", f"{folder}/settings.xml"))
                for node_id, folder in nodes
            ),
        ),
        node(
            "connections",
            *(
                node(
                    f"connection_{i}",
                    leaf("sourceID", str(source), "xint"),
                    leaf("destID", str(dest), "xint"),
                    leaf("sourcePort", "1", "xint"),
                    leaf("destPort", "1", "xint"),
                )
                for i, (source, dest) in enumerate(connections)
            ),
        ),
    )
