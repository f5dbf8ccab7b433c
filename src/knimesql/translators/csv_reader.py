# src/knimesql/translators/csv_reader.py
"""CSV Reader node -> projection over the file's declared schema."""

from __future__ import annotations

from pathlib import PurePosixPath

from knimesql.contracts import Arity, ConfigLeaf, ConfigNode, ConfigTree, TranslationResult
from knimesql.core.tree import Elements, find_child, find_path, get_indexed_nodes, get_text
from knimesql.translators.base import BaseTranslator, TranslatorContext, WarningCollector
from knimesql.translators.sql import select_from, with_comments

SPEC_CONFIG_KEY = "table_spec_config_Internals"
FIRST_SPEC_KEY = "individual_spec_0"
FALLBACK_TABLE_NAME = "csv_input"


def _find_descendant(elements: Elements, key: str) -> ConfigNode | None:
    """Depth-first search for the first subtree keyed ``key``."""
    if elements is None:
        return None
    children = elements.children if isinstance(elements, ConfigNode) else elements
    for child in children:
        if isinstance(child, ConfigNode):
            if child.key == key:
                return child
            found = _find_descendant(child, key)
            if found is not None:
                return found
    return None


def _find_descendant_text(elements: Elements, key: str) -> str:
    """Depth-first search for the first non-empty leaf keyed ``key``."""
    if elements is None:
        return ""
    children = elements.children if isinstance(elements, ConfigNode) else elements
    for child in children:
        if isinstance(child, ConfigLeaf):
            if child.key == key and child.value:
                return child.value
        else:
            found = _find_descendant_text(child, key)
            if found:
                return found
    return ""


def read_file_path(model: ConfigNode) -> str:
    """The configured input file, or ``""`` when none is set."""
    path = get_text(find_path(model, "settings", "file_selection", "path"), "path")
    if path:
        return path
    return _find_descendant_text(model, "path") or _find_descendant_text(model, "url")


def read_declared_columns(model: ConfigNode) -> list[str]:
    """Column names of the first file's spec, in file order."""
    spec_config = find_child(model, SPEC_CONFIG_KEY) or _find_descendant(model, SPEC_CONFIG_KEY)
    first_spec = _find_descendant(spec_config, FIRST_SPEC_KEY)
    names = (get_text(column, "name") for column in get_indexed_nodes(first_spec))
    return [name for name in names if name]


def table_name_for(path: str) -> str:
    """``/data/sales 2024.csv`` -> ``sales 2024``."""
    stem = PurePosixPath(path.replace("\\", "/").rstrip("/")).stem
    return stem or FALLBACK_TABLE_NAME


class CsvReaderTranslator(BaseTranslator):
    """Translate a CSV Reader into a SELECT over a table named after the file.

    The reader has no upstream table; the file is assumed to be loaded into
    a table named after its stem. Without a stored schema it projects ``*``.
    """

    name = "CSV Reader"
    factory = "org.knime.base.node.io.filehandling.csv.reader.CSVTableReaderNodeFactory"
    arity = Arity.SOURCE

    def _translate(
        self,
        settings: ConfigTree,
        context: TranslatorContext,
        warnings: WarningCollector,
    ) -> TranslationResult:
        model = find_child(settings, "model")
        if model is None:
            return TranslationResult.error("Model configuration not found.")

        path = read_file_path(model)
        if not path:
            return TranslationResult.error("CSV Reader has no input file configured.")

        columns = read_declared_columns(model)
        if not columns:
            warnings.add("No declared schema found for CSV file; selecting all columns", path=path)

        comments = [f"Source: CSV file {path}"]
        return TranslationResult.success(
            with_comments(comments, f"{select_from(table_name_for(path), columns)};"),
            warnings=warnings.messages,
        )
