# src/knimesql/core/compact.py
"""Adapter between xml-js "compact" JSON and the configuration tree.

The markup decoder that sits in front of knimesql turns each KNIME XML
document into compact JSON::

    {"config": {"_attributes": {"key": "settings.xml"},
                "entry": [{"_attributes": {"key": "factory", "type": "xstring", "value": "..."}}],
                "config": {"_attributes": {"key": "model"}, "entry": ...}}}

A repeated element becomes a list, a single one stays an object. Compact
JSON groups children by tag, so entries and sub-configs keep their relative
order within each tag but not across tags.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from knimesql.contracts.tree import ConfigElement, ConfigLeaf, ConfigNode, ConfigTree

ATTRIBUTES = "_attributes"
ENTRY_TAG = "entry"
CONFIG_TAG = "config"


class TreeFormatError(ValueError):
    """Raised when a compact JSON document is not shaped like a config tree."""


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _attributes(obj: Any, tag: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise TreeFormatError(f"<{tag}> must be an object, got {type(obj).__name__}")
    attrs = obj.get(ATTRIBUTES)
    if not isinstance(attrs, Mapping) or "key" not in attrs:
        raise TreeFormatError(f"<{tag}> is missing the '{ATTRIBUTES}.key' attribute: {obj!r}")
    return attrs


def _leaf(obj: Any) -> ConfigLeaf:
    attrs = _attributes(obj, ENTRY_TAG)
    is_null = str(attrs.get("isnull", "false")).lower() == "true"
    value = attrs.get("value")
    return ConfigLeaf(
        key=str(attrs["key"]),
        value=None if is_null or value is None else str(value),
        type_tag=str(attrs["type"]) if "type" in attrs else None,
        is_null=is_null,
    )


def _children(obj: Mapping[str, Any]) -> ConfigTree:
    children: list[ConfigElement] = []
    for tag, value in obj.items():
        if tag == ENTRY_TAG:
            children.extend(_leaf(item) for item in _as_list(value))
        elif tag == CONFIG_TAG:
            children.extend(_node(item) for item in _as_list(value))
    return tuple(children)


def _node(obj: Any) -> ConfigNode:
    attrs = _attributes(obj, CONFIG_TAG)
    return ConfigNode(key=str(attrs["key"]), children=_children(obj))


def tree_from_compact(document: Mapping[str, Any]) -> ConfigTree:
    """Convert a compact JSON document into the children of its root config.

    Accepts either the whole document (``{"_declaration": ..., "config": ...}``)
    or the root config object itself.

    Raises:
        TreeFormatError: If the document has no root config or an element
            lacks its key attribute.
    """
    if not isinstance(document, Mapping):
        raise TreeFormatError(f"Document must be an object, got {type(document).__name__}")
    if ATTRIBUTES in document:
        return _children(document)
    root = document.get(CONFIG_TAG)
    if isinstance(root, list):
        if len(root) != 1:
            raise TreeFormatError(f"Document must have exactly one root <config>, found {len(root)}")
        root = root[0]
    if root is None:
        raise TreeFormatError("Document has no root <config> element")
    return _node(root).children


def loads(text: str) -> ConfigTree:
    """Parse compact JSON text into a configuration tree."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise TreeFormatError(f"Invalid JSON: {e}") from e
    return tree_from_compact(document)


def _leaf_to_compact(leaf: ConfigLeaf) -> dict[str, Any]:
    attrs: dict[str, str] = {"key": leaf.key}
    if leaf.type_tag is not None:
        attrs["type"] = leaf.type_tag
    if leaf.is_null:
        attrs["value"] = ""
        attrs["isnull"] = "true"
    elif leaf.value is not None:
        attrs["value"] = leaf.value
    return {ATTRIBUTES: attrs}


def _node_to_compact(key: str, children: ConfigTree) -> dict[str, Any]:
    out: dict[str, Any] = {ATTRIBUTES: {"key": key}}
    entries = [_leaf_to_compact(c) for c in children if isinstance(c, ConfigLeaf)]
    configs = [_node_to_compact(c.key, c.children) for c in children if isinstance(c, ConfigNode)]
    if entries:
        out[ENTRY_TAG] = entries[0] if len(entries) == 1 else entries
    if configs:
        out[CONFIG_TAG] = configs[0] if len(configs) == 1 else configs
    return out


def to_compact(tree: ConfigTree, *, root_key: str = "settings.xml") -> dict[str, Any]:
    """Render a tree back to a compact JSON document (entries before configs)."""
    return {CONFIG_TAG: _node_to_compact(root_key, tree)}
