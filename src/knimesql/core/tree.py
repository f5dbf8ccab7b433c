# src/knimesql/core/tree.py
"""Typed accessors over the attributed configuration tree.

Accessors fail closed: a missing key, a missing subtree or a shape mismatch
yields None (or an empty list), meaning "not configured". They never raise.

Duplicate keys: the first matching element wins. This is an assumption about
KNIME documents, not something the accessors enforce.
"""

from __future__ import annotations

from knimesql.contracts.tree import ConfigElement, ConfigLeaf, ConfigNode, ConfigTree

BOOLEAN_TYPE_TAG = "xboolean"

type Elements = ConfigTree | ConfigNode | None


def _children(elements: Elements) -> ConfigTree:
    if elements is None:
        return ()
    if isinstance(elements, ConfigNode):
        return elements.children
    return elements


def find_leaf(elements: Elements, key: str) -> ConfigLeaf | None:
    """Return the first leaf keyed ``key``, or None."""
    for element in _children(elements):
        if isinstance(element, ConfigLeaf) and element.key == key:
            return element
    return None


def get_value(elements: Elements, key: str) -> str | bool | None:
    """Return the scalar stored under ``key``.

    Leaves tagged ``xboolean`` are parsed to ``bool``; everything else is
    returned as the raw string. Null or absent entries give None.
    """
    leaf = find_leaf(elements, key)
    if leaf is None or leaf.is_null or leaf.value is None:
        return None
    if leaf.type_tag == BOOLEAN_TYPE_TAG:
        return leaf.value.strip().lower() == "true"
    return leaf.value


def get_text(elements: Elements, key: str, default: str = "") -> str:
    """Return the value under ``key`` as text, or ``default`` when unset."""
    value = get_value(elements, key)
    if value is None:
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def get_bool(elements: Elements, key: str) -> bool | None:
    """Return the value under ``key`` as a boolean.

    Untyped leaves holding ``"true"``/``"false"`` are accepted too, since some
    exports drop the type attribute.
    """
    value = get_value(elements, key)
    if isinstance(value, bool) or value is None:
        return value
    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    return None


def find_child(elements: Elements, key: str) -> ConfigNode | None:
    """Return the first subtree keyed ``key``, or None."""
    for element in _children(elements):
        if isinstance(element, ConfigNode) and element.key == key:
            return element
    return None


def find_path(elements: Elements, *keys: str) -> ConfigNode | None:
    """Descend through nested subtrees, e.g. ``find_path(tree, "model", "predicates")``."""
    current: Elements = elements
    for key in keys:
        current = find_child(current, key)
        if current is None:
            return None
    return current if isinstance(current, ConfigNode) else None


def _index_of(key: str) -> int | None:
    if key.isascii() and key.isdigit():
        return int(key)
    return None


def get_indexed_list(elements: Elements) -> list[ConfigElement]:
    """Return the children keyed ``"0"``, ``"1"``, ... in numeric order.

    Other children (``array-size`` and friends) are ignored, so
    ``"10"`` sorts after ``"9"`` and gaps are tolerated.
    """
    indexed = [(index, element) for element in _children(elements) if (index := _index_of(element.key)) is not None]
    indexed.sort(key=lambda pair: pair[0])
    return [element for _, element in indexed]


def get_indexed_nodes(elements: Elements) -> list[ConfigNode]:
    """Indexed children that are subtrees (predicates, sort criteria, ...)."""
    return [element for element in get_indexed_list(elements) if isinstance(element, ConfigNode)]


def get_indexed_slots(elements: Elements) -> list[str | None]:
    """Indexed scalar values with their positions kept.

    A null entry (or a subtree where a scalar was expected) is None, so two
    arrays read this way still line up element by element.
    """
    return [
        element.value if isinstance(element, ConfigLeaf) and not element.is_null else None
        for element in get_indexed_list(elements)
    ]


def get_indexed_values(elements: Elements) -> list[str]:
    """Indexed children that are scalars, as strings, with null entries skipped."""
    return [value for value in get_indexed_slots(elements) if value is not None]
