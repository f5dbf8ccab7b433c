# src/knimesql/contracts/tree.py
"""Attributed configuration tree.

Every KNIME document (the workflow descriptor and each node's settings) is
represented as an ordered sequence of elements. An element is either a leaf
carrying a scalar value or a node carrying further elements.

Leaf module - no intra-package imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ConfigLeaf:
    """Scalar entry, e.g. ``<entry key="factory" type="xstring" value="..."/>``.

    ``type_tag`` is the declared KNIME type (``xstring``, ``xboolean``,
    ``xint``, ...), or None when the source omitted it. ``is_null`` mirrors the
    ``isnull="true"`` attribute; ``value`` is then None.
    """

    key: str
    value: str | None
    type_tag: str | None = None
    is_null: bool = False


@dataclass(frozen=True, slots=True)
class ConfigNode:
    """Keyed subtree, e.g. ``<config key="model">...</config>``."""

    key: str
    children: tuple[ConfigElement, ...] = field(default_factory=tuple)


type ConfigElement = ConfigLeaf | ConfigNode

# A settings tree is the ordered children of a document's root config.
type ConfigTree = tuple[ConfigElement, ...]
