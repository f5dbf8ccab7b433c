# src/knimesql/core/__init__.py
"""Core infrastructure: configuration tree access, logging, settings, graph."""

from knimesql.core.logging import configure_logging, get_logger
from knimesql.core.tree import (
    find_child,
    find_path,
    get_bool,
    get_indexed_list,
    get_indexed_nodes,
    get_indexed_slots,
    get_indexed_values,
    get_text,
    get_value,
)

__all__ = [
    "configure_logging",
    "find_child",
    "find_path",
    "get_bool",
    "get_indexed_list",
    "get_indexed_nodes",
    "get_indexed_slots",
    "get_indexed_values",
    "get_logger",
    "get_text",
    "get_value",
]
