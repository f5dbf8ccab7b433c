# src/knimesql/contracts/__init__.py
"""Shared contracts for knimesql.

Types that cross subsystem boundaries live here so that core, graph and
translator modules can import them without cycles.
"""

from knimesql.contracts.translation import (
    ERROR_PREFIX,
    Arity,
    PredecessorContext,
    TranslationResult,
)
from knimesql.contracts.tree import ConfigElement, ConfigLeaf, ConfigNode, ConfigTree
from knimesql.contracts.workflow import Connection, SettingsDocument, WorkflowNode

__all__ = [
    "ERROR_PREFIX",
    "Arity",
    "ConfigElement",
    "ConfigLeaf",
    "ConfigNode",
    "ConfigTree",
    "Connection",
    "PredecessorContext",
    "SettingsDocument",
    "TranslationResult",
    "WorkflowNode",
]
