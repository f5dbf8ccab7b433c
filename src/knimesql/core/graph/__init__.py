# src/knimesql/core/graph/__init__.py
"""Workflow graph reconstruction and predecessor resolution."""

from knimesql.core.graph.builder import build_workflow_graph, parse_descriptor, parse_settings_document
from knimesql.core.graph.graph import WorkflowGraph
from knimesql.core.graph.models import (
    DeclaredNode,
    WorkflowDescriptor,
    WorkflowGraphError,
    name_from_folder,
    node_id_from_folder,
)
from knimesql.core.graph.predecessors import (
    find_all_predecessors,
    find_single_predecessor,
    resolve_unary_context,
)

__all__ = [
    "DeclaredNode",
    "WorkflowDescriptor",
    "WorkflowGraph",
    "WorkflowGraphError",
    "build_workflow_graph",
    "find_all_predecessors",
    "find_single_predecessor",
    "name_from_folder",
    "node_id_from_folder",
    "parse_descriptor",
    "parse_settings_document",
    "resolve_unary_context",
]
