# src/knimesql/core/graph/predecessors.py
"""Upstream context resolution.

Derives the predecessor context a translator needs from the adjacency map.
Which columns an upstream node exposes is not inferred here; callers pass
them in per predecessor id.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from knimesql.contracts import PredecessorContext, WorkflowNode
from knimesql.core.config import DEFAULT_INPUT_ALIAS
from knimesql.core.graph.graph import WorkflowGraph

type ColumnHints = Mapping[int, Iterable[str]]


def find_single_predecessor(graph: WorkflowGraph, node_id: int) -> WorkflowNode | None:
    """Return the first upstream node of ``node_id``, or None for a root node.

    Scans ``next_node_map`` in insertion order and stops at the first source
    whose destination list contains ``node_id``.
    """
    for source_id, dests in graph.iter_sources():
        if node_id in dests:
            return graph.get_node(source_id)
    return None


def find_all_predecessors(
    graph: WorkflowGraph,
    node_id: int,
    exposed_columns: ColumnHints | None = None,
) -> list[PredecessorContext]:
    """Return a context for every upstream node of ``node_id``.

    Order is ``next_node_map`` iteration order, i.e. the order in which each
    source first appears in the connection list; input port numbers play no
    part. A source connected more than once to the same node is reported
    once.
    """
    hints = exposed_columns or {}
    contexts: list[PredecessorContext] = []
    for source_id, dests in graph.iter_sources():
        if node_id not in dests:
            continue
        source = graph.get_node(source_id)
        alias = source.display_alias if source is not None else f"node_{source_id}"
        contexts.append(PredecessorContext.of(alias, hints.get(source_id, ())))
    return contexts


def resolve_unary_context(
    graph: WorkflowGraph,
    node_id: int | None,
    exposed_columns: ColumnHints | None = None,
    *,
    default_alias: str = DEFAULT_INPUT_ALIAS,
) -> PredecessorContext:
    """Context for a single-input translator.

    A root node (or a node without id) gets ``default_alias``, so a missing
    upstream is never itself a translation failure.
    """
    predecessor = find_single_predecessor(graph, node_id) if node_id is not None else None
    if predecessor is None or predecessor.node_id is None:
        return PredecessorContext(alias=default_alias)
    hints = exposed_columns or {}
    return PredecessorContext.of(predecessor.display_alias, hints.get(predecessor.node_id, ()))
