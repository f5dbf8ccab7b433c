# src/knimesql/core/graph/graph.py
"""WorkflowGraph class - query and traversal operations.

Construction logic lives in builder.py; this module contains the graph
class with its read-side methods.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

import networkx as nx
from networkx import MultiDiGraph

from knimesql.contracts import Connection, WorkflowNode
from knimesql.core.graph.models import WorkflowGraphError


class WorkflowGraph:
    """Reconstructed KNIME workflow.

    Wraps a NetworkX MultiDiGraph (one edge per declared connection, so
    duplicate connections stay visible) together with the two lookup tables
    the translators rely on:

    - ``order_index``: node id -> position in the declared node sequence
    - ``next_node_map``: source id -> destination ids, in declaration order.
      Dict insertion order follows the first connection declared for each
      source; predecessor resolution iterates it in that order.
    """

    def __init__(self) -> None:
        self._graph: MultiDiGraph[int] = nx.MultiDiGraph()
        self._nodes: dict[int, WorkflowNode] = {}
        self._unresolved: list[WorkflowNode] = []
        self._order_index: dict[int, int] = {}
        self._next_node_map: dict[int, list[int]] = {}
        self._connections: list[Connection] = []

    # === Construction (used by builder.py) ===

    def add_node(self, node: WorkflowNode) -> None:
        """Add a merged node record.

        Records without an id are kept aside; they cannot take part in edges.
        """
        if node.node_id is None:
            self._unresolved.append(node)
            return
        if node.node_id in self._nodes:
            raise WorkflowGraphError(f"Duplicate node id {node.node_id}")
        self._nodes[node.node_id] = node
        self._graph.add_node(node.node_id)

    def set_order_index(self, order_index: Mapping[int, int]) -> None:
        self._order_index = dict(order_index)

    def add_connection(self, connection: Connection) -> None:
        """Record a connection in both the adjacency map and the nx graph."""
        self._connections.append(connection)
        self._next_node_map.setdefault(connection.source_id, []).append(connection.dest_id)
        self._graph.add_edge(
            connection.source_id,
            connection.dest_id,
            key=len(self._connections) - 1,
            source_port=connection.source_port,
            dest_port=connection.dest_port,
        )

    # === Queries ===

    @property
    def node_count(self) -> int:
        """Number of node records, including unresolved ones."""
        return len(self._nodes) + len(self._unresolved)

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    @property
    def order_index(self) -> Mapping[int, int]:
        return MappingProxyType(self._order_index)

    @property
    def next_node_map(self) -> Mapping[int, tuple[int, ...]]:
        """Read-only view of source id -> ordered destination ids."""
        return MappingProxyType({source: tuple(dests) for source, dests in self._next_node_map.items()})

    @property
    def connections(self) -> tuple[Connection, ...]:
        return tuple(self._connections)

    @property
    def unresolved_nodes(self) -> tuple[WorkflowNode, ...]:
        return tuple(self._unresolved)

    def get_node(self, node_id: int) -> WorkflowNode | None:
        """Return the record for ``node_id``, or None."""
        return self._nodes.get(node_id)

    def nodes(self) -> list[WorkflowNode]:
        """All records: resolved ones by id, then unresolved ones."""
        return [self._nodes[node_id] for node_id in sorted(self._nodes)] + list(self._unresolved)

    def ordered_nodes(self) -> list[WorkflowNode]:
        """All records in workflow step order.

        Nodes without an order index (absent from the descriptor, or with no
        id at all) sort last, by id then folder.
        """

        def sort_key(node: WorkflowNode) -> tuple[int, int, int, str]:
            if node.order_index is not None:
                return (0, node.order_index, 0, "")
            if node.node_id is not None:
                return (1, 0, node.node_id, "")
            return (2, 0, 0, node.folder or "")

        return sorted(self.nodes(), key=sort_key)

    def successors(self, node_id: int) -> tuple[int, ...]:
        return tuple(self._next_node_map.get(node_id, ()))

    def topological_order(self) -> list[int]:
        """Return node ids in dependency order, ties broken by order index.

        Raises:
            WorkflowGraphError: If the workflow contains a cycle
        """

        def tie_break(node_id: int) -> tuple[int, int]:
            return (self._order_index.get(node_id, len(self._order_index)), node_id)

        try:
            return list(nx.lexicographical_topological_sort(self._graph, key=tie_break))
        except nx.NetworkXUnfeasible as e:
            raise WorkflowGraphError(f"Cannot sort workflow: {e}") from e

    def dependency_ordered_nodes(self) -> list[WorkflowNode]:
        """All records, each after every node feeding it.

        Resolved nodes come in ``topological_order``; unresolved records
        have no edges and follow them.

        Raises:
            WorkflowGraphError: If the workflow contains a cycle
        """
        return [self._nodes[node_id] for node_id in self.topological_order()] + list(self._unresolved)

    def iter_sources(self) -> Iterable[tuple[int, tuple[int, ...]]]:
        """Iterate ``next_node_map`` entries in insertion order."""
        for source, dests in self._next_node_map.items():
            yield source, tuple(dests)
