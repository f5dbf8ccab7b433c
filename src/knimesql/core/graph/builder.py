# src/knimesql/core/graph/builder.py
"""Workflow graph construction.

Merges the workflow descriptor (declared nodes + connections) with the
independently parsed per-node settings documents into one id-keyed record
set.

Settings documents may arrive in any order (they are typically parsed on a
thread pool). The builder never accumulates into shared state while they
arrive: it collects every partial record first, then picks one owning
document per node id by folder, never by arrival order. Documents that do
not own their id are kept whole as unresolved records.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, replace

from knimesql.contracts import ConfigNode, ConfigTree, Connection, SettingsDocument, WorkflowNode
from knimesql.core.graph.graph import WorkflowGraph
from knimesql.core.graph.models import (
    DeclaredNode,
    WorkflowDescriptor,
    name_from_folder,
    node_id_from_folder,
)
from knimesql.core.logging import get_logger
from knimesql.core.tree import find_child, get_text

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _PartialNode:
    """What one source knows about a node. Empty strings mean unknown."""

    # 0 = settings document, 1 = descriptor entry without a document.
    rank: int
    node_id: int | None
    folder: str | None
    name: str = ""
    factory: str = ""
    status: str = ""
    description: str = ""
    settings: ConfigTree = ()


def _parse_int(raw: str) -> int | None:
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _subtrees(node: ConfigNode | None) -> list[ConfigNode]:
    if node is None:
        return []
    return [child for child in node.children if isinstance(child, ConfigNode)]


def parse_descriptor(tree: ConfigTree | None) -> WorkflowDescriptor:
    """Read the declared node list and connection list from ``workflow.knime``.

    Expected shape (children of the root config)::

        nodes/node_1: id, node_settings_file, ...
        connections/connection_0: sourceID, destID, sourcePort, destPort

    Entries that cannot be read are skipped with a warning.
    """
    if not tree:
        return WorkflowDescriptor()

    declared: list[DeclaredNode] = []
    seen: set[int] = set()
    for entry in _subtrees(find_child(tree, "nodes")):
        node_id = _parse_int(get_text(entry, "id"))
        if node_id is None:
            logger.warning("Skipping declared node without integer id", entry=entry.key)
            continue
        if node_id in seen:
            logger.warning("Skipping duplicate declared node id", node_id=node_id)
            continue
        seen.add(node_id)
        declared.append(DeclaredNode(node_id=node_id, settings_file=get_text(entry, "node_settings_file")))

    connections: list[Connection] = []
    for entry in _subtrees(find_child(tree, "connections")):
        source_id = _parse_int(get_text(entry, "sourceID"))
        dest_id = _parse_int(get_text(entry, "destID"))
        if source_id is None or dest_id is None:
            logger.warning("Skipping connection with unreadable endpoints", entry=entry.key)
            continue
        connections.append(
            Connection(
                source_id=source_id,
                dest_id=dest_id,
                source_port=_parse_int(get_text(entry, "sourcePort")),
                dest_port=_parse_int(get_text(entry, "destPort")),
            )
        )

    return WorkflowDescriptor(nodes=tuple(declared), connections=tuple(connections))


def parse_settings_document(document: SettingsDocument) -> _PartialNode:
    """Turn one settings document into a partial node record."""
    tree = document.tree
    return _PartialNode(
        rank=0,
        node_id=node_id_from_folder(document.folder),
        folder=document.folder,
        name=get_text(tree, "name") or get_text(tree, "node-name"),
        factory=get_text(tree, "factory"),
        status=get_text(tree, "state"),
        description=get_text(tree, "customDescription"),
        settings=tree,
    )


def _normalize_folder(folder: str | None) -> str:
    return (folder or "").replace("\\", "/").strip("/")


def _depth(folder: str | None) -> int:
    return _normalize_folder(folder).count("/")


def _merge_key(partial: _PartialNode) -> tuple[int, str, str, str, str, str, str]:
    return (
        partial.rank,
        _normalize_folder(partial.folder),
        partial.name,
        partial.factory,
        partial.status,
        partial.description,
        repr(partial.settings),
    )


def _pick_owner(
    declared: DeclaredNode | None,
    documents: list[_PartialNode],
) -> tuple[_PartialNode | None, list[_PartialNode]]:
    """Choose the one settings document that describes a node id.

    A declared node owns the document stored in its ``node_settings_file``
    folder. Without a declared folder the shallowest document owns the id
    (a metanode's inner nodes reuse ids of top-level nodes). Every other
    document is returned as a stray.
    """
    ordered = sorted(documents, key=_merge_key)
    if declared is not None and declared.folder is not None:
        target = _normalize_folder(declared.folder)
        owner = next((d for d in ordered if _normalize_folder(d.folder) == target), None)
    else:
        owner = min(ordered, key=lambda d: (_depth(d.folder), _merge_key(d)), default=None)
    return owner, [d for d in ordered if d is not owner]


def _complete(document: _PartialNode | None, declared: DeclaredNode | None, node_id: int) -> _PartialNode:
    """Fill what the owning document leaves empty from the descriptor entry."""
    folder = (document.folder if document is not None else None) or (declared.folder if declared else None)
    if document is None:
        return _PartialNode(rank=1, node_id=node_id, folder=folder, name=name_from_folder(folder))
    return replace(document, node_id=node_id, folder=folder, name=document.name or name_from_folder(folder))


def build_workflow_graph(
    descriptor_tree: ConfigTree | None,
    documents: Iterable[SettingsDocument],
) -> WorkflowGraph:
    """Build a WorkflowGraph from the descriptor and settings documents.

    Every declared node and every settings document yields a record. When
    several documents carry the same node id, only the owner (see
    ``_pick_owner``) is attached to the id; the others are kept whole as
    unresolved records. Connections whose endpoints are not declared nodes
    (metanode ports use -1) are dropped with a warning.

    Args:
        descriptor_tree: Children of the ``workflow.knime`` root config, or
            None when the descriptor is unavailable
        documents: Parsed settings documents in any order
    """
    descriptor = parse_descriptor(descriptor_tree)
    graph = WorkflowGraph()

    order_index = {declared.node_id: index for index, declared in enumerate(descriptor.nodes)}
    graph.set_order_index(order_index)
    declared_by_id = {declared.node_id: declared for declared in descriptor.nodes}

    grouped: dict[int, list[_PartialNode]] = defaultdict(list)
    unresolved: list[_PartialNode] = []
    for partial in (parse_settings_document(document) for document in documents):
        if partial.node_id is None:
            logger.warning("Settings folder carries no node id", folder=partial.folder)
            unresolved.append(partial)
        else:
            grouped[partial.node_id].append(partial)

    records: dict[int, _PartialNode] = {}
    for node_id in sorted(set(grouped) | set(declared_by_id)):
        declared = declared_by_id.get(node_id)
        owner, strays = _pick_owner(declared, grouped.get(node_id, []))
        records[node_id] = _complete(owner, declared, node_id)
        for stray in strays:
            logger.warning(
                "Settings document does not own its node id",
                node_id=node_id,
                folder=stray.folder,
                owner_folder=records[node_id].folder,
            )
            unresolved.append(replace(stray, node_id=None))

    declared_ids = set(order_index)
    valid_connections: list[Connection] = []
    for connection in descriptor.connections:
        if connection.source_id not in declared_ids or connection.dest_id not in declared_ids:
            logger.warning(
                "Dropping connection to undeclared node",
                source_id=connection.source_id,
                dest_id=connection.dest_id,
            )
            continue
        valid_connections.append(connection)

    successors: dict[int, list[int]] = defaultdict(list)
    for connection in valid_connections:
        successors[connection.source_id].append(connection.dest_id)

    for node_id, record in records.items():
        graph.add_node(_to_workflow_node(record, order_index.get(node_id), tuple(successors.get(node_id, ()))))

    for partial in sorted(unresolved, key=_merge_key):
        graph.add_node(_to_workflow_node(replace(partial, name=partial.name or name_from_folder(partial.folder)), None, ()))

    for connection in valid_connections:
        graph.add_connection(connection)

    logger.debug(
        "Workflow graph built",
        nodes=graph.node_count,
        connections=graph.edge_count,
        unresolved=len(unresolved),
    )
    return graph


def _to_workflow_node(partial: _PartialNode, order_index: int | None, successors: tuple[int, ...]) -> WorkflowNode:
    return WorkflowNode(
        node_id=partial.node_id,
        name=partial.name,
        factory=partial.factory,
        status=partial.status,
        description=partial.description,
        settings=partial.settings,
        order_index=order_index,
        successors=successors,
        folder=partial.folder,
    )
