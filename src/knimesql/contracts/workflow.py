# src/knimesql/contracts/workflow.py
"""Workflow records produced by the graph builder."""

from __future__ import annotations

from dataclasses import dataclass

from knimesql.contracts.tree import ConfigTree


@dataclass(frozen=True, slots=True)
class Connection:
    """Directed edge declared in the workflow descriptor.

    Ports are kept for reference only; ordering of inbound edges is the
    declaration order, not the port index.
    """

    source_id: int
    dest_id: int
    source_port: int | None = None
    dest_port: int | None = None


@dataclass(frozen=True, slots=True)
class SettingsDocument:
    """One parsed settings document and the folder it was found in.

    The folder name carries the node id as a trailing ``#<digits>`` suffix,
    e.g. ``Row Filter (#3)``.
    """

    folder: str
    tree: ConfigTree


@dataclass(frozen=True, slots=True)
class WorkflowNode:
    """Merged record for one workflow node.

    Emitted even when only the descriptor or only the settings document knew
    about the node; unknown fields stay empty. ``node_id`` is None when the
    settings folder carried no id, and ``order_index`` is None when the node
    is not part of the declared node sequence. Both sort last.
    """

    node_id: int | None
    name: str = ""
    factory: str = ""
    status: str = ""
    description: str = ""
    settings: ConfigTree = ()
    order_index: int | None = None
    successors: tuple[int, ...] = ()
    folder: str | None = None

    @property
    def short_type(self) -> str:
        """Last dotted segment of the factory identifier."""
        return self.factory.rsplit(".", 1)[-1]

    @property
    def display_alias(self) -> str:
        """Name used as this node's table alias in downstream SQL."""
        if self.name:
            return self.name
        if self.node_id is not None:
            return f"node_{self.node_id}"
        return self.folder or "unresolved_node"
