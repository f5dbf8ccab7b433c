# src/knimesql/core/graph/models.py
"""Types, constants, and exceptions for workflow graph operations.

Leaf module - no intra-package imports beyond contracts (prevents import cycles).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from knimesql.contracts import Connection

# "Row Filter (#3)" -> 3. The closing parenthesis is optional.
NODE_FOLDER_ID_PATTERN = re.compile(r"#(\d+)\)?$")
_FOLDER_SUFFIX_PATTERN = re.compile(r"\s*\(#\d+\)$")


class WorkflowGraphError(ValueError):
    """Raised when a graph operation cannot be answered (e.g. a cycle)."""


@dataclass(frozen=True, slots=True)
class DeclaredNode:
    """A node as listed in the workflow descriptor."""

    node_id: int
    settings_file: str = ""

    @property
    def folder(self) -> str | None:
        """Folder part of ``node_settings_file`` ("Row Filter (#3)/settings.xml")."""
        if not self.settings_file:
            return None
        folder, sep, _ = self.settings_file.replace("\\", "/").rpartition("/")
        return folder if sep else None


@dataclass(frozen=True, slots=True)
class WorkflowDescriptor:
    """Declared node sequence and connection list, in document order."""

    nodes: tuple[DeclaredNode, ...] = ()
    connections: tuple[Connection, ...] = ()


def node_id_from_folder(folder: str) -> int | None:
    """Extract the node id from a folder name, or None when there is none.

    Only the last path segment is considered, so both ``"Sorter (#7)"`` and
    ``"wf/Sorter (#7)"`` give 7.
    """
    segment = folder.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    match = NODE_FOLDER_ID_PATTERN.search(segment)
    return int(match.group(1)) if match else None


def name_from_folder(folder: str | None) -> str:
    """Display name encoded in a folder ("Row Filter (#3)" -> "Row Filter")."""
    if not folder:
        return ""
    segment = folder.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    return _FOLDER_SUFFIX_PATTERN.sub("", segment).strip()
