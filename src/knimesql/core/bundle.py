# src/knimesql/core/bundle.py
"""Exported workflow bundle loading.

A bundle is a directory produced by the markup decoder::

    my_workflow/
        workflow.json              # descriptor, compact JSON
        CSV Reader (#1)/settings.json
        Row Filter (#2)/settings.json

Settings documents are read and parsed on a thread pool. Each one becomes
an independent SettingsDocument; the graph builder folds them afterwards,
so completion order does not matter.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from knimesql.contracts import ConfigTree, SettingsDocument
from knimesql.core import compact
from knimesql.core.graph import WorkflowGraph, build_workflow_graph
from knimesql.core.logging import get_logger

logger = get_logger(__name__)

DESCRIPTOR_FILE = "workflow.json"
SETTINGS_FILE = "settings.json"


class BundleError(Exception):
    """Raised when a bundle directory cannot be read at all."""


@dataclass(frozen=True, slots=True)
class WorkflowBundle:
    """Parsed contents of a bundle, before graph construction."""

    root: Path
    descriptor: ConfigTree | None
    documents: tuple[SettingsDocument, ...]


def _read_tree(path: Path) -> ConfigTree:
    return compact.loads(path.read_text(encoding="utf-8"))


def _read_settings(root: Path, path: Path) -> SettingsDocument:
    folder = path.parent.relative_to(root).as_posix()
    return SettingsDocument(folder=folder, tree=_read_tree(path))


def _find_descriptor(root: Path) -> Path | None:
    candidates = sorted(root.rglob(DESCRIPTOR_FILE), key=lambda p: (len(p.relative_to(root).parts), str(p)))
    return candidates[0] if candidates else None


def load_bundle(directory: Path, *, max_workers: int = 4) -> WorkflowBundle:
    """Read the descriptor and all settings documents of a bundle.

    A missing descriptor is tolerated (nodes are still emitted from their
    settings documents). A malformed document raises TreeFormatError: the
    decoder output is system-owned, so a bad file is a bug upstream.

    Raises:
        BundleError: If ``directory`` does not exist or is not a directory
        TreeFormatError: If a document is not a compact JSON config tree
    """
    if not directory.is_dir():
        raise BundleError(f"Bundle directory not found: {directory}")

    descriptor_path = _find_descriptor(directory)
    if descriptor_path is None:
        logger.warning("Bundle has no workflow descriptor", bundle=str(directory))
        descriptor = None
        workflow_root = directory
    else:
        descriptor = _read_tree(descriptor_path)
        workflow_root = descriptor_path.parent

    # Folders are relative to the descriptor, like its node_settings_file entries
    settings_paths = sorted(p for p in workflow_root.rglob(SETTINGS_FILE) if p.parent != workflow_root)
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="knimesql-bundle") as pool:
        documents = tuple(pool.map(lambda p: _read_settings(workflow_root, p), settings_paths))

    logger.debug("Bundle loaded", bundle=str(directory), documents=len(documents))
    return WorkflowBundle(root=directory, descriptor=descriptor, documents=documents)


def load_workflow_graph(directory: Path, *, max_workers: int = 4) -> WorkflowGraph:
    """Load a bundle and build its workflow graph."""
    bundle = load_bundle(directory, max_workers=max_workers)
    return build_workflow_graph(bundle.descriptor, bundle.documents)
