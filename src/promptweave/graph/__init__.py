"""Graph package - snapshots of the board graph and upstream traversal.

The board's graph store owns all mutation. This package only models the
immutable snapshot handed to the engine and the traversal over it.
"""

from promptweave.graph.errors import DuplicateNodeError, SnapshotError, SnapshotLoadError
from promptweave.graph.snapshot import (
    SINK_TYPES,
    Edge,
    GraphSnapshot,
    Node,
    NodeType,
    load_snapshot,
    to_snake_case,
)
from promptweave.graph.traversal import (
    CONFIG_HANDLE,
    REFERENCE_HANDLE,
    IncomingRole,
    UpstreamNode,
    collect_upstream,
    role_for_edge,
)

__all__ = [
    "CONFIG_HANDLE",
    "REFERENCE_HANDLE",
    "SINK_TYPES",
    "DuplicateNodeError",
    "Edge",
    "GraphSnapshot",
    "IncomingRole",
    "Node",
    "NodeType",
    "SnapshotError",
    "SnapshotLoadError",
    "UpstreamNode",
    "collect_upstream",
    "load_snapshot",
    "role_for_edge",
    "to_snake_case",
]
