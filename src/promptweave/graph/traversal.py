"""Upstream collection from a sink node.

Pure functions that walk a :class:`GraphSnapshot` backward from a sink
without modifying it. The walk is breadth-first over incoming edges and
guarded by a visited set, so cyclic graphs terminate: the second arrival at
a node is dropped, not reported.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from promptweave.graph.snapshot import NodeType
from promptweave.observability.logging import get_logger

if TYPE_CHECKING:
    from promptweave.graph.snapshot import Edge, GraphSnapshot, Node

log = get_logger(__name__)

REFERENCE_HANDLE = "reference"
CONFIG_HANDLE = "config"


class IncomingRole(StrEnum):
    """How a collected node's contribution is consumed by the sink."""

    NARRATIVE = "narrative"
    REFERENCE = "reference"
    CONFIG = "config"


@dataclass(frozen=True)
class UpstreamNode:
    """A node reached from the sink.

    Attributes:
        node: The collected node.
        role: Role inherited from the handle closest to the sink.
        depth: Number of edges between the sink and this node.
    """

    node: Node
    role: IncomingRole
    depth: int


def role_for_edge(edge: Edge) -> IncomingRole:
    """Map an edge's target handle to the role it assigns to its source."""
    if edge.target_handle == REFERENCE_HANDLE:
        return IncomingRole.REFERENCE
    if edge.target_handle == CONFIG_HANDLE:
        return IncomingRole.CONFIG
    return IncomingRole.NARRATIVE


def collect_upstream(
    sink_id: str,
    snapshot: GraphSnapshot,
    *,
    expand_intercepts: bool = False,
) -> list[UpstreamNode]:
    """Collect every node reachable backward from *sink_id*.

    Algorithm:
        1. Seed the visited set and the queue with the sink.
        2. Dequeue a node and scan its incoming edges in edge-collection
           order. Each unvisited source is marked visited, given a role and
           enqueued.
        3. Intercept nodes other than the sink are collected but not
           expanded, unless *expand_intercepts* is set. Text assembly stops
           at them; parameter and reference lookup walks straight through.

    A node discovered through a ``reference`` or ``config`` handle passes
    that role on to everything discovered through it. Narrative nodes pass
    on whatever role the next edge's handle assigns.

    Args:
        sink_id: ID of the sink (output or intercept) to start from.
        snapshot: Graph snapshot to read.
        expand_intercepts: Keep walking past upstream intercept nodes.

    Returns:
        Collected nodes in discovery order, excluding the sink. Empty if the
        sink has no incoming edges or is not in the snapshot.
    """
    visited: set[str] = {sink_id}
    roles: dict[str, IncomingRole] = {sink_id: IncomingRole.NARRATIVE}
    queue: deque[tuple[str, int]] = deque([(sink_id, 0)])
    collected: list[UpstreamNode] = []

    while queue:
        current_id, depth = queue.popleft()
        inherited = roles[current_id]

        for edge in snapshot.incoming_edges(current_id):
            source_id = edge.source
            if source_id in visited:
                continue
            visited.add(source_id)

            source = snapshot.get_node(source_id)
            if source is None:
                log.debug("dangling_edge_skipped", source=source_id, target=current_id)
                continue

            role = inherited if inherited is not IncomingRole.NARRATIVE else role_for_edge(edge)
            roles[source_id] = role
            collected.append(UpstreamNode(node=source, role=role, depth=depth + 1))

            if expand_intercepts or source.type != NodeType.INTERCEPT:
                queue.append((source_id, depth + 1))

    log.debug(
        "upstream_collected",
        sink=sink_id,
        count=len(collected),
        through_intercepts=expand_intercepts,
    )
    return collected
