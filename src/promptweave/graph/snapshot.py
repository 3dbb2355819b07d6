"""Immutable graph snapshots consumed by the assembly engine.

The board's graph store owns node and edge lifecycles. At assembly time it
hands over a :class:`GraphSnapshot`: the full node and edge collections as
they were at that instant. The engine only reads a snapshot and never keeps
a reference to it after a call returns.

Snapshots can be built directly from ``Node``/``Edge`` values or loaded from
the canvas JSON export format (``{"nodes": [...], "edges": [...]}``), whose
payload keys are camelCase. Payload keys are normalized to snake_case on
load so that fragment producers only deal with one spelling.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from promptweave.graph.errors import DuplicateNodeError, SnapshotLoadError

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


class NodeType(StrEnum):
    """Closed set of node type tags understood by the engine."""

    CHARACTER = "character"
    SETTING = "setting"
    PROP = "prop"
    STYLE = "style"
    EXTRAS = "extras"
    OUTFIT = "outfit"
    SHOT = "shot"
    CAMERA = "camera"
    TIME_PERIOD = "timeperiod"
    ACTION = "action"
    EDIT = "edit"
    NEGATIVE = "negative"
    PARAMETERS = "parameters"
    REFERENCE = "reference"
    INTERCEPT = "intercept"
    OUTPUT = "output"


SINK_TYPES = frozenset({NodeType.OUTPUT, NodeType.INTERCEPT})


def to_snake_case(key: str) -> str:
    """Convert a camelCase payload key to snake_case (``eraPreset`` -> ``era_preset``)."""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


class Node(BaseModel):
    """A typed concept node.

    ``type`` is kept as a plain string: tags outside :class:`NodeType` are
    legal and simply contribute nothing to an assembly.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: str
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _normalize_keys(cls, value: Any) -> dict[str, Any]:
        if not isinstance(value, Mapping):
            return {}
        return {to_snake_case(str(k)): v for k, v in value.items()}


class Edge(BaseModel):
    """A directed connection from ``source`` into a handle of ``target``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")
    target_handle: str | None = Field(default=None, alias="targetHandle")


@dataclass(frozen=True)
class GraphSnapshot:
    """Immutable view of the node and edge collections.

    Attributes:
        nodes: Nodes in the order the graph store supplied them.
        edges: Edges in the order the graph store supplied them. This order
            drives breadth-first discovery in the upstream collector.
    """

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    _by_id: dict[str, Node] = field(init=False, repr=False, compare=False)
    _incoming: dict[str, tuple[Edge, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_id: dict[str, Node] = {}
        for node in self.nodes:
            if node.id in by_id:
                raise DuplicateNodeError(node.id)
            by_id[node.id] = node

        incoming: dict[str, list[Edge]] = {}
        for edge in self.edges:
            incoming.setdefault(edge.target, []).append(edge)

        object.__setattr__(self, "_by_id", by_id)
        object.__setattr__(
            self, "_incoming", {target: tuple(es) for target, es in incoming.items()}
        )

    @classmethod
    def of(cls, nodes: Iterable[Node], edges: Iterable[Edge]) -> GraphSnapshot:
        """Build a snapshot from any node and edge iterables."""
        return cls(nodes=tuple(nodes), edges=tuple(edges))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GraphSnapshot:
        """Build a snapshot from the canvas JSON format.

        Args:
            data: Mapping with ``nodes`` and ``edges`` lists.

        Returns:
            GraphSnapshot with payload keys normalized to snake_case.

        Raises:
            pydantic.ValidationError: If a node or edge lacks required fields.
            DuplicateNodeError: If two nodes share an ID.
        """
        nodes = [Node.model_validate(n) for n in data.get("nodes", [])]
        edges = [Edge.model_validate(e) for e in data.get("edges", [])]
        return cls.of(nodes, edges)

    def get_node(self, node_id: str) -> Node | None:
        """Get a node by ID, or None if the snapshot has no such node."""
        return self._by_id.get(node_id)

    def has_node(self, node_id: str) -> bool:
        """Check whether a node exists in the snapshot."""
        return node_id in self._by_id

    def incoming_edges(self, node_id: str) -> tuple[Edge, ...]:
        """Return edges terminating at *node_id*, in edge-collection order."""
        return self._incoming.get(node_id, ())

    def nodes_by_type(self, *node_types: str) -> list[Node]:
        """Return nodes whose type is one of *node_types*, in collection order."""
        wanted = set(node_types)
        return [n for n in self.nodes if n.type in wanted]

    def sink_nodes(self) -> list[Node]:
        """Return every output and intercept node."""
        return self.nodes_by_type(*SINK_TYPES)


def load_snapshot(path: Path) -> GraphSnapshot:
    """Load a graph snapshot from a canvas JSON export.

    Args:
        path: Path to a JSON file with ``nodes`` and ``edges`` arrays. A
            project export that nests them under ``flow`` is also accepted.

    Returns:
        Loaded snapshot.

    Raises:
        SnapshotLoadError: If the file is missing, is not valid JSON, or does
            not describe a graph.
        DuplicateNodeError: If two nodes share an ID.
    """
    if not path.exists():
        raise SnapshotLoadError(path, "File not found")

    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(path, f"Invalid JSON: {e}") from e

    if isinstance(raw, Mapping) and isinstance(raw.get("flow"), Mapping):
        raw = raw["flow"]
    if not isinstance(raw, Mapping) or "nodes" not in raw:
        raise SnapshotLoadError(path, "Expected an object with 'nodes' and 'edges'")

    try:
        return GraphSnapshot.from_dict(raw)
    except ValidationError as e:
        raise SnapshotLoadError(path, str(e)) from e
