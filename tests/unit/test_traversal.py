"""Tests for upstream collection."""

from __future__ import annotations

from promptweave.graph import GraphSnapshot, IncomingRole, collect_upstream, role_for_edge
from tests.fixtures.graphs import make_edge, make_node


def _ids(snapshot: GraphSnapshot, sink: str = "out") -> list[str]:
    return [entry.node.id for entry in collect_upstream(sink, snapshot)]


class TestRoleForEdge:
    """Test mapping target handles to incoming roles."""

    def test_handles(self) -> None:
        """Reference and config handles map to their roles, anything else is narrative."""
        assert role_for_edge(make_edge("a", "b")) is IncomingRole.NARRATIVE
        assert role_for_edge(make_edge("a", "b", "reference")) is IncomingRole.REFERENCE
        assert role_for_edge(make_edge("a", "b", "config")) is IncomingRole.CONFIG
        assert role_for_edge(make_edge("a", "b", "left")) is IncomingRole.NARRATIVE


class TestCollectUpstream:
    """Test breadth-first collection from a sink."""

    def test_empty_when_nothing_connected(self) -> None:
        """A sink without inputs collects nothing."""
        snapshot = GraphSnapshot.of([make_node("out", "output")], [])
        assert collect_upstream("out", snapshot) == []

    def test_missing_sink_yields_nothing(self) -> None:
        """An unknown sink ID collects nothing."""
        snapshot = GraphSnapshot.of([make_node("a", "prop")], [])
        assert collect_upstream("ghost", snapshot) == []

    def test_breadth_first_in_edge_order(self) -> None:
        """Direct inputs come first (edge order), then their inputs."""
        nodes = [make_node(i, "prop") for i in ("out", "a", "b", "a1", "b1")]
        edges = [
            make_edge("a1", "a"),
            make_edge("b", "out"),
            make_edge("b1", "b"),
            make_edge("a", "out"),
        ]
        snapshot = GraphSnapshot.of(nodes, edges)
        assert _ids(snapshot) == ["b", "a", "b1", "a1"]

    def test_depths(self) -> None:
        """Depth counts edges back to the sink."""
        nodes = [make_node(i, "prop") for i in ("out", "a", "b")]
        snapshot = GraphSnapshot.of(nodes, [make_edge("a", "out"), make_edge("b", "a")])
        depths = {e.node.id: e.depth for e in collect_upstream("out", snapshot)}
        assert depths == {"a": 1, "b": 2}

    def test_diamond_visits_once(self) -> None:
        """A node reachable along two paths is collected once."""
        nodes = [make_node(i, "prop") for i in ("out", "left", "right", "top")]
        edges = [
            make_edge("left", "out"),
            make_edge("right", "out"),
            make_edge("top", "left"),
            make_edge("top", "right"),
        ]
        snapshot = GraphSnapshot.of(nodes, edges)
        assert _ids(snapshot) == ["left", "right", "top"]

    def test_cycle_terminates(self) -> None:
        """A -> B -> A upstream of the sink is collected once each."""
        nodes = [make_node(i, "prop") for i in ("out", "a", "b")]
        edges = [make_edge("a", "out"), make_edge("b", "a"), make_edge("a", "b")]
        snapshot = GraphSnapshot.of(nodes, edges)
        assert _ids(snapshot) == ["a", "b"]

    def test_cycle_through_sink_terminates(self) -> None:
        """An edge back into the sink does not re-collect it."""
        nodes = [make_node(i, "prop") for i in ("out", "a")]
        edges = [make_edge("a", "out"), make_edge("out", "a")]
        snapshot = GraphSnapshot.of(nodes, edges)
        assert _ids(snapshot) == ["a"]

    def test_dangling_edge_skipped(self) -> None:
        """Edges from IDs missing in the snapshot are ignored."""
        nodes = [make_node("out", "output"), make_node("a", "prop")]
        snapshot = GraphSnapshot.of(nodes, [make_edge("ghost", "out"), make_edge("a", "out")])
        assert _ids(snapshot) == ["a"]

    def test_roles_from_handles(self) -> None:
        """Each direct input takes the role of its edge's target handle."""
        nodes = [
            make_node("out", "output"),
            make_node("char", "character"),
            make_node("ref", "reference"),
            make_node("params", "parameters"),
        ]
        edges = [
            make_edge("char", "out"),
            make_edge("ref", "out", "reference"),
            make_edge("params", "out", "config"),
        ]
        roles = {e.node.id: e.role for e in collect_upstream("out", GraphSnapshot.of(nodes, edges))}
        assert roles == {
            "char": IncomingRole.NARRATIVE,
            "ref": IncomingRole.REFERENCE,
            "params": IncomingRole.CONFIG,
        }

    def test_non_narrative_role_inherited(self) -> None:
        """Everything above a reference-role node stays reference-role."""
        nodes = [make_node(i, "character") for i in ("out", "ref", "above")]
        edges = [make_edge("ref", "out", "reference"), make_edge("above", "ref")]
        roles = {e.node.id: e.role for e in collect_upstream("out", GraphSnapshot.of(nodes, edges))}
        assert roles["above"] is IncomingRole.REFERENCE

    def test_narrative_node_passes_on_edge_role(self) -> None:
        """Above a narrative node the next edge's handle decides the role."""
        nodes = [make_node(i, "prop") for i in ("out", "mid", "cfg")]
        edges = [make_edge("mid", "out"), make_edge("cfg", "mid", "config")]
        roles = {e.node.id: e.role for e in collect_upstream("out", GraphSnapshot.of(nodes, edges))}
        assert roles == {"mid": IncomingRole.NARRATIVE, "cfg": IncomingRole.CONFIG}

    def test_first_discovery_decides_role(self) -> None:
        """A node reachable through two handles keeps the role it was found with."""
        nodes = [make_node("out", "output"), make_node("img", "reference")]
        edges = [make_edge("img", "out", "reference"), make_edge("img", "out")]
        (entry,) = collect_upstream("out", GraphSnapshot.of(nodes, edges))
        assert entry.role is IncomingRole.REFERENCE

    def test_intercept_is_a_boundary(self) -> None:
        """An upstream intercept is collected but not expanded."""
        nodes = [
            make_node("out", "output"),
            make_node("icpt", "intercept"),
            make_node("char", "character"),
        ]
        edges = [make_edge("icpt", "out"), make_edge("char", "icpt")]
        snapshot = GraphSnapshot.of(nodes, edges)
        assert _ids(snapshot) == ["icpt"]
        assert _ids(snapshot, sink="icpt") == ["char"]

    def test_expand_intercepts_walks_through(self) -> None:
        """With expand_intercepts the walk continues past intercepts, keeping roles."""
        nodes = [
            make_node("out", "output"),
            make_node("icpt", "intercept"),
            make_node("char", "character"),
            make_node("params", "parameters"),
        ]
        edges = [
            make_edge("icpt", "out"),
            make_edge("char", "icpt"),
            make_edge("params", "icpt", "config"),
        ]
        upstream = collect_upstream("out", GraphSnapshot.of(nodes, edges), expand_intercepts=True)

        assert [(e.node.id, e.role, e.depth) for e in upstream] == [
            ("icpt", IncomingRole.NARRATIVE, 1),
            ("char", IncomingRole.NARRATIVE, 2),
            ("params", IncomingRole.CONFIG, 2),
        ]

    def test_does_not_include_sink(self, scene_snapshot: GraphSnapshot) -> None:
        """The sink itself is never part of its own upstream."""
        assert "out" not in _ids(scene_snapshot)
