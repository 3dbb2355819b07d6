"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from promptweave.graph import GraphSnapshot
from tests.fixtures.graphs import make_edge, make_node


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def scene_snapshot() -> GraphSnapshot:
    """Shot + character + setting + negative + parameters feeding one output."""
    nodes = [
        make_node("out", "output", status="idle"),
        make_node("shot", "shot", preset="close-up"),
        make_node("mira", "character", name="Mira", description="tall woman, cybernetic eye"),
        make_node("alley", "setting", name="Alley", description="rain-slick neon alley"),
        make_node("neg", "negative", content="blurry, low quality"),
        make_node("params", "parameters", model="flux-dev", aspect_ratio="16:9", seed=42),
    ]
    edges = [
        make_edge("mira", "out"),
        make_edge("alley", "out"),
        make_edge("shot", "out"),
        make_edge("neg", "out", "config"),
        make_edge("params", "out", "config"),
    ]
    return GraphSnapshot.of(nodes, edges)


@pytest.fixture
def canvas_export() -> dict[str, Any]:
    """Snapshot in the canvas JSON format, with camelCase payload keys."""
    return {
        "nodes": [
            {"id": "out", "type": "output", "position": {"x": 0, "y": 0}, "data": {}},
            {
                "id": "era",
                "type": "timeperiod",
                "position": {"x": -200, "y": 0},
                "data": {"label": "Time Period", "eraPreset": "victorian", "useAutoNegatives": True},
            },
            {
                "id": "params",
                "type": "parameters",
                "data": {"model": "gemini-pro", "aspectRatio": "3:2", "numberOfImages": 2},
            },
        ],
        "edges": [
            {"id": "e1", "source": "era", "target": "out", "sourceHandle": None, "targetHandle": None},
            {"id": "e2", "source": "params", "target": "out", "targetHandle": "config"},
        ],
    }


@pytest.fixture
def snapshot_file(tmp_path: Path, canvas_export: dict[str, Any]) -> Path:
    """Write the canvas export fixture to disk."""
    path = tmp_path / "board.json"
    path.write_text(json.dumps(canvas_export), encoding="utf-8")
    return path
