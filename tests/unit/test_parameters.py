"""Tests for generation parameter resolution."""

from __future__ import annotations

from typing import Any

import pytest

from promptweave.assembly.parameters import (
    GenerationParameters,
    parameters_from_payload,
    resolve_parameters,
)
from promptweave.config import AssemblyConfig
from promptweave.graph import GraphSnapshot, collect_upstream
from tests.fixtures.graphs import make_edge, make_node


def _resolve(nodes: list[Any], edges: list[Any], config: AssemblyConfig | None = None) -> GenerationParameters:
    snapshot = GraphSnapshot.of([make_node("out", "output"), *nodes], edges)
    return resolve_parameters(collect_upstream("out", snapshot), config)


class TestParametersFromPayload:
    """Test reading a Parameters node payload."""

    def test_full_payload(self) -> None:
        """Test every field is read from a complete payload."""
        params = parameters_from_payload(
            {
                "model": "gemini-pro",
                "aspect_ratio": "16:9",
                "resolution": "2K",
                "seed": 1234,
                "temperature": 0.7,
                "image_count": 3,
            }
        )
        assert params == GenerationParameters(
            model="gemini-pro",
            aspect_ratio="16:9",
            resolution="2K",
            seed=1234,
            temperature=0.7,
            image_count=3,
        )

    def test_missing_fields_use_defaults(self) -> None:
        """Test missing model and aspect ratio fall back to config defaults."""
        params = parameters_from_payload({}, AssemblyConfig(default_model="flux-dev"))
        assert params.model == "flux-dev"
        assert params.aspect_ratio == "1:1"
        assert params.seed is None

    def test_number_of_images_alias(self) -> None:
        """Test number_of_images is accepted for image_count."""
        assert parameters_from_payload({"number_of_images": 2}).image_count == 2

    @pytest.mark.parametrize(
        ("payload", "field"),
        [
            ({"seed": "42"}, "seed"),
            ({"seed": True}, "seed"),
            ({"temperature": 2.5}, "temperature"),
            ({"temperature": -0.1}, "temperature"),
            ({"temperature": "hot"}, "temperature"),
            ({"image_count": 0}, "image_count"),
            ({"image_count": 9}, "image_count"),
            ({"resolution": "8K"}, "resolution"),
        ],
    )
    def test_invalid_values_unset(self, payload: dict[str, Any], field: str) -> None:
        """Test out-of-range or mistyped values are left unset."""
        assert getattr(parameters_from_payload(payload), field) is None

    def test_integer_temperature_accepted(self) -> None:
        """Test an integer temperature is read as a float."""
        assert parameters_from_payload({"temperature": 1}).temperature == 1.0

    def test_to_dict_omits_unset(self) -> None:
        """Test to_dict drops unset parameters."""
        params = GenerationParameters(model="mock", aspect_ratio="1:1", seed=7)
        assert params.to_dict() == {"model": "mock", "aspect_ratio": "1:1", "seed": 7}


class TestResolveParameters:
    """Test choosing the effective Parameters node."""

    def test_defaults_without_parameters_node(self) -> None:
        """Test defaults apply without a Parameters node."""
        params = _resolve([make_node("c", "character", name="Mira")], [make_edge("c", "out")])
        assert params == GenerationParameters(model="mock", aspect_ratio="1:1")

    def test_configured_defaults(self) -> None:
        """Test defaults come from the config."""
        config = AssemblyConfig(default_model="sdxl-turbo", default_aspect_ratio="9:16")
        params = _resolve([], [], config)
        assert params == GenerationParameters(model="sdxl-turbo", aspect_ratio="9:16")

    def test_config_role(self) -> None:
        """Test a Parameters node on a config handle is used."""
        params = _resolve(
            [make_node("p", "parameters", model="flux-dev", seed=9)],
            [make_edge("p", "out", "config")],
        )
        assert params.model == "flux-dev"
        assert params.seed == 9

    def test_narrative_role(self) -> None:
        """Test a Parameters node on a narrative handle is used."""
        params = _resolve([make_node("p", "parameters", model="turbo")], [make_edge("p", "out")])
        assert params.model == "turbo"

    def test_reference_role_ignored(self) -> None:
        """Test a Parameters node on a reference handle is ignored."""
        params = _resolve(
            [make_node("p", "parameters", model="turbo")],
            [make_edge("p", "out", "reference")],
        )
        assert params.model == "mock"

    def test_first_discovered_wins(self) -> None:
        """Test the first Parameters node in discovery order wins."""
        nodes = [
            make_node("p1", "parameters", model="flux-dev"),
            make_node("p2", "parameters", model="gemini-flash"),
        ]
        params = _resolve(nodes, [make_edge("p2", "out", "config"), make_edge("p1", "out", "config")])
        assert params.model == "gemini-flash"

    def test_nearer_parameters_win_over_deeper(self) -> None:
        """Breadth-first order makes the closer node authoritative."""
        nodes = [
            make_node("mid", "character", name="Mira"),
            make_node("deep", "parameters", model="flux-dev"),
            make_node("near", "parameters", model="turbo"),
        ]
        edges = [
            make_edge("mid", "out"),
            make_edge("deep", "mid"),
            make_edge("near", "out", "config"),
        ]
        assert _resolve(nodes, edges).model == "turbo"
