"""Generation parameter resolution.

The first Parameters node reached (in collector order) through a narrative
or config handle is authoritative. Without one, the configured defaults
apply and the optional parameters stay unset.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from promptweave.assembly.fragments import text_field
from promptweave.assembly.presets import RESOLUTIONS
from promptweave.config import AssemblyConfig
from promptweave.graph.snapshot import NodeType
from promptweave.graph.traversal import IncomingRole
from promptweave.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from promptweave.graph.traversal import UpstreamNode

log = get_logger(__name__)

TEMPERATURE_RANGE = (0.0, 2.0)
IMAGE_COUNT_RANGE = (1, 4)


@dataclass(frozen=True)
class GenerationParameters:
    """Resolved parameter set for one generation request."""

    model: str
    aspect_ratio: str
    resolution: str | None = None
    seed: int | None = None
    temperature: float | None = None
    image_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the parameters with unset values omitted."""
        return {k: v for k, v in asdict(self).items() if v is not None}


def _int_field(payload: Mapping[str, Any], key: str) -> int | None:
    value = payload.get(key)
    # bool is an int subclass; a checkbox value is not a seed.
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _temperature(payload: Mapping[str, Any]) -> float | None:
    value = payload.get("temperature")
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    low, high = TEMPERATURE_RANGE
    return float(value) if low <= value <= high else None


def _image_count(payload: Mapping[str, Any]) -> int | None:
    count = _int_field(payload, "image_count")
    if count is None:
        count = _int_field(payload, "number_of_images")
    low, high = IMAGE_COUNT_RANGE
    if count is None or not low <= count <= high:
        return None
    return count


def parameters_from_payload(
    payload: Mapping[str, Any],
    config: AssemblyConfig | None = None,
) -> GenerationParameters:
    """Read a Parameters node payload, falling back to defaults per field.

    Args:
        payload: Parameters node payload (snake_case keys).
        config: Supplies the default model and aspect ratio.

    Returns:
        GenerationParameters with invalid optional values left unset.
    """
    cfg = config or AssemblyConfig()
    resolution = text_field(payload, "resolution")
    return GenerationParameters(
        model=text_field(payload, "model") or cfg.default_model,
        aspect_ratio=text_field(payload, "aspect_ratio") or cfg.default_aspect_ratio,
        resolution=resolution if resolution in RESOLUTIONS else None,
        seed=_int_field(payload, "seed"),
        temperature=_temperature(payload),
        image_count=_image_count(payload),
    )


def resolve_parameters(
    upstream: Sequence[UpstreamNode],
    config: AssemblyConfig | None = None,
) -> GenerationParameters:
    """Select the effective parameters for an assembly.

    Args:
        upstream: Collected nodes in discovery order.
        config: Supplies defaults when no Parameters node is reachable.

    Returns:
        Parameters from the first eligible Parameters node, or defaults.
    """
    cfg = config or AssemblyConfig()
    candidates = [
        entry
        for entry in upstream
        if entry.node.type == NodeType.PARAMETERS and entry.role is not IncomingRole.REFERENCE
    ]
    if not candidates:
        return GenerationParameters(model=cfg.default_model, aspect_ratio=cfg.default_aspect_ratio)

    chosen = candidates[0]
    if len(candidates) > 1:
        log.debug(
            "extra_parameters_ignored",
            chosen=chosen.node.id,
            ignored=[c.node.id for c in candidates[1:]],
        )
    return parameters_from_payload(chosen.node.data, cfg)
