"""Per-node-type fragment producers.

Each node type tag maps to one producer in :data:`FRAGMENT_PRODUCERS`. A
producer reads a node payload and returns the categorized text it
contributes: usually zero or one fragment, and up to two for a time period
(one positive, one negative). Adding a node type means adding a table
entry.

Producers never raise. Missing, empty or non-string fields are treated as
absent.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from promptweave.assembly.presets import (
    CAMERA_POSITION_AFTER_SHOT,
    CAMERA_POSITION_WITH_STYLE,
    CAMERA_SETTINGS,
    CUSTOM_ERA,
    ERA_AUTO_NEGATIVES,
    ERA_PRESET_LABELS,
    SHOT_PRESET_LABELS,
)
from promptweave.graph.snapshot import NodeType
from promptweave.observability.logging import get_logger

log = get_logger(__name__)


class FragmentCategory(StrEnum):
    """Where a fragment lands in the composed request."""

    FRAMING = "framing"
    COMPOSED = "composed"
    SUBJECT = "subject"
    OUTFIT = "outfit"
    SETTING = "setting"
    PROP = "prop"
    EXTRAS = "extras"
    TIME_PERIOD = "time_period"
    STYLE = "style"
    ACTION = "action"
    REFINEMENT = "refinement"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class Fragment:
    """A single categorized piece of text produced by one node."""

    category: FragmentCategory
    text: str

    @property
    def is_negative(self) -> bool:
        """True for fragments bound for the negative prompt."""
        return self.category is FragmentCategory.NEGATIVE


FragmentProducer = Callable[[Mapping[str, Any]], tuple[Fragment, ...]]


def text_field(payload: Mapping[str, Any], key: str) -> str:
    """Return a stripped string field, or "" when missing or not a string."""
    value = payload.get(key)
    if not isinstance(value, str):
        return ""
    return value.strip()


def _single(category: FragmentCategory, text: str) -> tuple[Fragment, ...]:
    return (Fragment(category, text),) if text else ()


def _named_description(category: FragmentCategory) -> FragmentProducer:
    """Producer for asset nodes carrying a name and a description."""

    def produce(payload: Mapping[str, Any]) -> tuple[Fragment, ...]:
        name = text_field(payload, "name")
        description = text_field(payload, "description")
        if name and description:
            return _single(category, f"{name}: {description}")
        return _single(category, name or description)

    return produce


def _free_text(category: FragmentCategory, *keys: str) -> FragmentProducer:
    """Producer emitting the first non-empty of *keys* verbatim."""

    def produce(payload: Mapping[str, Any]) -> tuple[Fragment, ...]:
        for key in keys:
            text = text_field(payload, key)
            if text:
                return _single(category, text)
        return ()

    return produce


def produce_shot(payload: Mapping[str, Any]) -> tuple[Fragment, ...]:
    """Preset label with an optional trailing note."""
    label = SHOT_PRESET_LABELS.get(text_field(payload, "preset"), "")
    note = text_field(payload, "description")
    return _single(FragmentCategory.FRAMING, ", ".join(p for p in (label, note) if p))


def produce_camera(payload: Mapping[str, Any]) -> tuple[Fragment, ...]:
    """Labels for every camera setting that differs from its default."""
    labels = []
    for key, table, default in CAMERA_SETTINGS:
        preset = text_field(payload, key) or default
        if preset != default and preset in table:
            labels.append(table[preset])

    position = text_field(payload, "prompt_position") or CAMERA_POSITION_AFTER_SHOT
    category = (
        FragmentCategory.STYLE
        if position == CAMERA_POSITION_WITH_STYLE
        else FragmentCategory.FRAMING
    )
    return _single(category, ", ".join(labels))


def produce_time_period(payload: Mapping[str, Any]) -> tuple[Fragment, ...]:
    """Era, region and notes; plus era auto-negatives and custom negatives.

    The only producer that can feed both the positive and negative streams.
    """
    preset = text_field(payload, "era_preset") or CUSTOM_ERA
    if preset == CUSTOM_ERA:
        era = text_field(payload, "custom_era")
    else:
        era = ERA_PRESET_LABELS.get(preset, "")

    positive_parts = [era, text_field(payload, "region"), text_field(payload, "description")]
    fragments = list(
        _single(FragmentCategory.TIME_PERIOD, ", ".join(p for p in positive_parts if p))
    )

    negative_terms: list[str] = []
    use_auto = payload.get("use_auto_negatives", True)
    if use_auto is True and preset != CUSTOM_ERA:
        negative_terms.extend(ERA_AUTO_NEGATIVES.get(preset, []))
    custom_negatives = text_field(payload, "custom_negatives")
    if custom_negatives:
        negative_terms.append(custom_negatives)
    fragments.extend(_single(FragmentCategory.NEGATIVE, ", ".join(negative_terms)))

    return tuple(fragments)


def _no_text(payload: Mapping[str, Any]) -> tuple[Fragment, ...]:
    return ()


FRAGMENT_PRODUCERS: dict[str, FragmentProducer] = {
    NodeType.CHARACTER: _named_description(FragmentCategory.SUBJECT),
    NodeType.OUTFIT: _named_description(FragmentCategory.OUTFIT),
    NodeType.SETTING: _named_description(FragmentCategory.SETTING),
    NodeType.PROP: _named_description(FragmentCategory.PROP),
    NodeType.EXTRAS: _named_description(FragmentCategory.EXTRAS),
    NodeType.STYLE: _named_description(FragmentCategory.STYLE),
    NodeType.SHOT: produce_shot,
    NodeType.CAMERA: produce_camera,
    NodeType.TIME_PERIOD: produce_time_period,
    NodeType.ACTION: _free_text(FragmentCategory.ACTION, "content"),
    NodeType.EDIT: _free_text(FragmentCategory.REFINEMENT, "refinement", "content"),
    NodeType.NEGATIVE: _free_text(FragmentCategory.NEGATIVE, "content"),
    # Handled by the parameter resolver, the reference path and the
    # intercept reconciliation respectively.
    NodeType.PARAMETERS: _no_text,
    NodeType.REFERENCE: _no_text,
    NodeType.INTERCEPT: _no_text,
    NodeType.OUTPUT: _no_text,
}


def produce_fragments(node_type: str, payload: Mapping[str, Any]) -> tuple[Fragment, ...]:
    """Dispatch a payload to its type's producer.

    Args:
        node_type: Node type tag.
        payload: Node payload (snake_case keys).

    Returns:
        Fragments in the order the producer emits them. Unknown type tags
        produce nothing.
    """
    producer = FRAGMENT_PRODUCERS.get(node_type)
    if producer is None:
        log.debug("unknown_node_type", node_type=node_type)
        return ()
    return producer(payload)
