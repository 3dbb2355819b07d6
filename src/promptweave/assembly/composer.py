"""Section composition.

Orders fragments by a fixed category precedence and joins them into the
positive and negative prompt strings. Traversal order only breaks ties
inside a category.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from promptweave.assembly.fragments import Fragment, FragmentCategory
from promptweave.config import AssemblyConfig

if TYPE_CHECKING:
    from collections.abc import Iterable

# Framing forms the lead-in; the rest form the body in this order.
POSITIVE_PRECEDENCE: tuple[FragmentCategory, ...] = (
    FragmentCategory.FRAMING,
    FragmentCategory.COMPOSED,
    FragmentCategory.SUBJECT,
    FragmentCategory.OUTFIT,
    FragmentCategory.SETTING,
    FragmentCategory.PROP,
    FragmentCategory.EXTRAS,
    FragmentCategory.TIME_PERIOD,
    FragmentCategory.STYLE,
    FragmentCategory.ACTION,
    FragmentCategory.REFINEMENT,
)


@dataclass(frozen=True)
class ComposedSections:
    """Output of :func:`compose_sections`.

    Attributes:
        prompt: Positive prompt.
        negative_prompt: Negative prompt.
        ordered: Positive fragments in final order.
    """

    prompt: str
    negative_prompt: str
    ordered: tuple[Fragment, ...]


def compose_sections(
    fragments: Iterable[Fragment],
    config: AssemblyConfig | None = None,
) -> ComposedSections:
    """Compose fragments into prompt strings.

    Args:
        fragments: Fragments in traversal order.
        config: Separator settings. Defaults to :class:`AssemblyConfig`.

    Returns:
        Composed prompt, negative prompt and the ordered positive fragments.
    """
    cfg = config or AssemblyConfig()

    grouped: dict[FragmentCategory, list[Fragment]] = defaultdict(list)
    negatives: list[str] = []
    for fragment in fragments:
        if fragment.is_negative:
            negatives.append(fragment.text)
        else:
            grouped[fragment.category].append(fragment)

    ordered = tuple(f for category in POSITIVE_PRECEDENCE for f in grouped.get(category, []))

    lead_in = cfg.framing_separator.join(f.text for f in grouped.get(FragmentCategory.FRAMING, []))
    body = cfg.fragment_separator.join(
        f.text for f in ordered if f.category is not FragmentCategory.FRAMING
    )
    prompt = cfg.lead_in_separator.join(part for part in (lead_in, body) if part)

    return ComposedSections(
        prompt=prompt,
        negative_prompt=cfg.negative_separator.join(negatives),
        ordered=ordered,
    )
