"""Graph-to-request assembly.

:func:`assemble` turns the graph upstream of a sink into an
:class:`AssemblyResult`: positive prompt, negative prompt, resolved
parameters and reference images. It is a pure function of the snapshot it
is given; all I/O (generation calls, persistence) happens in the caller
after it returns.

Pipeline:
    1. Collect upstream nodes with their incoming roles.
    2. Produce fragments: narrative nodes feed both streams, config nodes
       feed only the negative stream, reference nodes feed neither.
       Upstream intercepts contribute their effective (possibly edited)
       output.
    3. Compose fragments by category precedence.
    4. Resolve parameters and gather reference images from everything
       reachable, walking through intercepts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from promptweave.assembly.composer import compose_sections
from promptweave.assembly.fragments import (
    Fragment,
    FragmentCategory,
    produce_fragments,
    text_field,
)
from promptweave.assembly.intercept import InterceptState
from promptweave.assembly.parameters import GenerationParameters, resolve_parameters
from promptweave.config import AssemblyConfig
from promptweave.graph.snapshot import GraphSnapshot, NodeType
from promptweave.graph.traversal import IncomingRole, collect_upstream
from promptweave.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from promptweave.graph.snapshot import Edge, Node
    from promptweave.graph.traversal import UpstreamNode

log = get_logger(__name__)


@dataclass(frozen=True)
class ReferenceImage:
    """An image reached through the graph, attached to the request as an asset.

    Attributes:
        node_id: ID of the Reference node.
        image: Image handle (data URL, blob key or URL) as stored on the node.
        image_type: Reference category (character, object, style).
        description: Optional note about what the image shows.
    """

    node_id: str
    image: str
    image_type: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {"image": self.image, "image_type": self.image_type}
        if self.description:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class AssemblyResult:
    """Immutable outcome of one assembly call."""

    prompt: str
    negative_prompt: str
    parameters: GenerationParameters
    reference_images: tuple[ReferenceImage, ...] = ()
    fragments: tuple[Fragment, ...] = field(default=(), compare=False)

    @property
    def is_empty(self) -> bool:
        """True when both prompt strings are empty."""
        return not self.prompt and not self.negative_prompt

    def to_request(self) -> dict[str, Any]:
        """Build the payload handed to an external generation client.

        The negative prompt is omitted when empty, unset parameters are
        omitted, and reference images are listed only when present.
        """
        request: dict[str, Any] = {"prompt": self.prompt, **self.parameters.to_dict()}
        if self.negative_prompt:
            request["negative_prompt"] = self.negative_prompt
        if self.reference_images:
            request["reference_images"] = [r.to_dict() for r in self.reference_images]
        return request


def _reference_image(node: Node) -> ReferenceImage | None:
    image = text_field(node.data, "image_url") or text_field(node.data, "image")
    if not image:
        return None
    return ReferenceImage(
        node_id=node.id,
        image=image,
        image_type=text_field(node.data, "image_type") or "character",
        description=text_field(node.data, "description") or None,
    )


def _intercept_fragments(
    node: Node,
    snapshot: GraphSnapshot,
    config: AssemblyConfig,
    active: frozenset[str],
) -> tuple[Fragment, ...]:
    """Effective output of an upstream intercept node.

    The intercept's baseline is assembled fresh from its own upstream and
    its stored override state is reconciled against it, so edits survive
    while Auto fields follow the graph. An intercept already being
    assembled further down the call stack uses its stored state as is.
    """
    state = InterceptState.from_payload(node.data)
    if node.id not in active:
        baseline = _assemble(node.id, snapshot, config, active | {node.id})
        state = state.reassemble(baseline.prompt, baseline.negative_prompt)
    else:
        log.debug("intercept_reentry", node=node.id)

    fragments: list[Fragment] = []
    if state.prompt.effective_value:
        fragments.append(Fragment(FragmentCategory.COMPOSED, state.prompt.effective_value))
    if state.negative.effective_value:
        fragments.append(Fragment(FragmentCategory.NEGATIVE, state.negative.effective_value))
    return tuple(fragments)


def _node_fragments(
    entry: UpstreamNode,
    snapshot: GraphSnapshot,
    config: AssemblyConfig,
    active: frozenset[str],
) -> tuple[Fragment, ...]:
    if entry.role is IncomingRole.REFERENCE:
        return ()

    node = entry.node
    if node.type == NodeType.INTERCEPT:
        fragments = _intercept_fragments(node, snapshot, config, active)
    else:
        fragments = produce_fragments(node.type, node.data)

    if entry.role is IncomingRole.CONFIG:
        return tuple(f for f in fragments if f.is_negative)
    return fragments


def _assemble(
    sink_id: str,
    snapshot: GraphSnapshot,
    config: AssemblyConfig,
    active: frozenset[str],
) -> AssemblyResult:
    if not snapshot.has_node(sink_id):
        log.warning("sink_not_found", sink=sink_id)

    upstream = collect_upstream(sink_id, snapshot)
    # Intercepts only shadow text; parameters and reference images behind
    # them still reach this sink.
    reachable = collect_upstream(sink_id, snapshot, expand_intercepts=True)

    fragments: list[Fragment] = []
    for entry in upstream:
        fragments.extend(_node_fragments(entry, snapshot, config, active))

    references: list[ReferenceImage] = []
    for entry in reachable:
        if entry.node.type == NodeType.REFERENCE:
            reference = _reference_image(entry.node)
            if reference is not None:
                references.append(reference)

    sections = compose_sections(fragments, config)
    result = AssemblyResult(
        prompt=sections.prompt,
        negative_prompt=sections.negative_prompt,
        parameters=resolve_parameters(reachable, config),
        reference_images=tuple(references),
        fragments=sections.ordered,
    )
    log.debug(
        "assembled",
        sink=sink_id,
        nodes=len(upstream),
        fragments=len(fragments),
        references=len(references),
    )
    return result


def assemble_snapshot(
    sink_id: str,
    snapshot: GraphSnapshot,
    config: AssemblyConfig | None = None,
) -> AssemblyResult:
    """Assemble the request for *sink_id* from a snapshot.

    Args:
        sink_id: ID of the output or intercept node to assemble for.
        snapshot: Immutable graph snapshot.
        config: Defaults and separators. Defaults to :class:`AssemblyConfig`.

    Returns:
        AssemblyResult. A sink with nothing upstream, or one that is not in
        the snapshot, yields empty strings and default parameters.
    """
    return _assemble(sink_id, snapshot, config or AssemblyConfig(), frozenset({sink_id}))


def assemble(
    sink_id: str,
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    config: AssemblyConfig | None = None,
) -> AssemblyResult:
    """Assemble the request for *sink_id* from node and edge collections.

    Convenience wrapper that snapshots the collections and calls
    :func:`assemble_snapshot`.
    """
    return assemble_snapshot(sink_id, GraphSnapshot.of(nodes, edges), config)
