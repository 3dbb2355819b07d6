"""Override state for intercept nodes.

An intercept node holds an editable shadow of the assembled prompt and
negative prompt. Each field is a two-state machine:

- **Auto** (``is_edited=False``): the field follows the assembled value.
- **Edited** (``is_edited=True``): the user's text is kept; reassembly only
  moves the baseline underneath it.

Transitions:

=================  ==============================================================
``reassemble``     Auto: edited and assembled both take the new value.
                   Edited: only assembled changes; ``is_edited`` is untouched.
``user_edit``      edited takes the typed text; ``is_edited`` is recomputed.
``reset``          edited takes the assembled value; back to Auto.
``manual_refresh`` reassemble, then reset both fields.
=================  ==============================================================

Records are immutable; every transition returns a new record.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from promptweave.config import AssemblyConfig
from promptweave.observability.logging import get_logger

if TYPE_CHECKING:
    from promptweave.assembly.assembler import AssemblyResult
    from promptweave.graph.snapshot import GraphSnapshot

log = get_logger(__name__)


class FieldOverride(BaseModel):
    """Override record for one field of one intercept node."""

    model_config = ConfigDict(frozen=True)

    assembled_value: str = ""
    edited_value: str = ""
    is_edited: bool = False

    def reassemble(self, assembled: str) -> FieldOverride:
        """Move the baseline, keeping any user divergence."""
        if self.is_edited:
            return self.model_copy(update={"assembled_value": assembled})
        return FieldOverride(assembled_value=assembled, edited_value=assembled, is_edited=False)

    def user_edit(self, text: str) -> FieldOverride:
        """Apply typed text. Typing the assembled text back returns to Auto."""
        return self.model_copy(
            update={"edited_value": text, "is_edited": text != self.assembled_value}
        )

    def reset(self) -> FieldOverride:
        """Discard the user's edit."""
        return self.model_copy(update={"edited_value": self.assembled_value, "is_edited": False})

    @property
    def effective_value(self) -> str:
        """The value consumed downstream: edited text, else the assembled text."""
        return self.edited_value or self.assembled_value

    def display_value(self, placeholder: str) -> str:
        """The value to show, falling back to *placeholder* when both are empty."""
        return self.effective_value or placeholder


class InterceptState(BaseModel):
    """Override records for both tracked fields of an intercept node."""

    model_config = ConfigDict(frozen=True)

    prompt: FieldOverride = FieldOverride()
    negative: FieldOverride = FieldOverride()

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> InterceptState:
        """Read override state stored in an intercept node's payload.

        Missing or mistyped keys fall back to an empty Auto record.
        """

        def text(key: str) -> str:
            value = data.get(key)
            return value if isinstance(value, str) else ""

        return cls(
            prompt=FieldOverride(
                assembled_value=text("assembled_prompt"),
                edited_value=text("edited_prompt"),
                is_edited=data.get("is_edited") is True,
            ),
            negative=FieldOverride(
                assembled_value=text("assembled_negative"),
                edited_value=text("edited_negative"),
                is_edited=data.get("is_negative_edited") is True,
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the payload fields the graph store persists for this state."""
        return {
            "assembled_prompt": self.prompt.assembled_value,
            "edited_prompt": self.prompt.edited_value,
            "is_edited": self.prompt.is_edited,
            "assembled_negative": self.negative.assembled_value,
            "edited_negative": self.negative.edited_value,
            "is_negative_edited": self.negative.is_edited,
        }

    def reassemble(self, prompt: str, negative: str) -> InterceptState:
        return InterceptState(
            prompt=self.prompt.reassemble(prompt),
            negative=self.negative.reassemble(negative),
        )

    def manual_refresh(self, prompt: str, negative: str) -> InterceptState:
        """Reassemble and discard pending edits on both fields."""
        refreshed = self.reassemble(prompt, negative)
        return InterceptState(prompt=refreshed.prompt.reset(), negative=refreshed.negative.reset())

    def edit_prompt(self, text: str) -> InterceptState:
        return self.model_copy(update={"prompt": self.prompt.user_edit(text)})

    def edit_negative(self, text: str) -> InterceptState:
        return self.model_copy(update={"negative": self.negative.user_edit(text)})

    def reset_prompt(self) -> InterceptState:
        return self.model_copy(update={"prompt": self.prompt.reset()})

    def reset_negative(self) -> InterceptState:
        return self.model_copy(update={"negative": self.negative.reset()})


class InterceptController:
    """Host-side driver for one intercept node.

    Keeps the node's override state and the last assembled values it saw.
    The host calls :meth:`sync` whenever the graph may have changed; the
    Reassemble transition only runs when the assembled text differs from
    what was last seen.

    Attributes:
        node_id: ID of the intercept node.
        state: Current override state.
    """

    def __init__(
        self,
        node_id: str,
        state: InterceptState | None = None,
        config: AssemblyConfig | None = None,
    ) -> None:
        self.node_id = node_id
        self.state = state or InterceptState()
        self._config = config or AssemblyConfig()
        self._last_seen = (self.state.prompt.assembled_value, self.state.negative.assembled_value)

    @classmethod
    def for_node(
        cls,
        snapshot: GraphSnapshot,
        node_id: str,
        config: AssemblyConfig | None = None,
    ) -> InterceptController:
        """Create a controller seeded from the node's stored payload."""
        node = snapshot.get_node(node_id)
        state = InterceptState.from_payload(node.data) if node is not None else InterceptState()
        return cls(node_id, state=state, config=config)

    def _assemble(self, snapshot: GraphSnapshot) -> AssemblyResult:
        from promptweave.assembly.assembler import assemble_snapshot

        return assemble_snapshot(self.node_id, snapshot, self._config)

    def sync(self, snapshot: GraphSnapshot) -> bool:
        """Reassemble from *snapshot* if the upstream output changed.

        Returns:
            True if the assembled prompt or negative changed.
        """
        result = self._assemble(snapshot)
        seen = (result.prompt, result.negative_prompt)
        if seen == self._last_seen:
            return False

        self._last_seen = seen
        self.state = self.state.reassemble(result.prompt, result.negative_prompt)
        log.debug(
            "intercept_reassembled",
            node=self.node_id,
            prompt_edited=self.state.prompt.is_edited,
            negative_edited=self.state.negative.is_edited,
        )
        return True

    def refresh(self, snapshot: GraphSnapshot) -> None:
        """Force a reassemble and discard edits on both fields."""
        result = self._assemble(snapshot)
        self._last_seen = (result.prompt, result.negative_prompt)
        self.state = self.state.manual_refresh(result.prompt, result.negative_prompt)

    def edit_prompt(self, text: str) -> None:
        self.state = self.state.edit_prompt(text)

    def edit_negative(self, text: str) -> None:
        self.state = self.state.edit_negative(text)

    def reset_prompt(self) -> None:
        self.state = self.state.reset_prompt()

    def reset_negative(self) -> None:
        self.state = self.state.reset_negative()

    @property
    def display_prompt(self) -> str:
        return self.state.prompt.display_value(self._config.placeholder)

    @property
    def display_negative(self) -> str:
        return self.state.negative.effective_value
