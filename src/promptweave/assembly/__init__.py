"""Assembly package - graph-to-request prompt assembly and override state."""

from promptweave.assembly.assembler import (
    AssemblyResult,
    ReferenceImage,
    assemble,
    assemble_snapshot,
)
from promptweave.assembly.composer import POSITIVE_PRECEDENCE, ComposedSections, compose_sections
from promptweave.assembly.fragments import (
    FRAGMENT_PRODUCERS,
    Fragment,
    FragmentCategory,
    produce_fragments,
)
from promptweave.assembly.intercept import FieldOverride, InterceptController, InterceptState
from promptweave.assembly.parameters import (
    GenerationParameters,
    parameters_from_payload,
    resolve_parameters,
)

__all__ = [
    "FRAGMENT_PRODUCERS",
    "POSITIVE_PRECEDENCE",
    "AssemblyResult",
    "ComposedSections",
    "FieldOverride",
    "Fragment",
    "FragmentCategory",
    "GenerationParameters",
    "InterceptController",
    "InterceptState",
    "ReferenceImage",
    "assemble",
    "assemble_snapshot",
    "compose_sections",
    "parameters_from_payload",
    "produce_fragments",
    "resolve_parameters",
]
