"""Graph snapshot error types.

Assembly itself never raises for a well-formed snapshot. These errors are
raised at the boundary where a snapshot is built or loaded, before any
traversal happens.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path  # noqa: TC003 - dataclass field type


class SnapshotError(Exception):
    """Base class for malformed graph snapshots."""


@dataclass
class DuplicateNodeError(SnapshotError):
    """Raised when two nodes in one snapshot share an ID.

    Attributes:
        node_id: The ID that appears more than once.
    """

    node_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Node '{self.node_id}' appears more than once in the snapshot")


@dataclass
class SnapshotLoadError(SnapshotError):
    """Raised when a snapshot file cannot be read or parsed.

    Attributes:
        path: Path of the snapshot file.
        reason: Human-readable description of the failure.
    """

    path: Path
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"Failed to load graph snapshot at {self.path}: {self.reason}")
