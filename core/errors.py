"""Error types raised by the reasoning bank."""

from __future__ import annotations


class ReasoningBankError(Exception):
    """Base class for reasoning bank failures."""


class IncompleteTrajectoryError(ReasoningBankError):
    """Raised when a trajectory that is still in progress is judged."""

    def __init__(self, trajectory_id: str) -> None:
        super().__init__(f"Cannot judge incomplete trajectory: {trajectory_id}")
        self.trajectory_id = trajectory_id


class VectorIndexError(ReasoningBankError):
    """Raised by vector index adapters when the backing service fails."""
