"""Memory store entry wrapper."""

from __future__ import annotations

from pydantic import BaseModel

from memory.types.distilled import DistilledMemory
from memory.types.trajectory import Trajectory, TrajectoryVerdict


class MemoryEntry(BaseModel):
    """Distilled memory together with the trajectory it came from.

    ``consolidated`` is set by contradiction detection to mark a superseded
    entry without deleting it.
    """

    memory: DistilledMemory
    trajectory: Trajectory
    verdict: TrajectoryVerdict
    consolidated: bool = False
