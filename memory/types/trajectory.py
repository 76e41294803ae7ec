"""Trajectory memory models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from memory.types.distilled import DistilledMemory


class TrajectoryStep(BaseModel):
    """One action taken during an episode and the state it produced."""

    model_config = ConfigDict(frozen=True)

    action: str
    reward: float
    state_after: list[float] = Field(default_factory=list)


class TrajectoryVerdict(BaseModel):
    """Judged assessment of a completed trajectory."""

    success: bool
    confidence: float = Field(ge=0.0, le=1.0)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    relevance_score: float


class Trajectory(BaseModel):
    """Recorded episode of agent behavior."""

    trajectory_id: str
    domain: str = "general"
    steps: list[TrajectoryStep] = Field(default_factory=list)
    is_complete: bool = False
    quality_score: float = Field(default=0.0, ge=0.0, le=1.0)
    start_time: datetime = Field(default_factory=lambda: datetime.now(UTC))
    verdict: TrajectoryVerdict | None = None
    distilled_memory: DistilledMemory | None = None
