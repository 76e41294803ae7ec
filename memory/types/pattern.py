"""Pattern memory models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

EvolutionType = Literal["improvement", "merge", "split", "prune"]

MAX_QUALITY_HISTORY = 100


class EvolutionRecord(BaseModel):
    """One change in a pattern's quality over time."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    type: EvolutionType
    previous_quality: float
    new_quality: float
    description: str = ""


class Pattern(BaseModel):
    """Generalized strategy aggregated from one or more memories."""

    pattern_id: str
    name: str
    domain: str = "general"
    embedding: list[float] = Field(default_factory=list)
    strategy: str
    success_rate: float = 0.0
    usage_count: int = Field(default=0, ge=0)
    quality_history: list[float] = Field(default_factory=list)
    evolution_history: list[EvolutionRecord] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def record_quality(self, values: list[float]) -> None:
        """Append quality samples, keep the newest ones and refresh the mean."""
        self.quality_history.extend(values)
        if len(self.quality_history) > MAX_QUALITY_HISTORY:
            self.quality_history = self.quality_history[-MAX_QUALITY_HISTORY:]
        if self.quality_history:
            self.success_rate = sum(self.quality_history) / len(self.quality_history)
