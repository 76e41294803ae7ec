"""Distilled strategy memory models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class DistilledMemory(BaseModel):
    """Reusable strategy extracted from one successful trajectory."""

    memory_id: str
    trajectory_id: str
    strategy: str
    key_learnings: list[str] = Field(default_factory=list)
    embedding: list[float] = Field(default_factory=list)
    quality: float = Field(ge=0.0, le=1.0)
    usage_count: int = Field(default=0, ge=0)
    last_used: datetime = Field(default_factory=lambda: datetime.now(UTC))
