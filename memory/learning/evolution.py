"""Pattern creation, evolution and lookup."""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import Any

from core.event_bus import PATTERN_EVOLVED, EventBus
from memory.scoring import cosine_similarity
from memory.stores.pattern_store import PatternStore
from memory.stores.trajectory_store import TrajectoryStore
from memory.types.distilled import DistilledMemory
from memory.types.pattern import EvolutionRecord, EvolutionType, Pattern
from memory.types.trajectory import Trajectory

logger = logging.getLogger("rb.evolution")

IMPROVEMENT_DELTA = 0.05
DECLINE_DELTA = -0.1


def pattern_name(strategy: str) -> str:
    """Slug built from the first four words of a strategy."""
    words = strategy.split(" ")[:4]
    return re.sub(r"[^a-z0-9_]", "", "_".join(words).lower())


def evolution_type(previous: float, current: float) -> EvolutionType:
    delta = current - previous
    if delta > IMPROVEMENT_DELTA:
        return "improvement"
    if delta < DECLINE_DELTA:
        return "prune"
    return "improvement"


class PatternEvolver:
    """Creates patterns from memories and tracks their quality over time."""

    def __init__(
        self,
        pattern_store: PatternStore,
        trajectory_store: TrajectoryStore,
        event_bus: EventBus | None = None,
    ) -> None:
        self.pattern_store = pattern_store
        self.trajectory_store = trajectory_store
        self.event_bus = event_bus if event_bus is not None else EventBus()

    def memory_to_pattern(self, memory: DistilledMemory) -> Pattern:
        """Seed a new pattern from a distilled memory and store it."""
        trajectory = self.trajectory_store.get(memory.trajectory_id)
        now = datetime.now(UTC)
        pattern = Pattern(
            pattern_id=f"pat_{memory.memory_id}",
            name=pattern_name(memory.strategy),
            domain=(trajectory.domain if trajectory is not None else "") or "general",
            embedding=list(memory.embedding),
            strategy=memory.strategy,
            success_rate=memory.quality,
            usage_count=memory.usage_count,
            quality_history=[memory.quality],
            evolution_history=[],
            created_at=now,
            updated_at=now,
        )
        self.pattern_store.add(pattern)
        return pattern

    def evolve_pattern(self, pattern_id: str, new_experience: Trajectory) -> None:
        """Fold a new experience's quality into a pattern's history."""
        pattern = self.pattern_store.get(pattern_id)
        if pattern is None:
            logger.debug("Pattern %s not found; nothing to evolve", pattern_id)
            return

        previous = pattern.success_rate
        pattern.record_quality([new_experience.quality_score])
        pattern.usage_count += 1
        pattern.updated_at = datetime.now(UTC)

        kind = evolution_type(previous, pattern.success_rate)
        pattern.evolution_history.append(
            EvolutionRecord(
                timestamp=pattern.updated_at,
                type=kind,
                previous_quality=previous,
                new_quality=pattern.success_rate,
                description=f"Updated based on trajectory {new_experience.trajectory_id}",
            )
        )
        self.event_bus.emit(PATTERN_EVOLVED, pattern_id=pattern_id, evolution_type=kind)

    def find_patterns(self, query_embedding: list[float], k: int = 5) -> list[Pattern]:
        """Top-k patterns by cosine similarity to the query."""
        scored = [
            (cosine_similarity(query_embedding, pattern.embedding), pattern)
            for pattern in self.pattern_store.list_all()
        ]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [pattern for _, pattern in scored[: max(0, k)]]

    def get_patterns(self) -> list[Pattern]:
        return self.pattern_store.list_all()

    def export_patterns(self) -> list[dict[str, Any]]:
        """JSON-ready snapshot of every pattern."""
        return [pattern.model_dump(mode="json") for pattern in self.pattern_store.list_all()]
