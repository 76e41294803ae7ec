"""Distillation of judged trajectories into reusable strategy memories."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from memory.learning.judge import TrajectoryJudge
from memory.scoring import weighted_mean, zero_vector
from memory.stores.memory_store import MemoryStore
from memory.stores.vector_index import NullVectorIndex, VectorIndex
from memory.types.distilled import DistilledMemory
from memory.types.entry import MemoryEntry
from memory.types.trajectory import Trajectory

logger = logging.getLogger("rb.distiller")

MAX_STRATEGY_ACTIONS = 3
MAX_LEARNING_DETAILS = 2


def extract_strategy(trajectory: Trajectory) -> str:
    """Summarize the distinct actions of a trajectory."""
    actions = list(dict.fromkeys(step.action for step in trajectory.steps))
    if len(actions) <= MAX_STRATEGY_ACTIONS:
        return f"Apply {' -> '.join(actions)}"
    return f"Multi-step approach: {', '.join(actions[:MAX_STRATEGY_ACTIONS])}..."


def extract_key_learnings(trajectory: Trajectory) -> list[str]:
    verdict = trajectory.verdict
    if verdict is None:
        return []
    if verdict.success:
        learnings = [f"Successful approach for {trajectory.domain} domain"]
        learnings.extend(f"Strength: {s}" for s in verdict.strengths[:MAX_LEARNING_DETAILS])
    else:
        learnings = ["Approach needs refinement"]
        learnings.extend(f"Improvement: {i}" for i in verdict.improvements[:MAX_LEARNING_DETAILS])
    return learnings


def aggregate_embedding(trajectory: Trajectory, dimension: int) -> list[float]:
    """Weighted average of step states; later steps weigh more."""
    steps = trajectory.steps
    if not steps:
        return zero_vector(dimension)
    count = len(steps)
    weights = [(i + 1) / count for i in range(count)]
    return weighted_mean([step.state_after for step in steps], weights)


class Distiller:
    """Turns successful trajectories into memory entries."""

    def __init__(
        self,
        judge: TrajectoryJudge,
        memory_store: MemoryStore,
        vector_index: VectorIndex | None = None,
        distillation_threshold: float = 0.6,
        vector_dimension: int = 768,
    ) -> None:
        self.judge = judge
        self.memory_store = memory_store
        self.vector_index = vector_index if vector_index is not None else NullVectorIndex()
        self.distillation_threshold = distillation_threshold
        self.vector_dimension = vector_dimension

    def distill(self, trajectory: Trajectory) -> DistilledMemory | None:
        """Distill a trajectory, judging it first when needed.

        Returns None when the trajectory is unsuccessful or below the quality
        threshold.
        """
        if trajectory.verdict is None:
            self.judge.judge(trajectory)
        verdict = trajectory.verdict
        if verdict is None or not verdict.success:
            return None
        if trajectory.quality_score < self.distillation_threshold:
            return None

        memory = DistilledMemory(
            memory_id=f"mem_{uuid.uuid4().hex}",
            trajectory_id=trajectory.trajectory_id,
            strategy=extract_strategy(trajectory),
            key_learnings=extract_key_learnings(trajectory),
            embedding=aggregate_embedding(trajectory, self.vector_dimension),
            quality=trajectory.quality_score,
            usage_count=0,
            last_used=datetime.now(UTC),
        )
        self.memory_store.add(
            MemoryEntry(memory=memory, trajectory=trajectory, verdict=verdict)
        )
        trajectory.distilled_memory = memory
        self._mirror(memory)
        return memory

    def _mirror(self, memory: DistilledMemory) -> None:
        if not self.vector_index.is_available():
            return
        try:
            self.vector_index.store(
                memory.memory_id,
                {
                    "content": memory.strategy,
                    "embedding": memory.embedding,
                    "metadata": {
                        "trajectory_id": memory.trajectory_id,
                        "quality": memory.quality,
                        "key_learnings": list(memory.key_learnings),
                        "usage_count": memory.usage_count,
                        "last_used": memory.last_used.isoformat(),
                    },
                },
            )
        except Exception as exc:
            logger.warning("Failed to mirror %s into vector index: %s", memory.memory_id, exc)
