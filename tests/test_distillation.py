"""Distillation engine tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from core.errors import IncompleteTrajectoryError, VectorIndexError
from memory.learning.distiller import Distiller, aggregate_embedding, extract_strategy
from memory.learning.judge import TrajectoryJudge
from memory.stores.memory_store import MemoryStore
from memory.stores.vector_index import InMemoryVectorIndex, VectorIndex
from memory.types.trajectory import Trajectory, TrajectoryStep, TrajectoryVerdict


def build_trajectory(
    actions: list[str],
    rewards: list[float],
    quality: float,
    trajectory_id: str = "traj-1",
    domain: str = "general",
    complete: bool = True,
) -> Trajectory:
    steps = [
        TrajectoryStep(action=action, reward=reward, state_after=[1.0, 0.0])
        for action, reward in zip(actions, rewards)
    ]
    return Trajectory(
        trajectory_id=trajectory_id,
        domain=domain,
        steps=steps,
        is_complete=complete,
        quality_score=quality,
    )


def build_distiller(vector_index: VectorIndex | None = None) -> tuple[Distiller, MemoryStore]:
    store = MemoryStore()
    distiller = Distiller(
        judge=TrajectoryJudge(distillation_threshold=0.6),
        memory_store=store,
        vector_index=vector_index,
        distillation_threshold=0.6,
        vector_dimension=2,
    )
    return distiller, store


def test_successful_trajectory_is_distilled() -> None:
    distiller, store = build_distiller()
    trajectory = build_trajectory(["search", "read", "answer"], [0.8, 0.9, 0.7], 0.75, domain="qa")

    memory = distiller.distill(trajectory)

    assert memory is not None
    assert memory.memory_id.startswith("mem_")
    assert memory.strategy == "Apply search -> read -> answer"
    for action in ("search", "read", "answer"):
        assert action in memory.strategy
    assert memory.key_learnings[0] == "Successful approach for qa domain"
    assert memory.quality == pytest.approx(0.75)
    assert trajectory.distilled_memory is memory
    entry = store.get(memory.memory_id)
    assert entry is not None
    assert entry.trajectory is trajectory
    assert entry.consolidated is False


def test_low_quality_trajectory_is_not_distilled() -> None:
    distiller, store = build_distiller()
    trajectory = build_trajectory(["search", "read"], [0.8, 0.9], 0.4)

    assert distiller.distill(trajectory) is None
    assert len(store) == 0
    assert trajectory.verdict is not None
    assert trajectory.distilled_memory is None


def test_quality_gate_applies_even_to_successful_verdicts() -> None:
    distiller, store = build_distiller()
    trajectory = build_trajectory(["search", "read"], [0.8, 0.9], 0.4)
    trajectory.verdict = TrajectoryVerdict(success=True, confidence=0.9, relevance_score=0.5)

    assert distiller.distill(trajectory) is None
    assert len(store) == 0
    assert trajectory.distilled_memory is None


def test_incomplete_trajectory_propagates_error() -> None:
    distiller, _ = build_distiller()
    trajectory = build_trajectory(["search"], [0.9], 0.9, complete=False)
    with pytest.raises(IncompleteTrajectoryError):
        distiller.distill(trajectory)


def test_long_strategies_are_summarized() -> None:
    trajectory = build_trajectory(["a", "b", "a", "c", "d", "e"], [0.9] * 6, 0.9)
    assert extract_strategy(trajectory) == "Multi-step approach: a, b, c..."


def test_embedding_weights_later_steps_more() -> None:
    trajectory = Trajectory(
        trajectory_id="t",
        is_complete=True,
        steps=[
            TrajectoryStep(action="x", reward=0.9, state_after=[1.0, 0.0]),
            TrajectoryStep(action="y", reward=0.9, state_after=[0.0, 1.0]),
        ],
    )
    assert aggregate_embedding(trajectory, 2) == pytest.approx([1 / 3, 2 / 3])
    assert aggregate_embedding(Trajectory(trajectory_id="empty"), 4) == [0.0] * 4


def test_distilled_memory_is_mirrored_into_index() -> None:
    index = InMemoryVectorIndex(dimension=2)
    index.initialize()
    distiller, _ = build_distiller(index)

    memory = distiller.distill(build_trajectory(["a"], [0.9], 0.9))

    assert memory is not None
    assert len(index) == 1
    hits = index.search([1.0, 0.0], 1)
    assert hits[0]["id"] == memory.memory_id


def test_index_failure_does_not_block_distillation() -> None:
    index = MagicMock(spec=VectorIndex)
    index.is_available.return_value = True
    index.store.side_effect = VectorIndexError("down")
    distiller, store = build_distiller(index)

    memory = distiller.distill(build_trajectory(["a"], [0.9], 0.9))

    assert memory is not None
    assert memory.memory_id in store
    index.store.assert_called_once()


def test_unexpected_mirror_failure_is_ignored() -> None:
    index = MagicMock(spec=VectorIndex)
    index.is_available.return_value = True
    index.store.side_effect = RuntimeError("adapter bug")
    distiller, store = build_distiller(index)
    trajectory = build_trajectory(["a"], [0.9], 0.9)

    memory = distiller.distill(trajectory)

    assert memory is not None
    assert memory.memory_id in store
    assert trajectory.distilled_memory is memory
