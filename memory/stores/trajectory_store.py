"""Capacity-bounded trajectory store."""

from __future__ import annotations

import logging

from memory.types.trajectory import Trajectory

logger = logging.getLogger("rb.trajectory_store")

RETAIN_RATIO = 0.8


class TrajectoryStore:
    """Owns trajectories by id and evicts the lowest quality ones under pressure."""

    def __init__(self, max_trajectories: int = 5000) -> None:
        self.max_trajectories = max_trajectories
        self._trajectories: dict[str, Trajectory] = {}

    def store(self, trajectory: Trajectory) -> None:
        """Insert or overwrite a trajectory, pruning if over capacity."""
        self._trajectories[trajectory.trajectory_id] = trajectory
        if len(self._trajectories) > self.max_trajectories:
            self._prune()

    def _prune(self) -> None:
        ranked = sorted(self._trajectories.values(), key=lambda t: t.quality_score)
        target = int(self.max_trajectories * RETAIN_RATIO)
        to_remove = len(ranked) - target
        for trajectory in ranked[:to_remove]:
            del self._trajectories[trajectory.trajectory_id]
        logger.debug("Evicted %d low-quality trajectories", max(0, to_remove))

    def get(self, trajectory_id: str) -> Trajectory | None:
        return self._trajectories.get(trajectory_id)

    def list_all(self) -> list[Trajectory]:
        return list(self._trajectories.values())

    def list_successful(self) -> list[Trajectory]:
        return [t for t in self._trajectories.values() if t.verdict is not None and t.verdict.success]

    def list_failed(self) -> list[Trajectory]:
        return [
            t
            for t in self._trajectories.values()
            if t.is_complete and t.verdict is not None and not t.verdict.success
        ]

    def domain_stats(self) -> dict[str, dict[str, int]]:
        """Trajectory and success counts grouped by domain."""
        stats: dict[str, dict[str, int]] = {}
        for trajectory in self._trajectories.values():
            bucket = stats.setdefault(trajectory.domain or "general", {"count": 0, "successes": 0})
            bucket["count"] += 1
            if trajectory.verdict is not None and trajectory.verdict.success:
                bucket["successes"] += 1
        return stats

    def __len__(self) -> int:
        return len(self._trajectories)

    def __contains__(self, trajectory_id: object) -> bool:
        return trajectory_id in self._trajectories
