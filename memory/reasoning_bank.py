"""Reasoning bank facade.

Wires the trajectory, memory and pattern stores to the learning pipeline
(retrieve, judge, distill, consolidate) and exposes events, stats and the
lifecycle of the optional external vector index.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from core.config import ReasoningBankConfig, load_config
from core.event_bus import MEMORY_CONSOLIDATED, TRAJECTORY_COMPLETED, EventBus, EventListener
from memory.consolidation.consolidator import Consolidator
from memory.consolidation.pair_scan import GroupedPairsScan, PairScan, memory_domain, pattern_domain
from memory.learning.distiller import Distiller
from memory.learning.evolution import PatternEvolver
from memory.learning.judge import TrajectoryJudge
from memory.retrieval import MemoryRetriever
from memory.stores.memory_store import MemoryStore
from memory.stores.pattern_store import PatternStore
from memory.stores.trajectory_store import TrajectoryStore
from memory.stores.vector_index import VectorIndex, build_vector_index
from memory.types.distilled import DistilledMemory
from memory.types.pattern import Pattern
from memory.types.results import ConsolidationResult, RetrievalResult
from memory.types.trajectory import Trajectory, TrajectoryVerdict

logger = logging.getLogger("rb.bank")

STAGES = ("retrieval", "judge", "distillation", "consolidation")
TOP_METRICS = 5


class ReasoningBank:
    """Experience memory with a retrieve / judge / distill / consolidate pipeline."""

    def __init__(
        self,
        config: ReasoningBankConfig | None = None,
        vector_index: VectorIndex | None = None,
        memory_scan: PairScan | None = None,
        pattern_scan: PairScan | None = None,
    ) -> None:
        self.config = config or ReasoningBankConfig()
        if vector_index is None:
            vector_index = build_vector_index(self.config)
        self.vector_index = vector_index
        self.events = EventBus()

        if self.config.shard_consolidation_by_domain:
            memory_scan = memory_scan or GroupedPairsScan(key=memory_domain)
            pattern_scan = pattern_scan or GroupedPairsScan(key=pattern_domain)

        self.trajectory_store = TrajectoryStore(max_trajectories=self.config.max_trajectories)
        self.memory_store = MemoryStore()
        self.pattern_store = PatternStore()

        self.judge_engine = TrajectoryJudge(distillation_threshold=self.config.distillation_threshold)
        self.distiller = Distiller(
            judge=self.judge_engine,
            memory_store=self.memory_store,
            vector_index=self.vector_index,
            distillation_threshold=self.config.distillation_threshold,
            vector_dimension=self.config.vector_dimension,
        )
        self.retriever = MemoryRetriever(
            memory_store=self.memory_store,
            vector_index=self.vector_index,
            mmr_lambda=self.config.mmr_lambda,
            default_k=self.config.retrieval_k,
        )
        self.evolver = PatternEvolver(
            pattern_store=self.pattern_store,
            trajectory_store=self.trajectory_store,
            event_bus=self.events,
        )
        self.consolidator = Consolidator(
            memory_store=self.memory_store,
            pattern_store=self.pattern_store,
            vector_index=self.vector_index,
            dedup_threshold=self.config.dedup_threshold,
            max_pattern_age_days=self.config.max_pattern_age_days,
            enable_contradiction_detection=self.config.enable_contradiction_detection,
            memory_scan=memory_scan,
            pattern_scan=pattern_scan,
        )

        self._initialized = False
        self._stage_counts = {stage: 0 for stage in STAGES}
        self._stage_total_ms = {stage: 0.0 for stage in STAGES}

    # Lifecycle

    def initialize(self) -> None:
        """Bring up the external vector index when enabled. Safe to call twice."""
        if self._initialized:
            return
        if self.config.enable_external_index:
            try:
                self.vector_index.initialize()
            except Exception as exc:
                logger.warning("Vector index unavailable, continuing without it: %s", exc)
        self._initialized = True
        self.events.emit(MEMORY_CONSOLIDATED, memories_count=len(self.memory_store))

    def shutdown(self) -> None:
        try:
            self.vector_index.close()
        except Exception as exc:
            logger.warning("Failed to close vector index: %s", exc)
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def is_external_index_available(self) -> bool:
        return self.vector_index.is_available()

    # Trajectories

    def store_trajectory(self, trajectory: Trajectory) -> None:
        self.trajectory_store.store(trajectory)

    def get_trajectory(self, trajectory_id: str) -> Trajectory | None:
        return self.trajectory_store.get(trajectory_id)

    def get_trajectories(self) -> list[Trajectory]:
        return self.trajectory_store.list_all()

    def get_successful_trajectories(self) -> list[Trajectory]:
        return self.trajectory_store.list_successful()

    def get_failed_trajectories(self) -> list[Trajectory]:
        return self.trajectory_store.list_failed()

    # Pipeline

    @contextmanager
    def _timed(self, stage: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self._stage_counts[stage] += 1
            self._stage_total_ms[stage] += (time.perf_counter() - start) * 1000.0

    def retrieve(self, query_embedding: list[float], k: int | None = None) -> list[RetrievalResult]:
        """Relevant and mutually diverse memories for a query embedding."""
        with self._timed("retrieval"):
            return self.retriever.retrieve(query_embedding, k)

    def retrieve_by_content(self, content: str, k: int | None = None) -> list[RetrievalResult]:
        with self._timed("retrieval"):
            return self.retriever.retrieve_by_content(content, k)

    def judge(self, trajectory: Trajectory) -> TrajectoryVerdict:
        """Judge a completed trajectory.

        Raises:
            IncompleteTrajectoryError: if the trajectory is not complete.
        """
        with self._timed("judge"):
            return self.judge_engine.judge(trajectory)

    def distill(self, trajectory: Trajectory) -> DistilledMemory | None:
        """Distill a trajectory into a memory, or None if it does not qualify."""
        with self._timed("distillation"):
            memory = self.distiller.distill(trajectory)
        if memory is not None:
            self.events.emit(
                TRAJECTORY_COMPLETED,
                trajectory_id=trajectory.trajectory_id,
                quality_score=trajectory.quality_score,
            )
        return memory

    def distill_batch(self, trajectories: list[Trajectory]) -> list[DistilledMemory]:
        """Distill each trajectory in order, keeping only the memories produced."""
        memories: list[DistilledMemory] = []
        for trajectory in trajectories:
            memory = self.distill(trajectory)
            if memory is not None:
                memories.append(memory)
        return memories

    def consolidate(self) -> ConsolidationResult:
        """Deduplicate, flag contradictions, prune and merge patterns."""
        with self._timed("consolidation"):
            result = self.consolidator.run()
        self.events.emit(MEMORY_CONSOLIDATED, memories_count=len(self.memory_store))
        return result

    # Patterns

    def memory_to_pattern(self, memory: DistilledMemory) -> Pattern:
        return self.evolver.memory_to_pattern(memory)

    def evolve_pattern(self, pattern_id: str, new_experience: Trajectory) -> None:
        self.evolver.evolve_pattern(pattern_id, new_experience)

    def find_patterns(self, query_embedding: list[float], k: int = 5) -> list[Pattern]:
        return self.evolver.find_patterns(query_embedding, k)

    def get_patterns(self) -> list[Pattern]:
        return self.evolver.get_patterns()

    def export_patterns(self) -> list[dict[str, Any]]:
        return self.evolver.export_patterns()

    # Events

    def subscribe(self, listener: EventListener) -> None:
        self.events.subscribe(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        self.events.unsubscribe(listener)

    # Stats

    def _average_ms(self, stage: str) -> float:
        count = self._stage_counts[stage]
        return self._stage_total_ms[stage] / count if count else 0.0

    def get_stats(self) -> dict[str, Any]:
        stats: dict[str, Any] = {
            "trajectory_count": len(self.trajectory_store),
            "successful_trajectories": len(self.trajectory_store.list_successful()),
            "failed_trajectories": len(self.trajectory_store.list_failed()),
            "memory_count": len(self.memory_store),
            "consolidated_memories": self.memory_store.consolidated_count(),
            "pattern_count": len(self.pattern_store),
            "external_index_enabled": self.is_external_index_available(),
        }
        for stage in STAGES:
            stats[f"{stage}_count"] = self._stage_counts[stage]
            stats[f"avg_{stage}_ms"] = self._average_ms(stage)
        return stats

    def get_detailed_metrics(self) -> dict[str, Any]:
        """Per-domain routing stats, verdict confidence and top pattern strategies."""
        domains = sorted(
            self.trajectory_store.domain_stats().items(),
            key=lambda item: item[1]["count"],
            reverse=True,
        )
        routing = [
            {
                "domain": domain,
                "count": bucket["count"],
                "success_rate": bucket["successes"] / bucket["count"] if bucket["count"] else 0.0,
            }
            for domain, bucket in domains[:TOP_METRICS]
        ]

        confidences = [
            t.verdict.confidence
            for t in self.trajectory_store.list_successful()
            if t.verdict is not None
        ]
        avg_confidence = sum(confidences) / len(confidences) if confidences else 0.0

        patterns = sorted(self.pattern_store.list_all(), key=lambda p: p.usage_count, reverse=True)
        top_strategies = [
            {
                "strategy": pattern.strategy,
                "usage_count": pattern.usage_count,
                "success_rate": pattern.success_rate,
            }
            for pattern in patterns[:TOP_METRICS]
        ]

        return {
            "routing": routing,
            "avg_success_confidence": avg_confidence,
            "top_strategies": top_strategies,
        }


def create_reasoning_bank(
    config: ReasoningBankConfig | None = None,
    vector_index: VectorIndex | None = None,
    **overrides: Any,
) -> ReasoningBank:
    """Build a bank from config files (or the given config) plus overrides."""
    if config is None:
        config = load_config(overrides=overrides)
    elif overrides:
        config = config.model_copy(update=overrides)
    return ReasoningBank(config=config, vector_index=vector_index)


def create_initialized_reasoning_bank(
    config: ReasoningBankConfig | None = None,
    vector_index: VectorIndex | None = None,
    **overrides: Any,
) -> ReasoningBank:
    bank = create_reasoning_bank(config, vector_index=vector_index, **overrides)
    bank.initialize()
    return bank
