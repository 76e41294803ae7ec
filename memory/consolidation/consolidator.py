"""Memory consolidation orchestrator."""

from __future__ import annotations

import logging
from datetime import datetime

from memory.consolidation.contradiction_finder import ContradictionFinder
from memory.consolidation.deduplicator import Deduplicator
from memory.consolidation.forgetting import ForgettingPolicy
from memory.consolidation.pair_scan import AllPairsScan, PairScan
from memory.consolidation.pattern_merger import PatternMerger
from memory.stores.memory_store import MemoryStore
from memory.stores.pattern_store import PatternStore
from memory.stores.vector_index import VectorIndex
from memory.types.results import ConsolidationResult

logger = logging.getLogger("rb.consolidation")


class Consolidator:
    """Runs dedup, contradiction detection, pattern aging and pattern merging."""

    def __init__(
        self,
        memory_store: MemoryStore,
        pattern_store: PatternStore,
        vector_index: VectorIndex | None = None,
        dedup_threshold: float = 0.95,
        max_pattern_age_days: float = 30,
        enable_contradiction_detection: bool = True,
        memory_scan: PairScan | None = None,
        pattern_scan: PairScan | None = None,
    ) -> None:
        memory_scan = memory_scan or AllPairsScan()
        pattern_scan = pattern_scan or AllPairsScan()
        self.enable_contradiction_detection = enable_contradiction_detection
        self.deduplicator = Deduplicator(
            memory_store=memory_store,
            vector_index=vector_index,
            threshold=dedup_threshold,
            pair_scan=memory_scan,
        )
        self.contradiction_finder = ContradictionFinder(memory_store=memory_store, pair_scan=memory_scan)
        self.forgetting = ForgettingPolicy(pattern_store=pattern_store, max_age_days=max_pattern_age_days)
        self.pattern_merger = PatternMerger(pattern_store=pattern_store, pair_scan=pattern_scan)

    def run(self, now: datetime | None = None) -> ConsolidationResult:
        """Run one consolidation cycle.

        Passes run in a fixed order, each over the collections left by the
        previous one:
        1. Remove near-duplicate memories.
        2. Flag contradicting memories (when enabled).
        3. Prune stale, rarely used patterns.
        4. Merge similar same-domain patterns.
        """
        result = ConsolidationResult()
        result.removed_duplicates = self.deduplicator.run()
        if self.enable_contradiction_detection:
            result.contradictions_detected = self.contradiction_finder.run()
        result.pruned_patterns = self.forgetting.run(now=now)
        result.merged_patterns = self.pattern_merger.run()
        logger.info(
            "Consolidation: %d duplicates, %d contradictions, %d pruned, %d merged",
            result.removed_duplicates,
            result.contradictions_detected,
            result.pruned_patterns,
            result.merged_patterns,
        )
        return result
