"""Merging of near-identical patterns within a domain."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from memory.consolidation.pair_scan import AllPairsScan, PairScan
from memory.scoring import cosine_similarity
from memory.stores.pattern_store import PatternStore
from memory.types.pattern import EvolutionRecord

logger = logging.getLogger("rb.consolidation.merge")

MERGE_SIMILARITY = 0.9


class PatternMerger:
    """Absorbs the weaker of two similar same-domain patterns into the stronger."""

    def __init__(self, pattern_store: PatternStore, pair_scan: PairScan | None = None) -> None:
        self.pattern_store = pattern_store
        self.pair_scan = pair_scan or AllPairsScan()

    def run(self) -> int:
        patterns = self.pattern_store.list_all()
        absorbed: set[int] = set()
        for i, j in self.pair_scan.pairs(patterns):
            if i in absorbed or j in absorbed:
                continue
            first, second = patterns[i], patterns[j]
            if first.domain != second.domain:
                continue
            if cosine_similarity(first.embedding, second.embedding) <= MERGE_SIMILARITY:
                continue

            keep_idx, drop_idx = (i, j) if first.success_rate >= second.success_rate else (j, i)
            keep, drop = patterns[keep_idx], patterns[drop_idx]
            previous = keep.success_rate
            keep.usage_count += drop.usage_count
            keep.record_quality(list(drop.quality_history))
            keep.updated_at = datetime.now(UTC)
            keep.evolution_history.append(
                EvolutionRecord(
                    timestamp=keep.updated_at,
                    type="merge",
                    previous_quality=previous,
                    new_quality=keep.success_rate,
                    description=f"Merged with pattern {drop.pattern_id}",
                )
            )
            self.pattern_store.remove(drop.pattern_id)
            absorbed.add(drop_idx)
            logger.debug("Merged pattern %s into %s", drop.pattern_id, keep.pattern_id)
        return len(absorbed)
