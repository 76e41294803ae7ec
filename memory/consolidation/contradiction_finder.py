"""Contradiction detection between similar memories with diverging quality."""

from __future__ import annotations

from memory.consolidation.pair_scan import AllPairsScan, PairScan
from memory.scoring import cosine_similarity
from memory.stores.memory_store import MemoryStore

CONTEXT_SIMILARITY = 0.8
QUALITY_GAP = 0.4


class ContradictionFinder:
    """Flags the weaker memory when similar contexts led to very different outcomes.

    Flagged entries get ``consolidated = True`` and stay in the store.
    """

    def __init__(self, memory_store: MemoryStore, pair_scan: PairScan | None = None) -> None:
        self.memory_store = memory_store
        self.pair_scan = pair_scan or AllPairsScan()

    def run(self) -> int:
        entries = self.memory_store.entries()
        contradictions = 0
        for i, j in self.pair_scan.pairs(entries):
            first, second = entries[i], entries[j]
            sim = cosine_similarity(first.memory.embedding, second.memory.embedding)
            if sim <= CONTEXT_SIMILARITY:
                continue
            if abs(first.memory.quality - second.memory.quality) <= QUALITY_GAP:
                continue
            contradictions += 1
            if first.memory.quality < second.memory.quality:
                first.consolidated = True
            else:
                second.consolidated = True
        return contradictions
