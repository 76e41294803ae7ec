"""Near-duplicate memory removal."""

from __future__ import annotations

import logging

from memory.consolidation.pair_scan import AllPairsScan, PairScan
from memory.scoring import cosine_similarity
from memory.stores.memory_store import MemoryStore
from memory.stores.vector_index import NullVectorIndex, VectorIndex

logger = logging.getLogger("rb.consolidation.dedup")


class Deduplicator:
    """Deletes the lower-quality memory of every near-identical pair."""

    def __init__(
        self,
        memory_store: MemoryStore,
        vector_index: VectorIndex | None = None,
        threshold: float = 0.95,
        pair_scan: PairScan | None = None,
    ) -> None:
        self.memory_store = memory_store
        self.vector_index = vector_index if vector_index is not None else NullVectorIndex()
        self.threshold = threshold
        self.pair_scan = pair_scan or AllPairsScan()

    def run(self) -> int:
        entries = self.memory_store.entries()
        removed: set[int] = set()
        for i, j in self.pair_scan.pairs(entries):
            if i in removed or j in removed:
                continue
            first, second = entries[i], entries[j]
            sim = cosine_similarity(first.memory.embedding, second.memory.embedding)
            if sim <= self.threshold:
                continue
            # Ties keep the first-indexed entry.
            drop = j if first.memory.quality >= second.memory.quality else i
            memory_id = entries[drop].memory.memory_id
            self.memory_store.remove(memory_id)
            removed.add(drop)
            self._delete_from_index(memory_id)
        return len(removed)

    def _delete_from_index(self, memory_id: str) -> None:
        if not self.vector_index.is_available():
            return
        try:
            self.vector_index.delete(memory_id)
        except Exception as exc:
            logger.warning("Failed to delete %s from vector index: %s", memory_id, exc)
