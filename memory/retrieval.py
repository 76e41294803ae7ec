"""Memory retrieval with Maximal Marginal Relevance re-ranking."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime

from memory.scoring import content_overlap, cosine_similarity
from memory.stores.memory_store import MemoryStore
from memory.stores.vector_index import NullVectorIndex, VectorIndex
from memory.types.entry import MemoryEntry
from memory.types.results import RetrievalResult

logger = logging.getLogger("rb.retrieval")

# Over-fetch factor for index candidates so MMR has room to diversify.
CANDIDATE_MULTIPLIER = 3
SCORE_TOLERANCE = 1e-9


@dataclass
class _Candidate:
    entry: MemoryEntry
    relevance: float


class MemoryRetriever:
    """Retrieves relevant and mutually diverse memories for a query embedding."""

    def __init__(
        self,
        memory_store: MemoryStore,
        vector_index: VectorIndex | None = None,
        mmr_lambda: float = 0.7,
        default_k: int = 3,
    ) -> None:
        self.memory_store = memory_store
        self.vector_index = vector_index if vector_index is not None else NullVectorIndex()
        self.mmr_lambda = mmr_lambda
        self.default_k = default_k

    def _index_candidates(self, query_embedding: list[float], k: int) -> list[_Candidate]:
        if not self.vector_index.is_available():
            return []
        try:
            hits = self.vector_index.search(query_embedding, k * CANDIDATE_MULTIPLIER)
        except Exception as exc:
            logger.warning("Vector index search failed, using brute force: %s", exc)
            return []
        candidates: list[_Candidate] = []
        seen: set[str] = set()
        for hit in hits:
            entry = self.memory_store.get(hit["id"])
            if entry is None or hit["id"] in seen:
                continue
            seen.add(hit["id"])
            candidates.append(_Candidate(entry=entry, relevance=float(hit["similarity"])))
        return candidates

    def _exact_candidates(self, query_embedding: list[float]) -> list[_Candidate]:
        candidates = [
            _Candidate(entry=entry, relevance=cosine_similarity(query_embedding, entry.memory.embedding))
            for entry in self.memory_store.entries()
        ]
        candidates.sort(key=lambda c: c.relevance, reverse=True)
        return candidates

    @staticmethod
    def _max_similarity(entry: MemoryEntry, selected: list[MemoryEntry]) -> float:
        max_sim = 0.0
        for other in selected:
            max_sim = max(max_sim, cosine_similarity(entry.memory.embedding, other.memory.embedding))
        return max_sim

    def retrieve(self, query_embedding: list[float], k: int | None = None) -> list[RetrievalResult]:
        """Return up to k memories ranked by MMR."""
        retrieve_k = self.default_k if k is None else k
        if len(self.memory_store) == 0 or retrieve_k <= 0:
            return []

        candidates = self._index_candidates(query_embedding, retrieve_k)
        if not candidates:
            candidates = self._exact_candidates(query_embedding)

        lam = self.mmr_lambda
        results: list[RetrievalResult] = []
        selected: list[MemoryEntry] = []

        while len(results) < retrieve_k and candidates:
            best_idx = 0
            best_score = -math.inf
            best_diversity = -math.inf
            for idx, candidate in enumerate(candidates):
                diversity = 1.0 - self._max_similarity(candidate.entry, selected)
                score = lam * candidate.relevance + (1.0 - lam) * diversity
                if score > best_score + SCORE_TOLERANCE or (
                    abs(score - best_score) <= SCORE_TOLERANCE and diversity > best_diversity
                ):
                    best_idx = idx
                    best_score = score
                    best_diversity = diversity

            best = candidates.pop(best_idx)
            selected.append(best.entry)
            results.append(
                RetrievalResult(
                    memory=best.entry.memory,
                    relevance_score=best.relevance,
                    diversity_score=best_diversity,
                    combined_score=best_score,
                )
            )

        self._mark_used(results)
        return results

    def retrieve_by_content(self, content: str, k: int | None = None) -> list[RetrievalResult]:
        """Lexical fallback ranking memory strategies by word overlap with content."""
        retrieve_k = self.default_k if k is None else k
        scored = [
            (content_overlap(content, entry.memory.strategy), entry)
            for entry in self.memory_store.entries()
        ]
        scored.sort(key=lambda pair: pair[0], reverse=True)

        results: list[RetrievalResult] = []
        for score, entry in scored[: max(0, retrieve_k)]:
            if score <= 0:
                continue
            results.append(
                RetrievalResult(
                    memory=entry.memory,
                    relevance_score=score,
                    diversity_score=1.0,
                    combined_score=score,
                )
            )
        return results

    @staticmethod
    def _mark_used(results: list[RetrievalResult]) -> None:
        now = datetime.now(UTC)
        for result in results:
            result.memory.usage_count += 1
            result.memory.last_used = now
