"""Transient results returned by retrieval and consolidation."""

from __future__ import annotations

from pydantic import BaseModel

from memory.types.distilled import DistilledMemory


class RetrievalResult(BaseModel):
    """Retrieved memory with its relevance and diversity scores."""

    memory: DistilledMemory
    relevance_score: float
    diversity_score: float
    combined_score: float


class ConsolidationResult(BaseModel):
    """Counts produced by one consolidation cycle."""

    removed_duplicates: int = 0
    contradictions_detected: int = 0
    pruned_patterns: int = 0
    merged_patterns: int = 0
