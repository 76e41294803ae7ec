"""Vector index adapters for approximate nearest-neighbour candidate lookup."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, TypedDict

from core.config import ReasoningBankConfig
from core.errors import VectorIndexError
from memory.scoring import cosine_similarity

logger = logging.getLogger("rb.vector_index")


class VectorPayload(TypedDict):
    content: str
    embedding: list[float]
    metadata: dict[str, Any]


class VectorHit(TypedDict):
    id: str
    similarity: float


class VectorIndex(ABC):
    """Abstract vector index interface.

    Implementations raise ``VectorIndexError`` on failure; callers decide
    whether to degrade.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Open connections or allocate the index."""

    @abstractmethod
    def store(self, item_id: str, payload: VectorPayload) -> None:
        """Add or replace one vector."""

    @abstractmethod
    def search(self, query_embedding: list[float], k: int) -> list[VectorHit]:
        """Return up to k nearest ids with similarity scores."""

    @abstractmethod
    def delete(self, item_id: str) -> None:
        """Remove one vector; unknown ids are ignored."""

    @abstractmethod
    def close(self) -> None:
        """Release resources."""

    def is_available(self) -> bool:
        return True


class NullVectorIndex(VectorIndex):
    """Stand-in used when no external index is configured."""

    def initialize(self) -> None:
        return None

    def store(self, item_id: str, payload: VectorPayload) -> None:
        return None

    def search(self, query_embedding: list[float], k: int) -> list[VectorHit]:
        return []

    def delete(self, item_id: str) -> None:
        return None

    def close(self) -> None:
        return None

    def is_available(self) -> bool:
        return False


class InMemoryVectorIndex(VectorIndex):
    """In-process exact cosine index keyed by item id."""

    def __init__(self, dimension: int | None = None) -> None:
        self.dimension = dimension
        self._items: dict[str, VectorPayload] = {}
        self._open = False

    def initialize(self) -> None:
        self._open = True

    def _require_open(self) -> None:
        if not self._open:
            raise VectorIndexError("In-memory vector index is not initialized")

    def store(self, item_id: str, payload: VectorPayload) -> None:
        self._require_open()
        embedding = list(payload["embedding"])
        if self.dimension is not None and len(embedding) != self.dimension:
            raise VectorIndexError(
                f"Expected {self.dimension}-dim embedding for {item_id}, got {len(embedding)}"
            )
        self._items[item_id] = {
            "content": payload["content"],
            "embedding": embedding,
            "metadata": dict(payload["metadata"]),
        }

    def search(self, query_embedding: list[float], k: int) -> list[VectorHit]:
        self._require_open()
        scored: list[tuple[float, str]] = []
        for item_id, payload in self._items.items():
            scored.append((cosine_similarity(query_embedding, payload["embedding"]), item_id))
        scored.sort(key=lambda x: x[0], reverse=True)
        return [{"id": item_id, "similarity": score} for score, item_id in scored[:k]]

    def delete(self, item_id: str) -> None:
        self._require_open()
        self._items.pop(item_id, None)

    def close(self) -> None:
        self._items.clear()
        self._open = False

    def is_available(self) -> bool:
        return self._open

    def __len__(self) -> int:
        return len(self._items)


def build_vector_index(config: ReasoningBankConfig) -> VectorIndex:
    """Build a vector index from configuration, defaulting safely to the null index."""
    if not config.enable_external_index:
        return NullVectorIndex()
    backend = config.vector_index.backend
    if backend == "memory":
        return InMemoryVectorIndex(dimension=config.vector_dimension)
    if backend == "http":
        from memory.stores.http_vector_index import HttpVectorIndex

        return HttpVectorIndex(
            base_url=config.vector_index.url,
            namespace=config.namespace,
            timeout=config.vector_index.timeout,
        )
    return NullVectorIndex()
