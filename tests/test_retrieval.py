"""Memory retrieval tests."""

from __future__ import annotations

from unittest.mock import MagicMock

from core.errors import VectorIndexError
from memory.retrieval import MemoryRetriever
from memory.stores.memory_store import MemoryStore
from memory.stores.vector_index import InMemoryVectorIndex, VectorIndex
from memory.types.distilled import DistilledMemory
from memory.types.entry import MemoryEntry
from memory.types.trajectory import Trajectory, TrajectoryVerdict


def add_memory(
    store: MemoryStore,
    memory_id: str,
    embedding: list[float],
    quality: float = 0.8,
    strategy: str = "Apply search",
) -> DistilledMemory:
    trajectory = Trajectory(trajectory_id=f"traj-{memory_id}", is_complete=True, quality_score=quality)
    verdict = TrajectoryVerdict(success=True, confidence=0.8, relevance_score=0.8)
    memory = DistilledMemory(
        memory_id=memory_id,
        trajectory_id=trajectory.trajectory_id,
        strategy=strategy,
        embedding=embedding,
        quality=quality,
    )
    store.add(MemoryEntry(memory=memory, trajectory=trajectory, verdict=verdict))
    return memory


def test_empty_pool_returns_nothing() -> None:
    retriever = MemoryRetriever(memory_store=MemoryStore())
    assert retriever.retrieve([1.0, 0.0]) == []


def test_mmr_prefers_diverse_memories() -> None:
    store = MemoryStore()
    add_memory(store, "e1", [1.0, 0.0])
    add_memory(store, "e2", [0.99, 0.01])
    add_memory(store, "e3", [0.0, 1.0])
    retriever = MemoryRetriever(memory_store=store, mmr_lambda=0.5)

    results = retriever.retrieve([1.0, 0.0], k=2)

    assert [r.memory.memory_id for r in results] == ["e1", "e3"]
    assert results[0].relevance_score == 1.0
    assert results[0].diversity_score == 1.0
    assert results[1].diversity_score == 1.0


def test_retrieval_returns_at_most_k_unique_memories() -> None:
    store = MemoryStore()
    for i in range(6):
        add_memory(store, f"m{i}", [1.0, i / 10.0])
    retriever = MemoryRetriever(memory_store=store, default_k=3)

    results = retriever.retrieve([1.0, 0.0])
    ids = [r.memory.memory_id for r in results]

    assert len(results) == 3
    assert len(set(ids)) == len(ids)
    assert ids[0] == "m0"

    assert len(retriever.retrieve([1.0, 0.0], k=20)) == 6


def test_retrieval_marks_memories_used() -> None:
    store = MemoryStore()
    memory = add_memory(store, "m1", [1.0, 0.0])
    retriever = MemoryRetriever(memory_store=store)
    before = memory.last_used

    retriever.retrieve([1.0, 0.0], k=1)
    retriever.retrieve([1.0, 0.0], k=1)

    assert memory.usage_count == 2
    assert memory.last_used >= before


def test_index_candidates_skip_unknown_ids() -> None:
    store = MemoryStore()
    add_memory(store, "m1", [1.0, 0.0])
    add_memory(store, "m2", [0.0, 1.0])
    index = InMemoryVectorIndex()
    index.initialize()
    for memory_id, embedding in (("m1", [1.0, 0.0]), ("m2", [0.0, 1.0]), ("gone", [1.0, 0.0])):
        index.store(memory_id, {"content": memory_id, "embedding": embedding, "metadata": {}})
    retriever = MemoryRetriever(memory_store=store, vector_index=index)

    results = retriever.retrieve([1.0, 0.0], k=3)

    assert [r.memory.memory_id for r in results] == ["m1", "m2"]


def test_index_failure_falls_back_to_exact_search() -> None:
    store = MemoryStore()
    add_memory(store, "m1", [1.0, 0.0])
    index = MagicMock(spec=VectorIndex)
    index.is_available.return_value = True
    index.search.side_effect = VectorIndexError("timeout")
    retriever = MemoryRetriever(memory_store=store, vector_index=index)

    results = retriever.retrieve([1.0, 0.0], k=1)

    assert [r.memory.memory_id for r in results] == ["m1"]
    index.search.assert_called_once_with([1.0, 0.0], 3)


def test_mismatched_embeddings_score_zero() -> None:
    store = MemoryStore()
    add_memory(store, "short", [1.0])
    retriever = MemoryRetriever(memory_store=store)
    results = retriever.retrieve([1.0, 0.0], k=1)
    assert results[0].relevance_score == 0.0


def test_retrieve_by_content_ranks_by_word_overlap() -> None:
    store = MemoryStore()
    add_memory(store, "search", [1.0, 0.0], strategy="Apply search -> read")
    add_memory(store, "write", [1.0, 0.0], strategy="Apply write")
    add_memory(store, "none", [1.0, 0.0], strategy="Multi-step approach: x, y, z...")
    retriever = MemoryRetriever(memory_store=store)

    results = retriever.retrieve_by_content("apply search and read docs", k=3)

    assert [r.memory.memory_id for r in results] == ["search", "write"]
    assert results[0].combined_score == results[0].relevance_score
    assert results[0].diversity_score == 1.0


def test_unexpected_index_error_falls_back_to_exact_search() -> None:
    store = MemoryStore()
    add_memory(store, "m1", [1.0, 0.0])
    add_memory(store, "m2", [0.0, 1.0])
    index = MagicMock(spec=VectorIndex)
    index.is_available.return_value = True
    index.search.side_effect = ConnectionError("down")
    retriever = MemoryRetriever(memory_store=store, vector_index=index)

    results = retriever.retrieve([1.0, 0.0], k=1)

    assert [r.memory.memory_id for r in results] == ["m1"]
