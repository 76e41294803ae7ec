"""Pair enumeration strategies for consolidation passes.

Every pass compares items pairwise. ``AllPairsScan`` is the exhaustive
O(n^2) scan; ``GroupedPairsScan`` only compares items sharing a key (for
example the same domain), which bounds the work on large pools.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Iterator, Sequence
from typing import Any


class PairScan(ABC):
    """Yields index pairs (i, j) with i < j over a sequence."""

    @abstractmethod
    def pairs(self, items: Sequence[Any]) -> Iterator[tuple[int, int]]:
        """Enumerate candidate pairs."""


class AllPairsScan(PairScan):
    def pairs(self, items: Sequence[Any]) -> Iterator[tuple[int, int]]:
        for i in range(len(items)):
            for j in range(i + 1, len(items)):
                yield i, j


class GroupedPairsScan(PairScan):
    """Compares only items whose key matches."""

    def __init__(self, key: Callable[[Any], Hashable]) -> None:
        self.key = key

    def pairs(self, items: Sequence[Any]) -> Iterator[tuple[int, int]]:
        groups: dict[Hashable, list[int]] = {}
        for idx, item in enumerate(items):
            groups.setdefault(self.key(item), []).append(idx)
        for indices in groups.values():
            for a in range(len(indices)):
                for b in range(a + 1, len(indices)):
                    yield indices[a], indices[b]


def memory_domain(entry: Any) -> str:
    """Grouping key for memory entries."""
    return entry.trajectory.domain or "general"


def pattern_domain(pattern: Any) -> str:
    """Grouping key for patterns."""
    return pattern.domain or "general"
