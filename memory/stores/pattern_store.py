"""In-memory store of generalized patterns."""

from __future__ import annotations

from memory.types.pattern import Pattern


class PatternStore:
    """Owns patterns by pattern id."""

    def __init__(self) -> None:
        self._patterns: dict[str, Pattern] = {}

    def add(self, pattern: Pattern) -> None:
        self._patterns[pattern.pattern_id] = pattern

    def get(self, pattern_id: str) -> Pattern | None:
        return self._patterns.get(pattern_id)

    def remove(self, pattern_id: str) -> bool:
        return self._patterns.pop(pattern_id, None) is not None

    def list_all(self) -> list[Pattern]:
        return list(self._patterns.values())

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, pattern_id: object) -> bool:
        return pattern_id in self._patterns
