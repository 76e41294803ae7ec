"""In-memory store of distilled memory entries."""

from __future__ import annotations

from memory.types.entry import MemoryEntry


class MemoryStore:
    """Owns memory entries by memory id, preserving insertion order."""

    def __init__(self) -> None:
        self._entries: dict[str, MemoryEntry] = {}

    def add(self, entry: MemoryEntry) -> None:
        self._entries[entry.memory.memory_id] = entry

    def get(self, memory_id: str) -> MemoryEntry | None:
        return self._entries.get(memory_id)

    def remove(self, memory_id: str) -> bool:
        return self._entries.pop(memory_id, None) is not None

    def entries(self) -> list[MemoryEntry]:
        """Snapshot of all entries in insertion order."""
        return list(self._entries.values())

    def consolidated_count(self) -> int:
        return sum(1 for entry in self._entries.values() if entry.consolidated)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, memory_id: object) -> bool:
        return memory_id in self._entries
