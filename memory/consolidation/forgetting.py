"""Retention policy for stale patterns."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from memory.stores.pattern_store import PatternStore

MIN_RETAINED_USAGE = 5


class ForgettingPolicy:
    """Deletes patterns that are both old and rarely used."""

    def __init__(self, pattern_store: PatternStore, max_age_days: float = 30) -> None:
        self.pattern_store = pattern_store
        self.max_age_days = max_age_days

    def run(self, now: datetime | None = None) -> int:
        """Prune stale patterns and return how many were removed."""
        now = now or datetime.now(UTC)
        max_age = timedelta(days=self.max_age_days)
        pruned = 0
        for pattern in self.pattern_store.list_all():
            updated_at = pattern.updated_at
            if updated_at.tzinfo is None:
                updated_at = updated_at.replace(tzinfo=UTC)
            if now - updated_at > max_age and pattern.usage_count < MIN_RETAINED_USAGE:
                self.pattern_store.remove(pattern.pattern_id)
                pruned += 1
        return pruned
