"""Sorting service for manifest records.

The manifest is ordered by `id` ascending so identical inputs produce
byte-identical output regardless of filesystem traversal or worker
completion order.
"""

from __future__ import annotations

from collections.abc import Iterable

from core.models import PhotoRecord


class SortService:
    """Provides deterministic ordering for `PhotoRecord` lists."""

    def sort(self, records: Iterable[PhotoRecord]) -> list[PhotoRecord]:
        """Return a new list of `records` sorted by `id` (lexicographic, ascending)."""
        return sorted(records, key=lambda r: r.id)
