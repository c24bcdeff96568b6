"""AdaptiveCache — bounded cache of provider-resolved coordinates."""

from __future__ import annotations

import itertools
import logging

from geo_resolver.domain.entities.geocode_query import CacheEntry, GeocodeQuery
from geo_resolver.domain.policies.eviction import select_evictions
from geo_resolver.domain.value_objects.location import Location

logger = logging.getLogger(__name__)


class AdaptiveCache:
    """Entries keyed by normalized (lowercased) address.

    Eviction is lazy: it only runs on insert, once the size has grown past
    ``max_size + overflow``, and trims back to ``max_size`` before the new
    entry is stored.
    """

    def __init__(self, max_size: int, overflow: int = 0):
        if max_size < 0 or overflow < 0:
            raise ValueError("Cache size and overflow must be non-negative")
        self._max_size = max_size
        self._overflow = overflow
        self._entries: dict[str, CacheEntry] = {}
        self._sequence = itertools.count()

    def lookup(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is not None:
            entry.query.increment_hit()
        return entry

    def peek(self, key: str) -> CacheEntry | None:
        """Like ``lookup`` but does not count as a hit."""
        return self._entries.get(key)

    def insert(self, query: GeocodeQuery, coordinate: Location) -> None:
        size = len(self._entries)
        if size > self._max_size + self._overflow:
            doomed = select_evictions(self._entries, size - self._max_size)
            for key in doomed:
                del self._entries[key]
            logger.debug("Evicted %d cache entries (size was %d)", len(doomed), size)

        self._entries[query.key] = CacheEntry(
            query=query,
            coordinate=coordinate,
            sequence=next(self._sequence),
        )

    def size(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
