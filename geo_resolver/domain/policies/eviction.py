"""EvictionPolicy — pick the least useful adaptive-cache entries to drop."""

from __future__ import annotations

from collections.abc import Mapping

from geo_resolver.domain.entities.geocode_query import CacheEntry


def select_evictions(entries: Mapping[str, CacheEntry], count: int) -> list[str]:
    """Return the keys of the ``count`` entries with the fewest cache hits.

    1. Sort entries by (hit_count ASC, sequence ASC); ties go to the
       oldest insertion so the result is deterministic.
    2. Take the first ``count`` keys.

    Args:
        entries: current cache content keyed by normalized address.
        count: number of entries to evict; values <= 0 select nothing.

    Returns:
        Keys to remove, lowest priority first.
    """
    if count <= 0:
        return []

    ranked = sorted(
        entries.items(),
        key=lambda item: (item[1].query.hit_count, item[1].sequence),
    )
    return [key for key, _ in ranked[:count]]
