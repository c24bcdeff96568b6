"""GeocodeQuery and CacheEntry entities."""

from dataclasses import dataclass, field

from geo_resolver.domain.value_objects.location import Location


@dataclass
class GeocodeQuery:
    """One resolution attempt for a free-form address.

    ``key`` is the lowercased text used by the adaptive cache. The instance
    kept in a cache entry accumulates hits for as long as the entry lives.
    """

    text: str
    key: str = field(init=False)
    hit_count: int = 0

    def __post_init__(self) -> None:
        self.key = self.text.lower()

    def increment_hit(self) -> None:
        self.hit_count += 1


@dataclass
class CacheEntry:
    query: GeocodeQuery
    coordinate: Location
    sequence: int = 0
