"""OverrideStore — caller-supplied address → location table, highest priority."""

from __future__ import annotations

from collections.abc import Callable, Mapping

from geo_resolver.domain.value_objects.location import Location


class OverrideStore:
    """Exact-match, case-sensitive table. No size bound, no eviction."""

    def __init__(self) -> None:
        self._locations: dict[str, Location] = {}

    def get(self, address: str) -> Location | None:
        return self._locations.get(address)

    def set_all(self, locations: Mapping[str, Location | None] | None, reset: bool = False) -> None:
        """Replace (``reset``) or merge overrides.

        When merging, a falsy value for a key removes that key.
        """
        locations = locations or {}
        if reset:
            self._locations = {k: v for k, v in locations.items() if v}
            return

        for address, location in locations.items():
            if location:
                self._locations[address] = location
            else:
                self._locations.pop(address, None)

    def remove_where(self, predicate: Callable[[Location], bool]) -> int:
        """Remove every override whose location satisfies ``predicate``."""
        doomed = [k for k, v in self._locations.items() if predicate(v)]
        for address in doomed:
            del self._locations[address]
        return len(doomed)

    def __len__(self) -> int:
        return len(self._locations)

    def __contains__(self, address: object) -> bool:
        return address in self._locations
