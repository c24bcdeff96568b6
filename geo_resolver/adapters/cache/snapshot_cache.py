"""SnapshotCache — read-only bootstrap table, second lookup priority."""

from __future__ import annotations

import copy
from collections.abc import Mapping

from geo_resolver.domain.value_objects.location import Location


class SnapshotCache:
    def __init__(self) -> None:
        self._locations: dict[str, Location] = {}

    def load(self, locations: Mapping[str, Location] | None) -> None:
        """Replace the snapshot with an independent copy of ``locations``."""
        self._locations = copy.deepcopy(dict(locations or {}))

    def get(self, address: str) -> Location | None:
        return self._locations.get(address)

    def __len__(self) -> int:
        return len(self._locations)

    def __contains__(self, address: object) -> bool:
        return address in self._locations
