"""BestResultPolicy — choose one candidate out of a provider result list."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from geo_resolver.domain.entities.geocode_query import GeocodeQuery

# (candidates, query) -> index into candidates
ResultSelector = Callable[[Sequence[Any], GeocodeQuery], int]


def first_result_index(candidates: Sequence[Any], query: GeocodeQuery) -> int:
    """Always pick the provider's top-ranked candidate."""
    return 0
