"""ResolutionService — public lookup surface over overrides, snapshot and cache."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from geo_resolver.adapters.cache.adaptive_cache import AdaptiveCache
from geo_resolver.adapters.cache.override_store import OverrideStore
from geo_resolver.adapters.cache.snapshot_cache import SnapshotCache
from geo_resolver.application.ports.geocoder_port import GeocoderPort
from geo_resolver.application.ports.provider_port import GeocodeProviderPort
from geo_resolver.application.use_cases.dispatch_geocode import Completion, GeocodeDispatcher
from geo_resolver.config import Settings
from geo_resolver.domain.entities.geocode_query import GeocodeQuery
from geo_resolver.domain.errors import ResolutionAbortedError
from geo_resolver.domain.value_objects.location import Location


@dataclass(frozen=True)
class ResolutionStats:
    cache_size: int
    queue_size: int
    active_requests: int
    overrides: int
    snapshot: int
    max_concurrent: int


class ResolutionService(GeocoderPort):
    """Three-tier address resolution.

    Lookup order:
    1. Overrides (exact address, case-sensitive)
    2. Snapshot (exact address, case-sensitive)
    3. Adaptive cache (lowercased address)
    4. Provider, through the throttled dispatcher (``resolve``/``geocode`` only)
    """

    def __init__(
        self,
        provider: GeocodeProviderPort,
        settings: Settings,
        logger: logging.Logger | None = None,
        cache: AdaptiveCache | None = None,
    ):
        self._settings = settings
        self._log = logger or logging.getLogger(__name__)
        self._overrides = OverrideStore()
        self._snapshot = SnapshotCache()
        self._cache = cache if cache is not None else AdaptiveCache(
            max_size=settings.max_cache_size,
            overflow=settings.max_cache_size_overflow,
        )
        # geocode() futures still waiting on the dispatcher
        self._waiting: set[asyncio.Future] = set()
        self._provider = provider
        self._dispatcher = GeocodeDispatcher(
            provider=provider,
            cache=self._cache,
            max_concurrent=settings.max_concurrent_requests,
            logger=self._log,
        )

    # ─── Overrides / snapshot ────────────────────────────────────────

    def set_overrides(
        self, locations: Mapping[str, Location | None] | None, reset: bool = False
    ) -> None:
        self._overrides.set_all(locations, reset=reset)

    def remove_overrides(self, predicate: Callable[[Location], bool]) -> int:
        return self._overrides.remove_where(predicate)

    def load_snapshot(self, locations: Mapping[str, Location] | None) -> None:
        self._snapshot.load(locations)
        self._log.info("Loaded geocode snapshot with %d entries", len(self._snapshot))

    # ─── Lookups ─────────────────────────────────────────────────────

    def lookup_cached(self, address: str) -> Location | None:
        """Synchronous lookup across all tiers. Never touches the network."""
        location = self._overrides.get(address)
        if location is not None:
            return location

        location = self._snapshot.get(address)
        if location is not None:
            return location

        entry = self._cache.lookup(address.lower())
        if entry is not None:
            return entry.coordinate
        return None

    def resolve(self, address: str, completion: Completion) -> None:
        """Resolve ``address`` and hand the result to ``completion``.

        Override and snapshot hits complete synchronously within this call;
        everything else goes through the dispatcher and completes later with
        a Location or None.
        """
        location = self._overrides.get(address)
        if location is None:
            location = self._snapshot.get(address)
        if location is not None:
            completion(location.with_address(address))
            return

        self._dispatcher.submit(GeocodeQuery(text=address), completion)

    async def geocode(self, address: str) -> Location | None:
        """Awaitable form of ``resolve``.

        Raises ResolutionAbortedError if ``reset``/``aclose`` drops the
        request before it completes.
        """
        future: asyncio.Future[Location | None] = asyncio.get_running_loop().create_future()

        def _deliver(location: Location | None) -> None:
            if not future.done():
                future.set_result(location)

        self._waiting.add(future)
        try:
            self.resolve(address, _deliver)
            return await future
        finally:
            self._waiting.discard(future)

    def latitude(self, address: str) -> float | None:
        location = self.lookup_cached(address)
        return location.latitude if location is not None else None

    def longitude(self, address: str) -> float | None:
        location = self.lookup_cached(address)
        return location.longitude if location is not None else None

    # ─── Housekeeping ────────────────────────────────────────────────

    def cache_size(self) -> int:
        return self._cache.size()

    def stats(self) -> ResolutionStats:
        return ResolutionStats(
            cache_size=self._cache.size(),
            queue_size=self._dispatcher.queue_size,
            active_requests=self._dispatcher.active_count,
            overrides=len(self._overrides),
            snapshot=len(self._snapshot),
            max_concurrent=self._settings.max_concurrent_requests,
        )

    def reset(self) -> None:
        """Clear the adaptive cache and all dispatcher state.

        Overrides and snapshot are left untouched. Pending ``geocode`` calls
        fail with ResolutionAbortedError; ``resolve`` completions are dropped.
        """
        self._cache.clear()
        self._dispatcher.clear()
        self._abort_waiting("reset")
        self._log.info("Geocode cache and request queue reset")

    async def aclose(self) -> None:
        self._abort_waiting("closed")
        await self._dispatcher.close()
        await self._provider.aclose()

    def _abort_waiting(self, reason: str) -> None:
        waiting, self._waiting = self._waiting, set()
        for future in waiting:
            if not future.done():
                future.set_exception(ResolutionAbortedError(f"Geocode service {reason}"))
