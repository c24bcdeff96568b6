"""GeocodeDispatcher — FIFO request queue with a concurrency throttle.

Runs on a single asyncio event loop; all state is mutated from that loop
only, so no locking is needed.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from geo_resolver.adapters.cache.adaptive_cache import AdaptiveCache
from geo_resolver.application.ports.provider_port import GeocodeProviderPort
from geo_resolver.domain.entities.geocode_query import GeocodeQuery
from geo_resolver.domain.errors import GeocodeError
from geo_resolver.domain.value_objects.location import Location

Completion = Callable[[Location | None], None]


@dataclass
class QueueItem:
    query: GeocodeQuery
    completion: Completion
    generation: int = 0


class GeocodeDispatcher:
    """Releases queued requests to the provider, at most ``max_concurrent`` at a time."""

    def __init__(
        self,
        provider: GeocodeProviderPort,
        cache: AdaptiveCache,
        max_concurrent: int,
        logger: logging.Logger | None = None,
    ):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._provider = provider
        self._cache = cache
        self._max_concurrent = max_concurrent
        self._log = logger or logging.getLogger(__name__)

        self._queue: deque[QueueItem] = deque()
        self._active = 0
        # Bumped on clear(); slots owed by older dispatches are not released twice
        self._generation = 0
        self._pending_releases: set[asyncio.Handle] = set()
        self._tasks: set[asyncio.Task] = set()

    @property
    def active_count(self) -> int:
        return self._active

    @property
    def queue_size(self) -> int:
        return len(self._queue)

    def submit(self, query: GeocodeQuery, completion: Completion) -> None:
        """Complete from the cache, or enqueue and drain."""
        entry = self._cache.lookup(query.key)
        if entry is not None:
            completion(entry.coordinate.with_address(query.text))
            return

        item = QueueItem(query=query, completion=completion)
        self._queue.append(item)
        self._drain(caller_item=item)

    def release(self, n: int = 0) -> None:
        """Give back ``n`` slots, then dispatch whatever now fits."""
        if n > self._active:
            self._log.warning(
                "Releasing %d slot(s) with only %d active; clamping to zero", n, self._active
            )
            self._active = 0
        else:
            self._active -= n
        self._drain()

    def clear(self) -> None:
        """Drop queued items, zero the active count, cancel pending releases.

        Requests already handed to the provider still complete, but their
        slots are not released again.
        """
        self._queue.clear()
        self._active = 0
        self._generation += 1
        for handle in self._pending_releases:
            handle.cancel()
        self._pending_releases.clear()

    async def close(self) -> None:
        """Cancel in-flight provider calls (shutdown)."""
        self.clear()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _drain(self, caller_item: QueueItem | None = None) -> None:
        """Dispatch queued items while slots are free.

        A request that cannot be built gives its slot back. If it is the item
        ``submit`` just queued, the error is re-raised to that caller once
        draining is done; any other item is completed with None.
        """
        caller_error: Exception | None = None
        while self._active < self._max_concurrent and self._queue:
            item = self._queue.popleft()
            self._active += 1
            item.generation = self._generation
            error = self._dispatch(item)
            if error is None:
                continue

            self._active -= 1
            if item is caller_item:
                caller_error = error
                continue
            self._log.error(
                "Could not build geocode request for '%s'", item.query.text, exc_info=error
            )
            item.completion(None)

        if caller_error is not None:
            raise caller_error

    def _dispatch(self, item: QueueItem) -> Exception | None:
        """Start one item; returns the error if its request could not be built."""
        # Another in-flight request may have filled the cache while this one waited
        entry = self._cache.lookup(item.query.key)
        if entry is not None:
            self._schedule_release(item)
            item.completion(entry.coordinate.with_address(item.query.text))
            return None

        try:
            request = self._provider.build_request(item.query)
        except Exception as e:
            return e

        task = asyncio.get_running_loop().create_task(self._fetch(item, request))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return None

    async def _fetch(self, item: QueueItem, request: object) -> None:
        try:
            body = await self._provider.execute(request)
            coordinate = self._provider.select_best(body, item.query)
        except GeocodeError as e:
            self._log.info("Geocode failed for '%s': %s: %s", item.query.text, type(e).__name__, e)
            self._complete(item, None)
            return
        except Exception:
            self._log.exception("Unexpected provider error for '%s'", item.query.text)
            self._complete(item, None)
            return

        self._complete(item, coordinate)

    def _complete(self, item: QueueItem, coordinate: Location | None) -> None:
        self._schedule_release(item)
        if coordinate is None:
            item.completion(None)
            return

        self._cache.insert(item.query, coordinate)
        item.completion(coordinate.with_address(item.query.text))

    def _schedule_release(self, item: QueueItem) -> None:
        if item.generation != self._generation:
            return

        handle: asyncio.Handle

        def _release_later() -> None:
            self._pending_releases.discard(handle)
            self.release(1)

        handle = asyncio.get_running_loop().call_soon(_release_later)
        self._pending_releases.add(handle)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.error("Geocode completion callback failed", exc_info=exc)
