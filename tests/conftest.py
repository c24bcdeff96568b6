"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio

import pytest

from geo_resolver.application.ports.provider_port import GeocodeProviderPort
from geo_resolver.config import Settings
from geo_resolver.domain.errors import EmptyResultError
from geo_resolver.domain.value_objects.location import Location


class FakeProvider(GeocodeProviderPort):
    """In-memory provider; every request waits until the test finishes it.

    ``requests`` records query texts in dispatch order. Addresses listed in
    ``instant`` are answered without waiting.
    """

    def __init__(self):
        self.requests: list[str] = []
        self.instant: dict[str, dict | None] = {}
        self._pending: dict[str, list[asyncio.Future]] = {}

    def build_request(self, query):
        future = asyncio.get_running_loop().create_future()
        if query.text in self.instant:
            future.set_result(self.instant[query.text])
        self._pending.setdefault(query.text, []).append(future)
        self.requests.append(query.text)
        return future

    async def execute(self, request):
        return await request

    def select_best(self, body, query):
        if not body:
            raise EmptyResultError("Geocode result is empty.")
        return Location(
            latitude=body["lat"],
            longitude=body["lon"],
            type=body.get("type", "Geography"),
            name=body.get("name", query.text),
            address=query.text,
        )

    def finish(self, text: str, body: dict | None = None) -> None:
        """Answer the oldest pending request for ``text``."""
        future = self._pending[text].pop(0)
        future.set_result(body if body is not None else {"lat": 1.0, "lon": 2.0})

    def finish_empty(self, text: str) -> None:
        self._pending[text].pop(0).set_result(None)

    def fail(self, text: str, error: BaseException) -> None:
        self._pending[text].pop(0).set_exception(error)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        values = {
            "max_concurrent_requests": 6,
            "max_cache_size": 3000,
            "max_cache_size_overflow": 1000,
            "azure_maps_key": "test-key",
            "language": None,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settle():
    """Let the event loop run a few turns (provider tasks, deferred releases)."""

    async def _settle(turns: int = 10) -> None:
        for _ in range(turns):
            await asyncio.sleep(0)

    return _settle


@pytest.fixture
def sample_location():
    return Location(latitude=47.6062, longitude=-122.3321, type="Municipality", name="Seattle, WA")
