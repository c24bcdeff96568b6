"""Azure Maps geocoder adapter — implements GeocodeProviderPort."""

from __future__ import annotations

import locale
import logging
from collections.abc import Callable
from typing import Any

import httpx

from geo_resolver.application.ports.provider_port import GeocodeProviderPort
from geo_resolver.config import Settings
from geo_resolver.domain.entities.geocode_query import GeocodeQuery
from geo_resolver.domain.errors import EmptyResultError, TransportError
from geo_resolver.domain.policies.best_result import ResultSelector, first_result_index
from geo_resolver.domain.value_objects.location import DEFAULT_LOCATION_TYPE, Location

logger = logging.getLogger(__name__)

RESULT_LIMIT = 20


def runtime_language() -> str | None:
    """Current process language as an IETF tag ("en_US" → "en-US")."""
    lang, _ = locale.getlocale()
    if not lang or lang in ("C", "POSIX"):
        return None
    return lang.replace("_", "-")


class AzureMapsAdapter(GeocodeProviderPort):
    """Azure Maps address search (``/search/address/json``)."""

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
        select_index: ResultSelector = first_result_index,
        language_provider: Callable[[], str | None] = runtime_language,
    ):
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.request_timeout)
        self._owns_client = client is None
        self._select_index = select_index
        self._language_provider = language_provider

        if not settings.azure_maps_key:
            logger.warning("Azure Maps key is not set. Provider requests will be rejected.")

    def build_request(self, query: GeocodeQuery) -> httpx.Request:
        params: dict[str, str] = {
            "api-version": self._settings.azure_maps_api_version,
            "subscription-key": self._settings.azure_maps_key,
            "query": query.text,
        }
        language = self._settings.language or self._language_provider()
        if language:
            params["language"] = language
        params["limit"] = str(RESULT_LIMIT)

        return self._client.build_request(
            "GET",
            self._settings.azure_maps_search_url,
            params=params,
            timeout=self._settings.request_timeout,
        )

    async def execute(self, request: httpx.Request) -> Any:
        try:
            response = await self._client.send(request)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Azure Maps HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Azure Maps transport error: {e!r}") from e

        try:
            return response.json()
        except ValueError as e:
            raise EmptyResultError("Azure Maps returned a non-JSON body") from e

    def select_best(self, body: Any, query: GeocodeQuery) -> Location:
        results = body.get("results") if isinstance(body, dict) else None
        if not isinstance(results, list) or not results:
            raise EmptyResultError("Geocode result is empty.")

        try:
            best = results[self._select_index(results, query)]
            position = best["position"]
            latitude = float(position["lat"])
            longitude = float(position["lon"])
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise EmptyResultError(f"Malformed Azure Maps result: {e!r}") from e

        poi = best.get("poi") or {}
        address = best.get("address") or {}
        name = poi.get("name") or address.get("freeformAddress") or query.text

        point = Location(
            latitude=latitude,
            longitude=longitude,
            type=best.get("type") or DEFAULT_LOCATION_TYPE,
            name=name,
            address=query.text,
        )
        logger.info("Azure Maps resolved '%s' → (%f, %f)", query.text, latitude, longitude)
        return point

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
