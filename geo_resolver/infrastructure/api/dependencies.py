"""FastAPI dependency injection — wires the Azure Maps adapter into the service."""

from __future__ import annotations

from geo_resolver.adapters.geocoder.azure_maps_adapter import AzureMapsAdapter
from geo_resolver.application.use_cases.resolve_address import ResolutionService
from geo_resolver.config import settings

# Singleton service: caches and the request queue live for the process lifetime
_resolution_service: ResolutionService | None = None


def get_resolution_service() -> ResolutionService:
    global _resolution_service
    if _resolution_service is None:
        _resolution_service = ResolutionService(
            provider=AzureMapsAdapter(settings),
            settings=settings,
        )
    return _resolution_service


async def shutdown_resolution_service() -> None:
    global _resolution_service
    if _resolution_service is not None:
        await _resolution_service.aclose()
        _resolution_service = None
