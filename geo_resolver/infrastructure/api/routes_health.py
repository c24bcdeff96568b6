"""Health check endpoint."""

from fastapi import APIRouter, Depends

from geo_resolver.application.use_cases.resolve_address import ResolutionService
from geo_resolver.config import settings
from geo_resolver.infrastructure.api.dependencies import get_resolution_service

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(service: ResolutionService = Depends(get_resolution_service)):
    """Report service status and throttle/cache occupancy."""
    stats = service.stats()
    saturated = stats.active_requests >= stats.max_concurrent and stats.queue_size > 0

    return {
        "status": "degraded" if saturated else "ok",
        "provider_configured": bool(settings.azure_maps_key),
        "cache_size": stats.cache_size,
        "queue_size": stats.queue_size,
        "active_requests": stats.active_requests,
        "max_concurrent": stats.max_concurrent,
        "service": "geo-resolver",
    }
