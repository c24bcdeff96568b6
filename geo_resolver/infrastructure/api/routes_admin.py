"""Admin endpoints — overrides, snapshot and adaptive cache management."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from geo_resolver.application.use_cases.resolve_address import ResolutionService
from geo_resolver.infrastructure.api.dependencies import get_resolution_service
from geo_resolver.infrastructure.api.schemas import CacheStats, OverridesRequest, SnapshotRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


@router.put("/overrides")
async def put_overrides(
    body: OverridesRequest,
    service: ResolutionService = Depends(get_resolution_service),
):
    """Merge (or with ``reset`` replace) overrides; ``null`` removes an address."""
    locations = {
        address: payload.to_location(address) if payload else None
        for address, payload in body.locations.items()
    }
    service.set_overrides(locations, reset=body.reset)
    return {"status": "ok", "overrides": service.stats().overrides}


@router.delete("/overrides")
async def delete_overrides(
    type: str | None = None,
    name: str | None = None,
    service: ResolutionService = Depends(get_resolution_service),
):
    """Remove every override matching the given type and/or name."""
    if type is None and name is None:
        raise HTTPException(status_code=400, detail="Provide 'type' and/or 'name'")

    removed = service.remove_overrides(
        lambda loc: (type is None or loc.type == type) and (name is None or loc.name == name)
    )
    logger.info("Removed %d overrides (type=%s, name=%s)", removed, type, name)
    return {"status": "ok", "removed": removed}


@router.put("/snapshot")
async def put_snapshot(
    body: SnapshotRequest,
    service: ResolutionService = Depends(get_resolution_service),
):
    service.load_snapshot(
        {address: payload.to_location(address) for address, payload in body.locations.items()}
    )
    return {"status": "ok", "snapshot": service.stats().snapshot}


@router.get("/cache", response_model=CacheStats)
async def cache_stats(service: ResolutionService = Depends(get_resolution_service)):
    return CacheStats(**asdict(service.stats()))


@router.delete("/cache", response_model=CacheStats)
async def reset_cache(service: ResolutionService = Depends(get_resolution_service)):
    """Clear the adaptive cache and drop queued requests."""
    service.reset()
    return CacheStats(**asdict(service.stats()))
