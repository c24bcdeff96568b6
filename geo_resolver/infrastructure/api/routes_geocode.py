"""Geocode endpoints — full resolution and cache-only lookup."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from geo_resolver.application.use_cases.resolve_address import ResolutionService
from geo_resolver.domain.errors import ResolutionAbortedError
from geo_resolver.infrastructure.api.dependencies import get_resolution_service
from geo_resolver.infrastructure.api.schemas import LocationPayload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/geocode", tags=["geocode"])


@router.get("", response_model=LocationPayload)
async def geocode(
    address: str = Query(..., min_length=1),
    service: ResolutionService = Depends(get_resolution_service),
):
    """Resolve an address, calling the provider on a cache miss."""
    try:
        location = await service.geocode(address)
    except ResolutionAbortedError as e:
        logger.info("Geocode for '%s' aborted: %s", address, e)
        raise HTTPException(status_code=503, detail=str(e))
    if location is None:
        raise HTTPException(status_code=404, detail=f"Could not resolve '{address}'")
    return LocationPayload.from_location(location)


@router.get("/cached", response_model=LocationPayload)
async def geocode_cached(
    address: str = Query(..., min_length=1),
    service: ResolutionService = Depends(get_resolution_service),
):
    """Look up an address in overrides, snapshot and cache only."""
    location = service.lookup_cached(address)
    if location is None:
        raise HTTPException(status_code=404, detail=f"'{address}' is not cached")
    return LocationPayload.from_location(location)
