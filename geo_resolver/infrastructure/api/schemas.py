"""Request/response models for the HTTP surface."""

from __future__ import annotations

from pydantic import BaseModel, Field

from geo_resolver.domain.value_objects.location import DEFAULT_LOCATION_TYPE, Location


class LocationPayload(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    type: str = DEFAULT_LOCATION_TYPE
    name: str = ""
    address: str = ""

    def to_location(self, address: str) -> Location:
        return Location(
            latitude=self.latitude,
            longitude=self.longitude,
            type=self.type,
            name=self.name or address,
            address=self.address or address,
        )

    @classmethod
    def from_location(cls, location: Location) -> LocationPayload:
        return cls(**location.to_dict())


class OverridesRequest(BaseModel):
    locations: dict[str, LocationPayload | None] = Field(default_factory=dict)
    reset: bool = False


class SnapshotRequest(BaseModel):
    locations: dict[str, LocationPayload] = Field(default_factory=dict)


class CacheStats(BaseModel):
    cache_size: int
    queue_size: int
    active_requests: int
    overrides: int
    snapshot: int
    max_concurrent: int
