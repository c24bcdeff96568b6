"""Location value object — a resolved coordinate with display metadata."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

DEFAULT_LOCATION_TYPE = "Geography"


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    type: str = DEFAULT_LOCATION_TYPE
    name: str = ""
    address: str = ""

    def with_address(self, address: str) -> Location:
        """Return a copy whose ``address`` is the text the caller asked for."""
        if self.address == address:
            return self
        return replace(self, address=address)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any], address: str = "") -> Location:
        """Build a Location from a plain mapping (snapshot files, API payloads).

        ``address`` is used as the fallback for both ``address`` and ``name``.
        Raises ValueError when latitude/longitude are missing or not numeric.
        """
        try:
            latitude = float(data["latitude"])
            longitude = float(data["longitude"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid location record for '{address}': {e}") from e

        resolved_address = data.get("address") or address
        return cls(
            latitude=latitude,
            longitude=longitude,
            type=data.get("type") or DEFAULT_LOCATION_TYPE,
            name=data.get("name") or resolved_address,
            address=resolved_address,
        )
