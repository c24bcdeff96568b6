"""Port interface for geocoding addresses to coordinates."""

from abc import ABC, abstractmethod

from geo_resolver.domain.value_objects.location import Location


class GeocoderPort(ABC):
    @abstractmethod
    async def geocode(self, address: str) -> Location | None:
        """Convert address string to a Location.

        Returns None if the address cannot be resolved.
        """
        ...
