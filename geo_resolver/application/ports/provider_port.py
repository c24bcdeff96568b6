"""Port interface for the external geocoding backend."""

from abc import ABC, abstractmethod
from typing import Any

from geo_resolver.domain.entities.geocode_query import GeocodeQuery
from geo_resolver.domain.value_objects.location import Location


class GeocodeProviderPort(ABC):
    @abstractmethod
    def build_request(self, query: GeocodeQuery) -> Any:
        """Build the outbound request for a query. Runs synchronously."""
        ...

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        """Issue the request and return the decoded response body.

        Raises TransportError on network failure or a non-success status.
        """
        ...

    @abstractmethod
    def select_best(self, body: Any, query: GeocodeQuery) -> Location:
        """Map the response body to a single Location.

        Raises EmptyResultError when the body has no usable candidate.
        """
        ...

    async def aclose(self) -> None:
        """Release transport resources. Default: nothing to release."""
        return None
