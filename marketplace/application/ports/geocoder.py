from __future__ import annotations

from abc import ABC, abstractmethod

from marketplace.domain.entities.service_area import Coordinates, GeocodedAddress


class GeocoderPort(ABC):
    @abstractmethod
    async def reverse(self, coordinates: Coordinates) -> GeocodedAddress:
        """Convert coordinates to an address. Raises UpstreamUnavailable on failure."""
        raise NotImplementedError
