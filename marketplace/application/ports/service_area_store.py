from __future__ import annotations

from abc import ABC, abstractmethod

from marketplace.domain.entities.service_area import ServiceArea


class ServiceAreaStorePort(ABC):
    @abstractmethod
    async def get_service_area(self, service_area_id: str) -> ServiceArea | None:
        raise NotImplementedError

    @abstractmethod
    async def find_service_area(self, pincode: str | None, city: str | None) -> ServiceArea | None:
        """Best match by pincode, then by city. Returns None if nothing matches."""
        raise NotImplementedError

    @abstractmethod
    async def list_service_areas(self) -> list[ServiceArea]:
        raise NotImplementedError

    @abstractmethod
    async def list_area_service_types(self, service_area_id: str) -> list[str]:
        """Service types enabled for the area in the per-area table (may be empty)."""
        raise NotImplementedError
