from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class CatalogStorePort(ABC):
    @abstractmethod
    async def products_by_service_area(
        self,
        service_area_id: str,
        service_type: str,
        category_id: str | None,
        search_term: str | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        """
        Area-scoped rows, denormalised:
        offering_id, offering_name, category_name, location_price, base_price,
        location_stock, is_available, primary_image_url, custom_fields (+ legacy columns).
        """
        raise NotImplementedError

    @abstractmethod
    async def global_products(
        self,
        service_type: str,
        category_id: str | None,
        search_term: str | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        """
        Area-agnostic active products for the service type:
        id, name, category_name, price, stock_quantity, is_active,
        image_url, custom_fields (+ legacy columns).
        """
        raise NotImplementedError
