from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CatalogFilters:
    category_id: str | None = None
    search_term: str | None = None
    limit: int | None = None  # None -> CATALOG_DEFAULT_LIMIT
    offset: int = 0


@dataclass(frozen=True)
class CatalogEntry:
    offering_id: str
    name: str
    category_name: str | None
    location_price: float | None
    location_stock: int | None
    is_available: bool
    custom_fields: dict[str, str] = field(default_factory=dict)
    image_url: str | None = None
    price_source: str = "area"  # "area" | "global"
    display: dict[str, Any] = field(default_factory=dict)
