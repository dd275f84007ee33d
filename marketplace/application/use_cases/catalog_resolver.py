from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from marketplace.application.exceptions import NotFoundError, ValidationError
from marketplace.application.ports.catalog_store import CatalogStorePort
from marketplace.application.ports.service_area_store import ServiceAreaStorePort
from marketplace.application.utils.availability import offered_service_types
from marketplace.application.utils.coalesce import coalesce, coalesce_as
from marketplace.domain.entities.catalog import CatalogEntry, CatalogFilters
from marketplace.domain.entities.location_session import LocationSession


@dataclass(frozen=True)
class DisplayField:
    key: str  # key in custom_fields and in CatalogEntry.display
    legacy_column: str  # top-level product column
    default: Any


COMMON_DISPLAY_FIELDS: tuple[DisplayField, ...] = (
    DisplayField("brand", "brand", "Generic"),
    DisplayField("rating", "rating", 4.0),
)

DISPLAY_FIELDS_BY_SERVICE: dict[str, tuple[DisplayField, ...]] = {
    "car-rental": (
        DisplayField("seats", "seating_capacity", 5),
        DisplayField("transmission", "transmission", "Manual"),
        DisplayField("fuel_type", "fuel_type", "Petrol"),
        DisplayField("mileage", "mileage", "15 km/l"),
    ),
    "grocery": (
        DisplayField("unit", "unit", "each"),
    ),
    "handyman": (
        DisplayField("service_duration", "duration_hours", 1),
    ),
}


def display_fields_for(service_type: str) -> tuple[DisplayField, ...]:
    return COMMON_DISPLAY_FIELDS + DISPLAY_FIELDS_BY_SERVICE.get(service_type, ())


def parse_custom_fields(raw: Any) -> dict[str, str]:
    """Normalise the free-form payload to str -> str. Null values are dropped."""
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            return {}
    if not isinstance(raw, dict):
        return {}
    result: dict[str, str] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, bool):
            result[str(key)] = "true" if value else "false"
        elif isinstance(value, (dict, list)):
            result[str(key)] = json.dumps(value, ensure_ascii=False)
        else:
            result[str(key)] = str(value)
    return result


def resolve_display(
    service_type: str,
    custom_fields: dict[str, str],
    row: dict[str, Any],
) -> dict[str, Any]:
    """Per field: explicit custom field, then legacy column, then the fixed default."""
    display: dict[str, Any] = {}
    for f in display_fields_for(service_type):
        convert = _converter_for(f.default)
        display[f.key] = coalesce_as(convert, custom_fields.get(f.key), row.get(f.legacy_column), default=f.default)
    return display


def _converter_for(default: Any) -> Callable[[Any], Any]:
    if isinstance(default, bool):
        return lambda v: v if isinstance(v, bool) else str(v).strip().lower() in {"true", "1", "yes"}
    if isinstance(default, int):
        return lambda v: int(float(v))
    if isinstance(default, float):
        return float
    return lambda v: str(v).strip()


def _as_float(value: Any) -> float | None:
    return coalesce_as(float, value)


def _as_int(value: Any) -> int | None:
    return coalesce_as(lambda v: int(float(v)), value)


class CatalogResolver:
    """Area-scoped product view with an explicit fallback to the global catalog."""

    def __init__(
        self,
        catalog: CatalogStorePort,
        areas: ServiceAreaStorePort,
        default_limit: int = 50,
        max_limit: int = 200,
    ) -> None:
        self._catalog = catalog
        self._areas = areas
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._logger = logging.getLogger(__name__)

    async def resolve_catalog(
        self,
        service_area_id: str,
        service_type: str,
        filters: CatalogFilters | None = None,
    ) -> list[CatalogEntry]:
        """
        Area rows when the area has local pricing; otherwise the active global
        products for the service type at base price. A non-serviceable area, or a
        service type not offered there, yields no entries.
        """
        filters = filters or CatalogFilters()
        limit = self._default_limit if filters.limit is None else filters.limit
        if limit < 1 or limit > self._max_limit:
            raise ValidationError(f"limit must be between 1 and {self._max_limit}")
        if filters.offset < 0:
            raise ValidationError("offset must not be negative")

        area = await self._areas.get_service_area(service_area_id)
        if area is None:
            raise NotFoundError(f"Service area '{service_area_id}' not found")

        if service_type not in await offered_service_types(self._areas, area):
            self._logger.info(
                "Service type not offered in area",
                extra={"service_area_id": service_area_id, "service": service_type, "reason": "not_offered"},
            )
            return []

        search_term = coalesce(filters.search_term)
        rows = await self._catalog.products_by_service_area(
            service_area_id,
            service_type,
            filters.category_id,
            search_term,
            limit,
            filters.offset,
        )
        if rows:
            return [self._from_area_row(row, service_type) for row in rows]
        if await self._area_is_populated(service_area_id, service_type):
            # Filter miss or page past the end; area pricing never mixes with global rows.
            return []

        # TODO: confirm with product owners that unpopulated areas should show the global catalog.
        self._logger.info(
            "No area pricing, falling back to global catalog",
            extra={"service_area_id": service_area_id, "service": service_type, "reason": "area_unpopulated"},
        )
        rows = await self._catalog.global_products(
            service_type,
            filters.category_id,
            search_term,
            limit,
            filters.offset,
        )
        return [self._from_global_row(row, service_type) for row in rows if row.get("is_active", True)]

    async def resolve_for_session(
        self,
        session: LocationSession,
        service_type: str,
        filters: CatalogFilters | None = None,
    ) -> list[CatalogEntry] | None:
        """
        Catalog for the session's current area. Returns an empty list when the
        session is not usable, and None when the location changed while the query
        was in flight (the caller should ignore the result).
        """
        if not session.is_usable or service_type not in session.available_service_types:
            return []
        seq = session.request_seq
        entries = await self.resolve_catalog(session.service_area_id, service_type, filters)
        if not session.is_current(seq):
            self._logger.info("Discarding stale catalog result", extra={"request_seq": seq, "reason": "superseded"})
            return None
        return entries

    async def _area_is_populated(self, service_area_id: str, service_type: str) -> bool:
        rows = await self._catalog.products_by_service_area(service_area_id, service_type, None, None, 1, 0)
        return bool(rows)

    def _from_area_row(self, row: dict[str, Any], service_type: str) -> CatalogEntry:
        custom_fields = parse_custom_fields(row.get("custom_fields"))
        return CatalogEntry(
            offering_id=str(coalesce(row.get("offering_id"), row.get("id"))),
            name=coalesce(row.get("offering_name"), row.get("name"), default=""),
            category_name=coalesce(row.get("category_name")),
            location_price=_as_float(coalesce(row.get("location_price"), row.get("base_price"))),
            location_stock=_as_int(row.get("location_stock")),
            is_available=bool(row.get("is_available", False)),
            custom_fields=custom_fields,
            image_url=coalesce(row.get("primary_image_url"), row.get("image_url")),
            price_source="area",
            display=resolve_display(service_type, custom_fields, row),
        )

    def _from_global_row(self, row: dict[str, Any], service_type: str) -> CatalogEntry:
        custom_fields = parse_custom_fields(row.get("custom_fields"))
        stock = _as_int(row.get("stock_quantity"))
        category = row.get("categories")
        category_name = coalesce(
            row.get("category_name"),
            category.get("name") if isinstance(category, dict) else None,
        )
        return CatalogEntry(
            offering_id=str(row.get("id")),
            name=coalesce(row.get("name"), default=""),
            category_name=category_name,
            location_price=_as_float(row.get("price")),
            location_stock=stock,
            is_available=bool(row.get("is_active", True)) and (stock is None or stock > 0),
            custom_fields=custom_fields,
            image_url=coalesce(row.get("image_url")),
            price_source="global",
            display=resolve_display(service_type, custom_fields, row),
        )
