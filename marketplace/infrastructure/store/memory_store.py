from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any

from marketplace.application.exceptions import ConflictError, NotFoundError
from marketplace.application.ports.attribute_store import AttributeStorePort
from marketplace.application.ports.catalog_store import CatalogStorePort
from marketplace.application.ports.service_area_store import ServiceAreaStorePort
from marketplace.domain.entities.attribute import AttributeBinding, AttributeDefinition, ServiceType
from marketplace.domain.entities.service_area import ServiceArea


class MemoryAttributeStore(AttributeStorePort):
    def __init__(
        self,
        service_types: list[ServiceType] | None = None,
        definitions: list[AttributeDefinition] | None = None,
        bindings: list[AttributeBinding] | None = None,
    ) -> None:
        self._service_types: dict[str, ServiceType] = {s.id: s for s in service_types or []}
        self._definitions: dict[str, AttributeDefinition] = {d.id: d for d in definitions or []}
        self._bindings: dict[str, AttributeBinding] = {b.id: b for b in bindings or []}
        self._lock = asyncio.Lock()

    def add_service_type(self, service_type: ServiceType) -> None:
        self._service_types[service_type.id] = service_type

    def delete_service_type(self, service_type_id: str) -> None:
        """Remove the service type and cascade to its bindings; definitions are kept."""
        self._service_types.pop(service_type_id, None)
        for binding_id in [b.id for b in self._bindings.values() if b.service_type_id == service_type_id]:
            del self._bindings[binding_id]

    async def get_service_type(self, service_type_id: str) -> ServiceType | None:
        return self._service_types.get(service_type_id)

    async def list_definitions(self) -> list[AttributeDefinition]:
        return list(self._definitions.values())

    async def get_definition(self, definition_id: str) -> AttributeDefinition | None:
        return self._definitions.get(definition_id)

    async def insert_definition(self, definition: AttributeDefinition) -> AttributeDefinition:
        async with self._lock:
            if any(d.name == definition.name for d in self._definitions.values()):
                raise ConflictError(f"Attribute '{definition.name}' already exists")
            self._definitions[definition.id] = definition
            return definition

    async def update_definition(self, definition: AttributeDefinition) -> AttributeDefinition:
        async with self._lock:
            if definition.id not in self._definitions:
                raise NotFoundError(f"Attribute definition '{definition.id}' not found")
            self._definitions[definition.id] = definition
            return definition

    async def list_bindings(self, service_type_id: str) -> list[AttributeBinding]:
        return [b for b in self._bindings.values() if b.service_type_id == service_type_id]

    async def get_binding(self, binding_id: str) -> AttributeBinding | None:
        return self._bindings.get(binding_id)

    async def count_bindings_for_definition(self, definition_id: str) -> int:
        return sum(1 for b in self._bindings.values() if b.attribute_id == definition_id)

    async def insert_bindings(self, bindings: list[AttributeBinding]) -> list[AttributeBinding]:
        async with self._lock:
            taken = {(b.service_type_id, b.attribute_id) for b in self._bindings.values()}
            for binding in bindings:
                key = (binding.service_type_id, binding.attribute_id)
                if key in taken:
                    raise ConflictError(f"Binding {key} already exists")
                taken.add(key)
            for binding in bindings:
                self._bindings[binding.id] = binding
            return list(bindings)

    async def update_binding(self, binding: AttributeBinding) -> AttributeBinding:
        async with self._lock:
            current = self._bindings.get(binding.id)
            if current is None:
                raise NotFoundError(f"Binding '{binding.id}' not found")
            # display_order is owned by update_display_orders
            updated = replace(binding, display_order=current.display_order)
            self._bindings[binding.id] = updated
            return updated

    async def update_display_orders(self, bindings: list[AttributeBinding]) -> None:
        async with self._lock:
            missing = [b.id for b in bindings if b.id not in self._bindings]
            if missing:
                raise NotFoundError(f"Bindings not found: {', '.join(missing)}")
            for binding in bindings:
                self._bindings[binding.id] = replace(self._bindings[binding.id], display_order=binding.display_order)

    async def delete_bindings(self, service_type_id: str, attribute_ids: list[str]) -> int:
        async with self._lock:
            targets = set(attribute_ids)
            doomed = [
                b.id
                for b in self._bindings.values()
                if b.service_type_id == service_type_id and b.attribute_id in targets
            ]
            for binding_id in doomed:
                del self._bindings[binding_id]
            return len(doomed)


class MemoryServiceAreaStore(ServiceAreaStorePort):
    def __init__(
        self,
        areas: list[ServiceArea] | None = None,
        area_service_types: dict[str, list[str]] | None = None,
    ) -> None:
        self._areas: dict[str, ServiceArea] = {a.id: a for a in areas or []}
        self._area_service_types: dict[str, list[str]] = {k: list(v) for k, v in (area_service_types or {}).items()}

    def add_area(self, area: ServiceArea) -> None:
        self._areas[area.id] = area

    async def get_service_area(self, service_area_id: str) -> ServiceArea | None:
        return self._areas.get(service_area_id)

    async def find_service_area(self, pincode: str | None, city: str | None) -> ServiceArea | None:
        if pincode:
            for area in self._areas.values():
                if area.pincode == pincode:
                    return area
        if city:
            needle = city.strip().lower()
            matches = [a for a in self._areas.values() if a.city.lower() == needle]
            # Prefer a serviceable area when the city spans several pincodes.
            matches.sort(key=lambda a: (not a.is_serviceable, a.pincode))
            if matches:
                return matches[0]
        return None

    async def list_service_areas(self) -> list[ServiceArea]:
        return sorted(self._areas.values(), key=lambda a: (a.city, a.pincode))

    async def list_area_service_types(self, service_area_id: str) -> list[str]:
        return list(self._area_service_types.get(service_area_id, []))


class MemoryCatalogStore(CatalogStorePort):
    """
    Area rows are kept per area id; global rows are plain product dicts.
    Both carry ``service_type`` and ``category_id`` for filtering.
    """

    def __init__(
        self,
        area_products: dict[str, list[dict[str, Any]]] | None = None,
        products: list[dict[str, Any]] | None = None,
    ) -> None:
        self._area_products = {k: list(v) for k, v in (area_products or {}).items()}
        self._products = list(products or [])

    async def products_by_service_area(
        self,
        service_area_id: str,
        service_type: str,
        category_id: str | None,
        search_term: str | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        rows = [
            dict(r)
            for r in self._area_products.get(service_area_id, [])
            if _matches(r, service_type, category_id, search_term, name_key="offering_name")
        ]
        rows.sort(key=lambda r: str(r.get("offering_name", "")))
        return rows[offset : offset + limit]

    async def global_products(
        self,
        service_type: str,
        category_id: str | None,
        search_term: str | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        rows = [
            dict(r)
            for r in self._products
            if r.get("is_active", True) and _matches(r, service_type, category_id, search_term, name_key="name")
        ]
        rows.sort(key=lambda r: (float(r.get("price") or 0), str(r.get("name", ""))))
        return rows[offset : offset + limit]


def _matches(
    row: dict[str, Any],
    service_type: str,
    category_id: str | None,
    search_term: str | None,
    name_key: str,
) -> bool:
    if row.get("service_type") != service_type:
        return False
    if category_id and row.get("category_id") != category_id:
        return False
    if search_term and search_term.lower() not in str(row.get(name_key, "")).lower():
        return False
    return True
