from __future__ import annotations

from typing import Any

from marketplace.application.exceptions import NotFoundError
from marketplace.application.ports.attribute_store import AttributeStorePort
from marketplace.application.ports.catalog_store import CatalogStorePort
from marketplace.application.ports.service_area_store import ServiceAreaStorePort
from marketplace.domain.entities.attribute import AttributeBinding, AttributeDefinition, FieldGroup, ServiceType
from marketplace.domain.entities.service_area import Coordinates, ServiceArea
from marketplace.infrastructure.supabase.client import SupabaseClient

SERVICE_TYPES_TABLE = "service_types"
REGISTRY_TABLE = "attribute_registry"
BINDINGS_TABLE = "service_attribute_config"
AREAS_TABLE = "serviceable_areas"
AREA_SERVICE_TYPES_TABLE = "location_service_types"
PRODUCTS_TABLE = "products"


def _eq(value: Any) -> str:
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _in(values: list[str]) -> str:
    quoted = ",".join(f'"{v}"' for v in values)
    return f"in.({quoted})"


def service_type_from_row(row: dict[str, Any]) -> ServiceType:
    return ServiceType(
        id=row["id"],
        title=row.get("title") or row["id"],
        is_active=bool(row.get("is_active", True)),
        sort_order=int(row.get("sort_order") or 0),
    )


def definition_from_row(row: dict[str, Any]) -> AttributeDefinition:
    return AttributeDefinition(
        id=str(row["id"]),
        name=row["name"],
        label=row.get("label"),
        data_type=row.get("data_type") or "text",
        input_type=row.get("input_type") or row.get("data_type") or "text",
        placeholder=row.get("placeholder"),
        help_text=row.get("help_text"),
        group_name=row.get("group_name"),
        default_value=row.get("default_value"),
        options=row.get("options"),
        validation_rules=dict(row.get("validation_rules") or {}),
        applicable_entity_types=frozenset(row.get("applicable_types") or ()),
        is_active=bool(row.get("is_active", True)),
    )


def definition_to_row(definition: AttributeDefinition) -> dict[str, Any]:
    return {
        "id": definition.id,
        "name": definition.name,
        "label": definition.label,
        "data_type": definition.data_type,
        "input_type": definition.input_type,
        "placeholder": definition.placeholder,
        "help_text": definition.help_text,
        "group_name": definition.group_name,
        "default_value": definition.default_value,
        "options": definition.options,
        "validation_rules": definition.validation_rules,
        "applicable_types": sorted(definition.applicable_entity_types),
        "is_active": definition.is_active,
    }


def binding_from_row(row: dict[str, Any]) -> AttributeBinding:
    try:
        group = FieldGroup(row.get("field_group") or FieldGroup.custom.value)
    except ValueError:
        group = FieldGroup.custom
    return AttributeBinding(
        id=str(row["id"]),
        service_type_id=row["service_type_id"],
        attribute_id=str(row["attribute_id"]),
        display_order=int(row.get("display_order") or 0),
        is_required=bool(row.get("is_required", False)),
        is_visible=bool(row.get("is_visible", True)),
        field_group=group,
        override_label=row.get("override_label"),
        override_placeholder=row.get("override_placeholder"),
        override_help_text=row.get("override_help_text"),
    )


def binding_to_row(binding: AttributeBinding) -> dict[str, Any]:
    return {
        "id": binding.id,
        "service_type_id": binding.service_type_id,
        "attribute_id": binding.attribute_id,
        "display_order": binding.display_order,
        "is_required": binding.is_required,
        "is_visible": binding.is_visible,
        "field_group": binding.field_group.value,
        "override_label": binding.override_label,
        "override_placeholder": binding.override_placeholder,
        "override_help_text": binding.override_help_text,
    }


def area_from_row(row: dict[str, Any]) -> ServiceArea:
    coords = row.get("coordinates")
    coordinates = None
    if isinstance(coords, dict) and coords.get("lat") is not None and coords.get("lng") is not None:
        coordinates = Coordinates(lat=float(coords["lat"]), lng=float(coords["lng"]))
    charge = row.get("delivery_charge")
    return ServiceArea(
        id=str(row.get("id") or row.get("service_area_id")),
        pincode=row.get("pincode") or "",
        city=row.get("city") or "",
        state=row.get("state") or "",
        country=row.get("country") or "India",
        is_serviceable=bool(row.get("is_serviceable", False)),
        service_types=tuple(row.get("service_types") or ()),
        delivery_time_hours=row.get("delivery_time_hours"),
        delivery_charge=float(charge) if charge is not None else None,
        coordinates=coordinates,
    )


class SupabaseAttributeStore(AttributeStorePort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def get_service_type(self, service_type_id: str) -> ServiceType | None:
        rows = await self._client.select(SERVICE_TYPES_TABLE, {"id": _eq(service_type_id)})
        return service_type_from_row(rows[0]) if rows else None

    async def list_definitions(self) -> list[AttributeDefinition]:
        rows = await self._client.select(REGISTRY_TABLE, {"order": "name.asc"})
        return [definition_from_row(r) for r in rows]

    async def get_definition(self, definition_id: str) -> AttributeDefinition | None:
        rows = await self._client.select(REGISTRY_TABLE, {"id": _eq(definition_id)})
        return definition_from_row(rows[0]) if rows else None

    async def insert_definition(self, definition: AttributeDefinition) -> AttributeDefinition:
        rows = await self._client.insert(REGISTRY_TABLE, [definition_to_row(definition)])
        return definition_from_row(rows[0]) if rows else definition

    async def update_definition(self, definition: AttributeDefinition) -> AttributeDefinition:
        values = definition_to_row(definition)
        values.pop("id")
        rows = await self._client.update(REGISTRY_TABLE, values, {"id": _eq(definition.id)})
        if not rows:
            raise NotFoundError(f"Attribute definition '{definition.id}' not found")
        return definition_from_row(rows[0])

    async def list_bindings(self, service_type_id: str) -> list[AttributeBinding]:
        rows = await self._client.select(
            BINDINGS_TABLE,
            {"service_type_id": _eq(service_type_id), "order": "display_order.asc"},
        )
        return [binding_from_row(r) for r in rows]

    async def get_binding(self, binding_id: str) -> AttributeBinding | None:
        rows = await self._client.select(BINDINGS_TABLE, {"id": _eq(binding_id)})
        return binding_from_row(rows[0]) if rows else None

    async def count_bindings_for_definition(self, definition_id: str) -> int:
        rows = await self._client.select(BINDINGS_TABLE, {"select": "id", "attribute_id": _eq(definition_id)})
        return len(rows)

    async def insert_bindings(self, bindings: list[AttributeBinding]) -> list[AttributeBinding]:
        rows = await self._client.insert(BINDINGS_TABLE, [binding_to_row(b) for b in bindings])
        return [binding_from_row(r) for r in rows] if rows else list(bindings)

    async def update_binding(self, binding: AttributeBinding) -> AttributeBinding:
        values = binding_to_row(binding)
        for key in ("id", "service_type_id", "attribute_id", "display_order"):
            values.pop(key)
        rows = await self._client.update(BINDINGS_TABLE, values, {"id": _eq(binding.id)})
        if not rows:
            raise NotFoundError(f"Binding '{binding.id}' not found")
        return binding_from_row(rows[0])

    async def update_display_orders(self, bindings: list[AttributeBinding]) -> None:
        # Full rows so the upsert never inserts partial records.
        await self._client.insert(BINDINGS_TABLE, [binding_to_row(b) for b in bindings], on_conflict="id")

    async def delete_bindings(self, service_type_id: str, attribute_ids: list[str]) -> int:
        rows = await self._client.delete(
            BINDINGS_TABLE,
            {"service_type_id": _eq(service_type_id), "attribute_id": _in(attribute_ids)},
        )
        return len(rows)


class SupabaseServiceAreaStore(ServiceAreaStorePort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def get_service_area(self, service_area_id: str) -> ServiceArea | None:
        rows = await self._client.select(AREAS_TABLE, {"id": _eq(service_area_id)})
        return area_from_row(rows[0]) if rows else None

    async def find_service_area(self, pincode: str | None, city: str | None) -> ServiceArea | None:
        rows = await self._client.rpc(
            "find_service_area_by_location",
            {"p_pincode": pincode or None, "p_city": city or None},
        )
        if not rows:
            return None
        return area_from_row(rows[0])

    async def list_service_areas(self) -> list[ServiceArea]:
        rows = await self._client.select(AREAS_TABLE, {"order": "city.asc"})
        return [area_from_row(r) for r in rows]

    async def list_area_service_types(self, service_area_id: str) -> list[str]:
        rows = await self._client.select(
            AREA_SERVICE_TYPES_TABLE,
            {
                "select": "service_type_id",
                "service_area_id": _eq(service_area_id),
                "is_active": _eq(True),
                "order": "display_order.asc",
            },
        )
        return [r["service_type_id"] for r in rows if r.get("service_type_id")]


class SupabaseCatalogStore(CatalogStorePort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def products_by_service_area(
        self,
        service_area_id: str,
        service_type: str,
        category_id: str | None,
        search_term: str | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        rows = await self._client.rpc(
            "get_products_by_service_area",
            {
                "p_service_area_id": service_area_id,
                "p_service_type": service_type,
                "p_category_id": category_id,
                "p_search_term": search_term,
                "p_limit": limit,
                "p_offset": offset,
            },
        )
        return list(rows or [])

    async def global_products(
        self,
        service_type: str,
        category_id: str | None,
        search_term: str | None,
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        params = {
            "select": "*,categories!inner(name,service_type)",
            "categories.service_type": _eq(service_type),
            "is_active": _eq(True),
            "order": "price.asc",
            "limit": str(limit),
            "offset": str(offset),
        }
        if category_id:
            params["category_id"] = _eq(category_id)
        if search_term:
            params["name"] = f"ilike.*{search_term}*"
        rows = await self._client.select(PRODUCTS_TABLE, params)
        for row in rows:
            category = row.get("categories")
            if isinstance(category, dict) and "category_name" not in row:
                row["category_name"] = category.get("name")
        return rows
