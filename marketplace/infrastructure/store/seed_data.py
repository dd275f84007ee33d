from __future__ import annotations

from typing import Any

from marketplace.domain.entities.attribute import AttributeBinding, AttributeDefinition, FieldGroup, ServiceType
from marketplace.domain.entities.service_area import Coordinates, ServiceArea
from marketplace.infrastructure.store.memory_store import (
    MemoryAttributeStore,
    MemoryCatalogStore,
    MemoryServiceAreaStore,
)

SERVICE_TYPES: list[ServiceType] = [
    ServiceType(id="grocery", title="Grocery", sort_order=1),
    ServiceType(id="fashion", title="Fashion", sort_order=2),
    ServiceType(id="handyman", title="Handyman", sort_order=3),
    ServiceType(id="car-rental", title="Car Rental", sort_order=4),
    ServiceType(id="liquor", title="Liquor", is_active=False, sort_order=5),
]

DEFINITIONS: list[AttributeDefinition] = [
    AttributeDefinition(
        id="attr-brand",
        name="brand",
        label="Brand",
        placeholder="Enter brand",
        applicable_entity_types=frozenset({"product"}),
    ),
    AttributeDefinition(
        id="attr-organic",
        name="organic",
        label="Organic",
        data_type="boolean",
        input_type="checkbox",
        applicable_entity_types=frozenset({"product"}),
    ),
    AttributeDefinition(
        id="attr-net-quantity",
        name="net_quantity",
        label="Net Quantity",
        data_type="number",
        input_type="number",
        validation_rules={"min": 0},
        applicable_entity_types=frozenset({"product"}),
    ),
    AttributeDefinition(
        id="attr-material",
        name="material",
        label="Material",
        data_type="select",
        input_type="select",
        options=["Cotton", "Linen", "Silk", "Polyester"],
        applicable_entity_types=frozenset({"product"}),
    ),
    AttributeDefinition(
        id="attr-care",
        name="care_instructions",
        data_type="textarea",
        input_type="textarea",
        help_text="Washing and storage guidance",
        applicable_entity_types=frozenset({"product"}),
    ),
    AttributeDefinition(
        id="attr-urgency",
        name="urgency",
        label="Urgency",
        data_type="select",
        input_type="select",
        options=[{"value": "normal", "label": "Normal"}, {"value": "same_day", "label": "Same day"}],
        applicable_entity_types=frozenset({"service"}),
    ),
    AttributeDefinition(
        id="attr-addr",
        name="service_address",
        label="Service Address",
        data_type="textarea",
        input_type="textarea",
        applicable_entity_types=frozenset({"service", "booking"}),
    ),
    AttributeDefinition(
        id="attr-transmission",
        name="transmission",
        label="Transmission",
        data_type="select",
        input_type="select",
        options={"options": ["Manual", "Automatic"]},
        applicable_entity_types=frozenset({"rental"}),
    ),
]

BINDINGS: list[AttributeBinding] = [
    AttributeBinding(id="bind-grocery-brand", service_type_id="grocery", attribute_id="attr-brand", display_order=0),
    AttributeBinding(
        id="bind-grocery-organic",
        service_type_id="grocery",
        attribute_id="attr-organic",
        display_order=1,
        field_group=FieldGroup.features,
    ),
    AttributeBinding(
        id="bind-grocery-qty",
        service_type_id="grocery",
        attribute_id="attr-net-quantity",
        display_order=2,
        is_required=True,
        field_group=FieldGroup.specifications,
        override_label="Net Weight (g)",
    ),
    AttributeBinding(id="bind-fashion-material", service_type_id="fashion", attribute_id="attr-material", display_order=0),
    AttributeBinding(id="bind-fashion-care", service_type_id="fashion", attribute_id="attr-care", display_order=1),
    AttributeBinding(id="bind-handyman-urgency", service_type_id="handyman", attribute_id="attr-urgency", display_order=0),
    AttributeBinding(
        id="bind-handyman-addr",
        service_type_id="handyman",
        attribute_id="attr-addr",
        display_order=1,
        is_required=True,
    ),
]

SERVICE_AREAS: list[ServiceArea] = [
    ServiceArea(
        id="area-rayachoty",
        pincode="516269",
        city="Rayachoty",
        state="Andhra Pradesh",
        service_types=("grocery", "fashion", "handyman", "car-rental"),
        delivery_time_hours=24,
        delivery_charge=30.0,
        coordinates=Coordinates(lat=14.0583, lng=78.7511),
    ),
    ServiceArea(
        id="area-kadapa",
        pincode="516001",
        city="Kadapa",
        state="Andhra Pradesh",
        service_types=("grocery",),
        delivery_time_hours=48,
        coordinates=Coordinates(lat=14.4673, lng=78.8242),
    ),
    ServiceArea(
        id="area-tirupati",
        pincode="517501",
        city="Tirupati",
        state="Andhra Pradesh",
        is_serviceable=False,
        service_types=("grocery",),
        coordinates=Coordinates(lat=13.6288, lng=79.4192),
    ),
]

AREA_PRODUCTS: dict[str, list[dict[str, Any]]] = {
    "area-rayachoty": [
        {
            "offering_id": "prod-rice",
            "offering_name": "Sona Masoori Rice 5kg",
            "service_type": "grocery",
            "category_id": "cat-staples",
            "category_name": "Staples",
            "base_price": 420.0,
            "location_price": 399.0,
            "location_stock": 40,
            "is_available": True,
            "primary_image_url": None,
            "custom_fields": {"brand": "Annapurna", "organic": False},
        },
        {
            "offering_id": "prod-swift",
            "offering_name": "Maruti Swift",
            "service_type": "car-rental",
            "category_id": "cat-hatchback",
            "category_name": "Hatchback",
            "base_price": 2400.0,
            "location_price": None,
            "location_stock": 2,
            "is_available": True,
            "primary_image_url": None,
            "custom_fields": {"transmission": "Automatic"},
            "seating_capacity": 5,
        },
    ],
}

PRODUCTS: list[dict[str, Any]] = [
    {
        "id": "prod-kurta",
        "name": "Cotton Kurta",
        "service_type": "fashion",
        "category_id": "cat-ethnic",
        "category_name": "Ethnic Wear",
        "price": 899.0,
        "stock_quantity": 12,
        "is_active": True,
        "image_url": None,
        "custom_fields": {"material": "Cotton"},
        "brand": "Fabindia",
    },
    {
        "id": "prod-rice-global",
        "name": "Sona Masoori Rice 5kg",
        "service_type": "grocery",
        "category_id": "cat-staples",
        "category_name": "Staples",
        "price": 420.0,
        "stock_quantity": 100,
        "is_active": True,
        "custom_fields": {},
    },
]


def build_memory_stores() -> tuple[MemoryAttributeStore, MemoryServiceAreaStore, MemoryCatalogStore]:
    """Fresh, seeded in-memory stores for local runs."""
    return (
        MemoryAttributeStore(
            service_types=list(SERVICE_TYPES),
            definitions=list(DEFINITIONS),
            bindings=list(BINDINGS),
        ),
        MemoryServiceAreaStore(areas=list(SERVICE_AREAS)),
        MemoryCatalogStore(area_products=AREA_PRODUCTS, products=PRODUCTS),
    )
