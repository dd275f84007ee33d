from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AttributePreset:
    name: str
    data_type: str
    description: str
    applicable_types: tuple[str, ...]


def _p(name: str, data_type: str, description: str, *types: str) -> AttributePreset:
    return AttributePreset(name=name, data_type=data_type, description=description, applicable_types=types)


# Predefined registry entries per vertical, used to seed the registry.
ATTRIBUTE_PRESETS: dict[str, tuple[AttributePreset, ...]] = {
    "grocery": (
        _p("expiry_date", "date", "Product expiry date", "product"),
        _p("organic", "boolean", "Is organic product", "product"),
        _p("storage_temp", "select", "Storage temperature requirement", "product"),
        _p("ingredients", "textarea", "Product ingredients", "product"),
        _p("allergens", "text", "Allergen information", "product"),
        _p("nutritional_info", "textarea", "Nutritional information", "product"),
        _p("package_type", "select", "Packaging type", "product"),
        _p("net_quantity", "number", "Net quantity", "product"),
    ),
    "fashion": (
        _p("material", "select", "Fabric material", "product"),
        _p("occasion", "select", "Suitable occasion", "product"),
        _p("pattern", "select", "Pattern design", "product"),
        _p("fit_type", "select", "Fit style", "product"),
        _p("care_instructions", "textarea", "Care instructions", "product"),
        _p("season", "select", "Seasonal suitability", "product"),
        _p("fabric_weight", "number", "Fabric weight (GSM)", "product"),
    ),
    "electronics": (
        _p("screen_size", "number", "Screen size in inches", "product"),
        _p("memory_gb", "number", "Memory capacity in GB", "product"),
        _p("storage_gb", "number", "Storage capacity in GB", "product"),
        _p("operating_system", "select", "Operating system", "product"),
        _p("connectivity", "multiselect", "Connectivity options", "product"),
        _p("processor", "text", "Processor type", "product"),
        _p("battery_capacity", "number", "Battery capacity (mAh)", "product"),
    ),
    "handyman": (
        _p("service_duration", "number", "Service duration in hours", "service"),
        _p("skill_level", "select", "Required skill level", "service"),
        _p("equipment_included", "boolean", "Equipment provided", "service"),
        _p("emergency_service", "boolean", "Emergency service available", "service"),
        _p("warranty_provided", "boolean", "Service warranty provided", "service"),
        _p("materials_included", "boolean", "Materials included in service", "service"),
        _p("minimum_hours", "number", "Minimum booking hours", "service"),
    ),
    "car-rental": (
        _p("vehicle_type", "select", "Type of vehicle", "rental"),
        _p("fuel_type", "select", "Fuel type", "rental"),
        _p("seating_capacity", "number", "Number of seats", "rental"),
        _p("transmission", "select", "Transmission type", "rental"),
        _p("ac_available", "boolean", "Air conditioning available", "rental"),
        _p("driver_included", "boolean", "Driver service included", "rental"),
        _p("minimum_rental_hours", "number", "Minimum rental duration", "rental"),
        _p("mileage_limit", "number", "Daily mileage limit", "rental"),
    ),
    "trips": (
        _p("departure_time", "time", "Departure time", "booking"),
        _p("arrival_time", "time", "Arrival time", "booking"),
        _p("route_stops", "multiselect", "Route stops", "booking"),
        _p("amenities", "multiselect", "Vehicle amenities", "booking"),
        _p("cancellation_policy", "textarea", "Cancellation policy", "booking"),
        _p("luggage_allowance", "text", "Luggage allowance", "booking"),
    ),
    "liquor": (
        _p("alcohol_content", "number", "Alcohol percentage", "product"),
        _p("age_years", "number", "Age in years", "product"),
        _p("origin_region", "text", "Origin region", "product"),
        _p("volume_ml", "number", "Volume in milliliters", "product"),
        _p("beverage_type", "select", "Type of beverage", "product"),
        _p("flavor_profile", "textarea", "Flavor profile description", "product"),
    ),
    "home-kitchen": (
        _p("material_type", "select", "Material composition", "product"),
        _p("power_consumption", "number", "Power consumption (watts)", "product"),
        _p("energy_rating", "select", "Energy efficiency rating", "product"),
        _p("capacity_liters", "number", "Capacity in liters", "product"),
        _p("dishwasher_safe", "boolean", "Dishwasher safe", "product"),
        _p("dimensions_cm", "text", "Dimensions (L x W x H)", "product"),
    ),
}
