from __future__ import annotations

from marketplace.application.ports.service_area_store import ServiceAreaStorePort
from marketplace.domain.entities.service_area import ServiceArea


async def offered_service_types(store: ServiceAreaStorePort, area: ServiceArea) -> list[str]:
    """
    Service types operating in the area, in order, without duplicates.
    The per-area table wins when it has rows; otherwise the area's own list is used.
    A non-serviceable area offers nothing.
    """
    if not area.is_serviceable:
        return []
    rows = await store.list_area_service_types(area.id)
    source = rows if rows else list(area.service_types)
    seen: set[str] = set()
    result: list[str] = []
    for service_type in source:
        key = (service_type or "").strip()
        if key and key not in seen:
            seen.add(key)
            result.append(key)
    return result
