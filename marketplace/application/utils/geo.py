from __future__ import annotations

import math

from marketplace.domain.entities.service_area import Coordinates, ServiceArea

EARTH_RADIUS_KM = 6371.0


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance (haversine), rounded to 2 decimals."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lng / 2) ** 2
    )
    return round(EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h)), 2)


def nearest_area(
    origin: Coordinates,
    areas: list[ServiceArea],
    max_km: float,
) -> ServiceArea | None:
    best: ServiceArea | None = None
    best_distance = max_km
    for area in areas:
        if area.coordinates is None:
            continue
        d = distance_km(origin, area.coordinates)
        if d <= best_distance:
            best, best_distance = area, d
    return best


def valid_coordinates(coordinates: Coordinates) -> bool:
    return -90.0 <= coordinates.lat <= 90.0 and -180.0 <= coordinates.lng <= 180.0
