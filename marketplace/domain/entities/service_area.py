from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class ServiceArea:
    id: str
    pincode: str
    city: str
    state: str
    country: str = "India"
    is_serviceable: bool = True
    service_types: tuple[str, ...] = ()
    delivery_time_hours: int | None = None
    delivery_charge: float | None = None
    coordinates: Coordinates | None = None


@dataclass(frozen=True)
class GeocodedAddress:
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    pincode: str | None = None
