"""
Tests for location resolution and the location session state machine.
"""

from __future__ import annotations

import asyncio

import pytest

from marketplace.application.exceptions import UpstreamUnavailable, ValidationError
from marketplace.application.ports.geocoder import GeocoderPort
from marketplace.application.use_cases.location_resolver import LocationResolver
from marketplace.application.utils.geo import distance_km, nearest_area
from marketplace.domain.entities.location_session import LocationQuery, LocationSession, LocationStatus
from marketplace.domain.entities.service_area import Coordinates, GeocodedAddress, ServiceArea
from marketplace.infrastructure.store.memory_store import MemoryServiceAreaStore
from marketplace.infrastructure.store.seed_data import SERVICE_AREAS, build_memory_stores

NEAR_RAYACHOTY = Coordinates(lat=14.06, lng=78.76)
MID_OCEAN = Coordinates(lat=0.0, lng=70.0)


class StubGeocoder(GeocoderPort):
    def __init__(self, address: GeocodedAddress | None = None, error: bool = False) -> None:
        self.address = address or GeocodedAddress()
        self.error = error
        self.calls = 0

    async def reverse(self, coordinates: Coordinates) -> GeocodedAddress:
        self.calls += 1
        if self.error:
            raise UpstreamUnavailable("geocoder down")
        return self.address


class GatedGeocoder(GeocoderPort):
    """Blocks until released so a newer request can overtake it."""

    def __init__(self, address: GeocodedAddress) -> None:
        self.address = address
        self.gate: asyncio.Event | None = None

    async def reverse(self, coordinates: Coordinates) -> GeocodedAddress:
        await self.gate.wait()
        return self.address


def _resolver(geocoder: GeocoderPort | None = None, store: MemoryServiceAreaStore | None = None) -> LocationResolver:
    if store is None:
        _, store, _ = build_memory_stores()
    return LocationResolver(store=store, geocoder=geocoder, nearest_max_km=25.0)


def test_unknown_pincode_is_not_serviceable():
    """No matching area: not serviceable and no service types."""
    result = asyncio.run(_resolver().resolve_location(LocationQuery(pincode="999999")))

    assert result.status is LocationStatus.not_serviceable
    assert result.service_area is None
    assert result.available_service_types == ()


def test_known_pincode_lists_service_types():
    result = asyncio.run(_resolver().resolve_location(LocationQuery(pincode=" 516 269 ")))

    assert result.is_serviceable
    assert result.service_area.id == "area-rayachoty"
    assert result.available_service_types == ("grocery", "fashion", "handyman", "car-rental")


def test_disabled_area_is_not_serviceable_but_reported():
    result = asyncio.run(_resolver().resolve_location(LocationQuery(pincode="517501")))

    assert result.status is LocationStatus.not_serviceable
    assert result.service_area.id == "area-tirupati"
    assert result.available_service_types == ()


def test_area_gating_never_yields_serviceable():
    """Disabled areas and areas without service types are never serviceable."""
    store = MemoryServiceAreaStore(areas=list(SERVICE_AREAS))
    cases = [
        ("600001", False, ("grocery",)),
        ("600002", True, ()),
        ("600003", False, ()),
        ("600004", True, (" ", "")),
    ]
    for pincode, serviceable, types in cases:
        store.add_area(
            ServiceArea(
                id=f"area-{pincode}",
                pincode=pincode,
                city="Testpur",
                state="Andhra Pradesh",
                is_serviceable=serviceable,
                service_types=types,
            )
        )
    resolver = _resolver(store=store)

    for pincode, _, _ in cases:
        result = asyncio.run(resolver.resolve_location(LocationQuery(pincode=pincode)))
        assert result.status is LocationStatus.not_serviceable
        assert result.available_service_types == ()


def test_area_table_overrides_area_list():
    store = MemoryServiceAreaStore(
        areas=list(SERVICE_AREAS),
        area_service_types={"area-kadapa": ["fashion", "fashion", "grocery"]},
    )
    result = asyncio.run(_resolver(store=store).resolve_location(LocationQuery(pincode="516001")))

    assert result.available_service_types == ("fashion", "grocery")


def test_city_lookup_is_case_insensitive():
    result = asyncio.run(_resolver().resolve_location(LocationQuery(city="  kadapa ")))

    assert result.is_serviceable
    assert result.service_area.id == "area-kadapa"


def test_bad_queries_are_rejected():
    resolver = _resolver()

    with pytest.raises(ValidationError):
        asyncio.run(resolver.resolve_location(LocationQuery(pincode="  ", city="")))
    with pytest.raises(ValidationError):
        asyncio.run(resolver.resolve_location(LocationQuery(coordinates=Coordinates(lat=100.0, lng=0.0))))


def test_coordinates_use_reverse_geocoded_pincode():
    geocoder = StubGeocoder(GeocodedAddress(city="Kadapa", pincode="516001"))
    result = asyncio.run(_resolver(geocoder).resolve_location(LocationQuery(coordinates=NEAR_RAYACHOTY)))

    assert geocoder.calls == 1
    assert result.service_area.id == "area-kadapa"


def test_coordinates_fall_back_to_nearest_area():
    geocoder = StubGeocoder(GeocodedAddress(city="Nowhere", pincode="000000"))
    result = asyncio.run(_resolver(geocoder).resolve_location(LocationQuery(coordinates=NEAR_RAYACHOTY)))

    assert result.is_serviceable
    assert result.service_area.id == "area-rayachoty"


def test_geocoder_outage_with_nearby_area_still_resolves():
    result = asyncio.run(
        _resolver(StubGeocoder(error=True)).resolve_location(LocationQuery(coordinates=NEAR_RAYACHOTY))
    )

    assert result.service_area.id == "area-rayachoty"


def test_geocoder_outage_without_nearby_area_is_unavailable():
    """An outage is never reported as not serviceable."""
    with pytest.raises(UpstreamUnavailable):
        asyncio.run(_resolver(StubGeocoder(error=True)).resolve_location(LocationQuery(coordinates=MID_OCEAN)))


def test_no_geocoder_and_nothing_nearby_is_not_serviceable():
    result = asyncio.run(_resolver().resolve_location(LocationQuery(coordinates=MID_OCEAN)))

    assert result.status is LocationStatus.not_serviceable


def test_distance_and_nearest_area():
    rayachoty = SERVICE_AREAS[0].coordinates
    kadapa = SERVICE_AREAS[1].coordinates

    assert distance_km(rayachoty, rayachoty) == 0.0
    assert 45.0 < distance_km(rayachoty, kadapa) < 50.0
    assert nearest_area(kadapa, SERVICE_AREAS, max_km=25.0).id == "area-kadapa"
    assert nearest_area(MID_OCEAN, SERVICE_AREAS, max_km=25.0) is None


def test_session_follows_successful_change():
    session = LocationSession()
    applied = asyncio.run(_resolver().change_location(session, LocationQuery(pincode="516269")))

    assert applied is True
    assert session.status is LocationStatus.serviceable
    assert session.is_usable
    assert session.service_area_id == "area-rayachoty"
    assert "handyman" in session.available_service_types


def test_session_not_serviceable_has_no_types():
    session = LocationSession()
    asyncio.run(_resolver().change_location(session, LocationQuery(pincode="517501")))

    assert session.status is LocationStatus.not_serviceable
    assert session.available_service_types == []
    assert not session.is_usable


def test_stale_result_is_discarded():
    """A slow earlier lookup must not overwrite a newer location."""
    geocoder = GatedGeocoder(GeocodedAddress(pincode="516269"))
    resolver = _resolver(geocoder)
    session = LocationSession()

    async def scenario() -> tuple[bool, bool]:
        geocoder.gate = asyncio.Event()
        slow = asyncio.create_task(resolver.change_location(session, LocationQuery(coordinates=NEAR_RAYACHOTY)))
        await asyncio.sleep(0)
        fast = await resolver.change_location(session, LocationQuery(pincode="516001"))
        geocoder.gate.set()
        return await slow, fast

    slow_applied, fast_applied = asyncio.run(scenario())

    assert fast_applied is True
    assert slow_applied is False
    assert session.service_area_id == "area-kadapa"
    assert session.available_service_types == ["grocery"]


def test_upstream_failure_marks_session_unavailable():
    session = LocationSession()

    with pytest.raises(UpstreamUnavailable):
        asyncio.run(
            _resolver(StubGeocoder(error=True)).change_location(session, LocationQuery(coordinates=MID_OCEAN))
        )
    assert session.status is LocationStatus.unavailable
    assert not session.is_usable


def test_invalid_change_clears_session():
    session = LocationSession()
    resolver = _resolver()
    asyncio.run(resolver.change_location(session, LocationQuery(pincode="516269")))

    with pytest.raises(ValidationError):
        asyncio.run(resolver.change_location(session, LocationQuery()))
    assert session.status is LocationStatus.uninitialized
    assert not session.has_location


if __name__ == "__main__":
    test_unknown_pincode_is_not_serviceable()
    test_known_pincode_lists_service_types()
    test_disabled_area_is_not_serviceable_but_reported()
    test_area_gating_never_yields_serviceable()
    test_area_table_overrides_area_list()
    test_city_lookup_is_case_insensitive()
    test_bad_queries_are_rejected()
    test_coordinates_use_reverse_geocoded_pincode()
    test_coordinates_fall_back_to_nearest_area()
    test_geocoder_outage_with_nearby_area_still_resolves()
    test_geocoder_outage_without_nearby_area_is_unavailable()
    test_no_geocoder_and_nothing_nearby_is_not_serviceable()
    test_distance_and_nearest_area()
    test_session_follows_successful_change()
    test_session_not_serviceable_has_no_types()
    test_stale_result_is_discarded()
    test_upstream_failure_marks_session_unavailable()
    test_invalid_change_clears_session()
    print("All tests passed!")
