from __future__ import annotations

import logging

from marketplace.application.exceptions import UpstreamUnavailable, ValidationError
from marketplace.application.ports.geocoder import GeocoderPort
from marketplace.application.ports.service_area_store import ServiceAreaStorePort
from marketplace.application.utils.availability import offered_service_types
from marketplace.application.utils.coalesce import coalesce
from marketplace.application.utils.geo import nearest_area, valid_coordinates
from marketplace.domain.entities.location_session import (
    LocationQuery,
    LocationResolution,
    LocationSession,
    LocationStatus,
)
from marketplace.domain.entities.service_area import ServiceArea


class LocationResolver:
    """Decides whether a location is serviceable and which service types operate there."""

    def __init__(
        self,
        store: ServiceAreaStorePort,
        geocoder: GeocoderPort | None = None,
        nearest_max_km: float = 25.0,
    ) -> None:
        self._store = store
        self._geocoder = geocoder
        self._nearest_max_km = nearest_max_km
        self._logger = logging.getLogger(__name__)

    async def resolve_location(self, query: LocationQuery) -> LocationResolution:
        """
        Serviceable only when an area matches, is flagged serviceable and offers
        at least one service type. Backend failures raise UpstreamUnavailable and
        are never reported as not_serviceable.
        """
        query = self._normalize(query)
        area = await self._find_area(query)

        if area is None:
            self._logger.info("No service area for location", extra={"pincode": query.pincode, "reason": "no_match"})
            return LocationResolution(status=LocationStatus.not_serviceable)

        if not area.is_serviceable:
            self._logger.info(
                "Service area not serviceable",
                extra={"service_area_id": area.id, "reason": "area_disabled"},
            )
            return LocationResolution(status=LocationStatus.not_serviceable, service_area=area)

        service_types = await offered_service_types(self._store, area)
        if not service_types:
            self._logger.info(
                "Service area has no service types",
                extra={"service_area_id": area.id, "reason": "no_service_types"},
            )
            return LocationResolution(status=LocationStatus.not_serviceable, service_area=area)

        return LocationResolution(
            status=LocationStatus.serviceable,
            service_area=area,
            available_service_types=tuple(service_types),
        )

    async def change_location(self, session: LocationSession, query: LocationQuery) -> bool:
        """
        Move the session to checking, resolve, and apply the result only if no newer
        change arrived meanwhile. Returns True if this call's result was applied.
        """
        seq = session.begin(query)
        try:
            resolution = await self.resolve_location(query)
        except UpstreamUnavailable:
            session.fail(seq)
            raise
        except ValidationError:
            # Malformed input leaves nothing to check against.
            if session.is_current(seq):
                session.clear()
            raise

        applied = session.apply(seq, resolution)
        if not applied:
            self._logger.info(
                "Discarding stale location result",
                extra={"request_seq": seq, "reason": "superseded"},
            )
        return applied

    async def _find_area(self, query: LocationQuery) -> ServiceArea | None:
        if query.pincode or (query.city and query.coordinates is None):
            return await self._store.find_service_area(query.pincode, query.city)

        # Coordinates: reverse-geocode first, then fall back to the nearest known area.
        geocoder_error: UpstreamUnavailable | None = None
        if self._geocoder is not None:
            try:
                address = await self._geocoder.reverse(query.coordinates)
            except UpstreamUnavailable as e:
                geocoder_error = e
                self._logger.warning("Reverse geocoding failed", extra={"reason": str(e)})
            else:
                pincode = coalesce(address.pincode)
                city = coalesce(query.city, address.city)
                if pincode or city:
                    area = await self._store.find_service_area(pincode, city)
                    if area is not None:
                        return area

        area = nearest_area(query.coordinates, await self._store.list_service_areas(), self._nearest_max_km)
        if area is None and geocoder_error is not None:
            raise geocoder_error
        return area

    def _normalize(self, query: LocationQuery) -> LocationQuery:
        pincode = coalesce(query.pincode)
        city = coalesce(query.city)
        pincode = pincode.replace(" ", "") if pincode else None
        city = city.strip() if city else None
        if query.coordinates is not None and not valid_coordinates(query.coordinates):
            raise ValidationError("Coordinates out of range")
        if not pincode and not city and query.coordinates is None:
            raise ValidationError("A pincode, city or coordinates are required")
        return LocationQuery(pincode=pincode, city=city, coordinates=query.coordinates)
