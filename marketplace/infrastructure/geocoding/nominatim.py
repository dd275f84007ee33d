from __future__ import annotations

import logging

import httpx

from marketplace.application.exceptions import UpstreamUnavailable
from marketplace.application.ports.geocoder import GeocoderPort
from marketplace.core.config import settings
from marketplace.domain.entities.service_area import Coordinates, GeocodedAddress


class NominatimGeocoder(GeocoderPort):
    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.GEOCODER_BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            headers={"User-Agent": user_agent or settings.GEOCODER_USER_AGENT},
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    async def reverse(self, coordinates: Coordinates) -> GeocodedAddress:
        params = {
            "format": "json",
            "lat": str(coordinates.lat),
            "lon": str(coordinates.lng),
            "zoom": "18",
            "addressdetails": "1",
        }
        try:
            response = await self._client.get(f"{self._base_url}/reverse", params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Reverse geocoding failed", extra={"reason": str(e)})
            raise UpstreamUnavailable(f"Reverse geocoding failed: {e}") from e

        if not isinstance(data, dict) or data.get("error"):
            reason = data.get("error") if isinstance(data, dict) else "unexpected payload"
            raise UpstreamUnavailable(f"Reverse geocoding returned no address: {reason}")

        address = data.get("address") or {}
        return GeocodedAddress(
            address=data.get("display_name"),
            city=address.get("city") or address.get("town") or address.get("village") or address.get("county"),
            state=address.get("state"),
            country=address.get("country"),
            pincode=address.get("postcode"),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
