from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from marketplace.domain.entities.service_area import Coordinates, ServiceArea


class LocationStatus(str, Enum):
    uninitialized = "uninitialized"
    checking = "checking"
    serviceable = "serviceable"
    not_serviceable = "not_serviceable"
    unavailable = "unavailable"  # backend failed, retryable; not the same as not_serviceable


@dataclass(frozen=True)
class LocationQuery:
    pincode: str | None = None
    city: str | None = None
    coordinates: Coordinates | None = None


@dataclass(frozen=True)
class LocationResolution:
    status: LocationStatus  # serviceable | not_serviceable
    service_area: ServiceArea | None = None
    available_service_types: tuple[str, ...] = ()

    @property
    def is_serviceable(self) -> bool:
        return self.status is LocationStatus.serviceable


@dataclass
class LocationSession:
    """Client-held record of the selected location.

    Single writer: the caller owns the session and passes it to the resolvers.
    Every resolution is tagged with ``request_seq``; only the result carrying the
    latest sequence number is ever applied.
    """

    status: LocationStatus = LocationStatus.uninitialized
    query: LocationQuery | None = None
    service_area: ServiceArea | None = None
    available_service_types: list[str] = field(default_factory=list)
    request_seq: int = 0

    @property
    def has_location(self) -> bool:
        return self.query is not None

    @property
    def is_checking_service(self) -> bool:
        return self.status is LocationStatus.checking

    @property
    def service_area_id(self) -> str | None:
        return self.service_area.id if self.service_area else None

    @property
    def is_usable(self) -> bool:
        return (
            self.status is LocationStatus.serviceable
            and self.service_area is not None
            and self.service_area.is_serviceable
            and len(self.available_service_types) > 0
        )

    def begin(self, query: LocationQuery) -> int:
        self.request_seq += 1
        self.status = LocationStatus.checking
        self.query = query
        self.service_area = None
        self.available_service_types = []
        return self.request_seq

    def is_current(self, seq: int) -> bool:
        return seq == self.request_seq

    def apply(self, seq: int, resolution: LocationResolution) -> bool:
        if not self.is_current(seq):
            return False
        self.status = resolution.status
        self.service_area = resolution.service_area
        if resolution.is_serviceable:
            self.available_service_types = list(resolution.available_service_types)
        else:
            self.available_service_types = []
        return True

    def fail(self, seq: int) -> bool:
        if not self.is_current(seq):
            return False
        self.status = LocationStatus.unavailable
        self.service_area = None
        self.available_service_types = []
        return True

    def clear(self) -> None:
        # Bumping the sequence discards anything still in flight.
        self.request_seq += 1
        self.status = LocationStatus.uninitialized
        self.query = None
        self.service_area = None
        self.available_service_types = []
