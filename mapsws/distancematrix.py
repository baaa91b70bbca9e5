"""Distance Matrix API: request validation, query building and response decoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Mapping

from .client import ApiConfig, Client, MapsError, check_status
from .model import (
    Avoid,
    Distance,
    TrafficModel,
    TransitMode,
    TransitRoutingPreference,
    TravelMode,
    Units,
    _duration_from,
    _duration_to,
)

DISTANCE_MATRIX_API = ApiConfig(
    host="https://maps.googleapis.com",
    path="/maps/api/distancematrix/json",
    accepts_client_id=True,
    accepts_signature=False,
)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value.value if isinstance(value, Enum) else str(value)


@dataclass
class DistanceMatrixRequest:
    """Parameters of a Distance Matrix request; origins and destinations are required."""

    origins: list[str] = field(default_factory=list)
    destinations: list[str] = field(default_factory=list)
    mode: TravelMode | str | None = None
    language: str = ""
    avoid: Avoid | str | None = None
    units: Units | str | None = None
    departure_time: str = ""
    arrival_time: str = ""
    traffic_model: TrafficModel | str | None = None
    transit_mode: list[TransitMode | str] = field(default_factory=list)
    transit_routing_preference: TransitRoutingPreference | str | None = None

    def validate(self) -> None:
        """Raise MapsError if the request cannot be sent."""
        mode = _text(self.mode)
        transit = TravelMode.TRANSIT.value
        if not self.origins:
            raise MapsError("maps: origins empty")
        if not self.destinations:
            raise MapsError("maps: destinations empty")
        if self.departure_time and self.arrival_time:
            raise MapsError("maps: DepartureTime and ArrivalTime both specified")
        if self.transit_mode and mode != transit:
            raise MapsError("maps: TransitMode specified while Mode != TravelModeTransit")
        if _text(self.transit_routing_preference) and mode != transit:
            raise MapsError(
                f"maps: mode of transit '{mode}' invalid for TransitRoutingPreference"
            )
        if mode == transit and _text(self.traffic_model):
            raise MapsError("maps: cannot specify transit mode and traffic model together")

    def params(self) -> dict[str, str]:
        """Query parameters for this request."""
        query = {
            "origins": "|".join(self.origins),
            "destinations": "|".join(self.destinations),
        }
        optional = {
            "mode": _text(self.mode),
            "language": self.language,
            "avoid": _text(self.avoid),
            "units": _text(self.units),
            "departure_time": self.departure_time,
            "arrival_time": self.arrival_time,
            "traffic_model": _text(self.traffic_model),
            "transit_mode": "|".join(_text(t) for t in self.transit_mode),
            "transit_routing_preference": _text(self.transit_routing_preference),
        }
        query.update((key, value) for key, value in optional.items() if value)
        return query


@dataclass
class DistanceMatrixElement:
    """Travel distance and time for one origin/destination pair."""

    status: str = ""
    duration: timedelta = field(default_factory=timedelta)
    duration_in_traffic: timedelta = field(default_factory=timedelta)
    distance: Distance = field(default_factory=Distance)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> DistanceMatrixElement:
        data = data or {}
        return cls(
            status=data.get("status", "") or "",
            duration=_duration_from(data.get("duration")),
            duration_in_traffic=_duration_from(data.get("duration_in_traffic")),
            distance=Distance.from_dict(data.get("distance")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "duration": _duration_to(self.duration),
            "duration_in_traffic": _duration_to(self.duration_in_traffic),
            "distance": self.distance.to_dict(),
        }


@dataclass
class DistanceMatrixElementsRow:
    """One row of elements, for a single origin."""

    elements: list[DistanceMatrixElement] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> DistanceMatrixElementsRow:
        data = data or {}
        return cls(
            elements=[DistanceMatrixElement.from_dict(e) for e in data.get("elements") or []]
        )

    def to_dict(self) -> dict[str, Any]:
        return {"elements": [e.to_dict() for e in self.elements]}


@dataclass
class DistanceMatrixResponse:
    """Decoded Distance Matrix response."""

    origin_addresses: list[str] = field(default_factory=list)
    destination_addresses: list[str] = field(default_factory=list)
    rows: list[DistanceMatrixElementsRow] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> DistanceMatrixResponse:
        data = data or {}
        return cls(
            origin_addresses=list(data.get("origin_addresses") or []),
            destination_addresses=list(data.get("destination_addresses") or []),
            rows=[DistanceMatrixElementsRow.from_dict(r) for r in data.get("rows") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin_addresses": list(self.origin_addresses),
            "destination_addresses": list(self.destination_addresses),
            "rows": [r.to_dict() for r in self.rows],
        }


def distance_matrix(client: Client, request: DistanceMatrixRequest) -> DistanceMatrixResponse:
    """Issue a Distance Matrix request and return the decoded response."""
    request.validate()
    payload = check_status(client.get_json(DISTANCE_MATRIX_API, request.params()))
    return DistanceMatrixResponse.from_dict(payload)