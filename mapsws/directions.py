"""Directions API: request validation, query building and response decoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .client import ApiConfig, Client, MapsError, check_status
from .model import (
    Avoid,
    GeocodedWaypoint,
    Route,
    TrafficModel,
    TransitMode,
    TransitRoutingPreference,
    TravelMode,
    Units,
)

DIRECTIONS_API = ApiConfig(
    host="https://maps.googleapis.com",
    path="/maps/api/directions/json",
    accepts_client_id=True,
    accepts_signature=False,
)

_TRAVEL_MODES = frozenset(mode.value for mode in TravelMode)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value.value if isinstance(value, Enum) else str(value)


@dataclass
class DirectionsRequest:
    """Parameters of a Directions API request; origin and destination are required."""

    origin: str = ""
    destination: str = ""
    mode: TravelMode | str | None = None
    departure_time: str = ""
    arrival_time: str = ""
    waypoints: list[str] = field(default_factory=list)
    alternatives: bool = False
    optimize: bool = False
    avoid: list[Avoid | str] = field(default_factory=list)
    language: str = ""
    units: Units | str | None = None
    region: str = ""
    transit_mode: list[TransitMode | str] = field(default_factory=list)
    transit_routing_preference: TransitRoutingPreference | str | None = None
    traffic_model: TrafficModel | str | None = None

    def validate(self) -> None:
        """Raise MapsError if the request cannot be sent."""
        mode = _text(self.mode)
        if not self.origin:
            raise MapsError("maps: origin missing")
        if not self.destination:
            raise MapsError("maps: destination missing")
        if mode and mode not in _TRAVEL_MODES:
            raise MapsError(f"maps: unknown Mode: '{mode}'")
        if self.departure_time and self.arrival_time:
            raise MapsError("maps: DepartureTime and ArrivalTime both specified")
        if self.transit_mode and mode != TravelMode.TRANSIT.value:
            raise MapsError("maps: TransitMode specified while Mode != TravelModeTransit")
        if _text(self.transit_routing_preference) and mode != TravelMode.TRANSIT.value:
            raise MapsError(
                f"maps: mode of transit '{mode}' invalid for TransitRoutingPreference"
            )

    def _waypoints_value(self) -> str:
        prefix = "optimize:true|" if self.optimize else ""
        return prefix + "|".join(self.waypoints)

    def params(self) -> dict[str, str]:
        """Query parameters for this request."""
        query = {"origin": self.origin, "destination": self.destination}
        optional = {
            "mode": _text(self.mode),
            "departure_time": self.departure_time,
            "arrival_time": self.arrival_time,
            "waypoints": self._waypoints_value() if self.waypoints else "",
            "alternatives": "true" if self.alternatives else "",
            "avoid": "|".join(_text(a) for a in self.avoid),
            "language": self.language,
            "units": _text(self.units),
            "region": self.region,
            "transit_mode": "|".join(_text(t) for t in self.transit_mode),
            "transit_routing_preference": _text(self.transit_routing_preference),
            "traffic_model": _text(self.traffic_model),
        }
        query.update((key, value) for key, value in optional.items() if value)
        return query


def directions(
    client: Client, request: DirectionsRequest
) -> tuple[list[Route], list[GeocodedWaypoint]]:
    """Issue a Directions request and return its routes and geocoded waypoints."""
    request.validate()
    payload = check_status(client.get_json(DIRECTIONS_API, request.params()))
    routes = [Route.from_dict(r) for r in payload.get("routes") or []]
    waypoints = [
        GeocodedWaypoint.from_dict(w) for w in payload.get("geocoded_waypoints") or []
    ]
    return routes, waypoints