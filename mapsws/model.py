"""Value types shared by the routing APIs, with conversion to and from their JSON form."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class TravelMode(str, Enum):
    """Mode of transport for a routing request."""

    DRIVING = "driving"
    WALKING = "walking"
    BICYCLING = "bicycling"
    TRANSIT = "transit"


class Avoid(str, Enum):
    """Features a route should avoid."""

    TOLLS = "tolls"
    HIGHWAYS = "highways"
    FERRIES = "ferries"
    INDOOR = "indoor"


class Units(str, Enum):
    """Unit system used for textual distances."""

    METRIC = "metric"
    IMPERIAL = "imperial"


class TransitMode(str, Enum):
    """Preferred mode of public transit."""

    BUS = "bus"
    SUBWAY = "subway"
    TRAIN = "train"
    TRAM = "tram"
    RAIL = "rail"


class TransitRoutingPreference(str, Enum):
    """Preference applied when choosing transit routes."""

    LESS_WALKING = "less_walking"
    FEWER_TRANSFERS = "fewer_transfers"


class TrafficModel(str, Enum):
    """Traffic prediction model for future departures."""

    BEST_GUESS = "best_guess"
    OPTIMISTIC = "optimistic"
    PESSIMISTIC = "pessimistic"


def _format_duration(value: timedelta) -> str:
    total = int(value.total_seconds())
    if total == 0:
        return "0s"
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _duration_from(data: Mapping[str, Any] | None) -> timedelta:
    if not data:
        return timedelta(0)
    return timedelta(seconds=int(data.get("value", 0)))


def _duration_to(value: timedelta) -> dict[str, Any]:
    return {"value": int(value.total_seconds()), "text": _format_duration(value)}


def _zone(name: str):
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def _datetime_from(data: Mapping[str, Any] | None) -> datetime | None:
    if not data:
        return None
    return datetime.fromtimestamp(int(data.get("value", 0)), tz=_zone(data.get("time_zone", "")))


def _zone_name(value: datetime) -> str:
    tz = value.tzinfo
    key = getattr(tz, "key", None)
    if key:
        return key
    if tz is None or value.utcoffset() == timedelta(0):
        return "UTC"
    return value.tzname() or "UTC"


def _datetime_to(value: datetime | None) -> dict[str, Any] | None:
    if value is None:
        return None
    aware = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    hour = aware.hour % 12 or 12
    suffix = "pm" if aware.hour >= 12 else "am"
    return {
        "text": f"{hour}:{aware.minute:02d}{suffix}",
        "time_zone": _zone_name(aware),
        "value": int(aware.timestamp()),
    }


@dataclass
class LatLng:
    """A latitude/longitude pair in degrees."""

    lat: float = 0.0
    lng: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> LatLng:
        data = data or {}
        return cls(lat=float(data.get("lat", 0.0)), lng=float(data.get("lng", 0.0)))

    def to_dict(self) -> dict[str, Any]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class LatLngBounds:
    """A rectangle given by its north-east and south-west corners."""

    northeast: LatLng = field(default_factory=LatLng)
    southwest: LatLng = field(default_factory=LatLng)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> LatLngBounds:
        data = data or {}
        return cls(
            northeast=LatLng.from_dict(data.get("northeast")),
            southwest=LatLng.from_dict(data.get("southwest")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"northeast": self.northeast.to_dict(), "southwest": self.southwest.to_dict()}


@dataclass
class Polyline:
    """An encoded polyline."""

    points: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Polyline:
        data = data or {}
        return cls(points=data.get("points", "") or "")

    def to_dict(self) -> dict[str, Any]:
        return {"points": self.points}


@dataclass
class Distance:
    """A distance in metres with its human-readable text."""

    human_readable: str = ""
    meters: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Distance:
        data = data or {}
        return cls(human_readable=data.get("text", "") or "", meters=int(data.get("value", 0)))

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.human_readable, "value": self.meters}


@dataclass
class GeocodedWaypoint:
    """Geocoding outcome for an origin, waypoint or destination."""

    geocoder_status: str = ""
    partial_match: bool = False
    place_id: str = ""
    types: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> GeocodedWaypoint:
        data = data or {}
        return cls(
            geocoder_status=data.get("geocoder_status", "") or "",
            partial_match=bool(data.get("partial_match", False)),
            place_id=data.get("place_id", "") or "",
            types=list(data.get("types") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "geocoder_status": self.geocoder_status,
            "partial_match": self.partial_match,
            "place_id": self.place_id,
            "types": list(self.types),
        }


@dataclass
class Fare:
    """Total fare of a transit route."""

    currency: str = ""
    value: float = 0.0
    text: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Fare:
        data = data or {}
        return cls(
            currency=data.get("currency", "") or "",
            value=float(data.get("value", 0.0)),
            text=data.get("text", "") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"currency": self.currency, "value": self.value, "text": self.text}


@dataclass
class TransitAgency:
    """Operator of a transit line."""

    name: str = ""
    url: str = ""
    phone: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TransitAgency:
        data = data or {}
        return cls(
            name=data.get("name", "") or "",
            url=data.get("url", "") or "",
            phone=data.get("phone", "") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url, "phone": self.phone}


@dataclass
class TransitLineVehicle:
    """Type of vehicle running on a transit line."""

    name: str = ""
    type: str = ""
    icon: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TransitLineVehicle:
        data = data or {}
        return cls(
            name=data.get("name", "") or "",
            type=data.get("type", "") or "",
            icon=data.get("icon", "") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "icon": self.icon}


@dataclass
class TransitLine:
    """A transit line used in a step."""

    name: str = ""
    short_name: str = ""
    color: str = ""
    agencies: list[TransitAgency] = field(default_factory=list)
    url: str = ""
    icon: str = ""
    text_color: str = ""
    vehicle: TransitLineVehicle = field(default_factory=TransitLineVehicle)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TransitLine:
        data = data or {}
        return cls(
            name=data.get("name", "") or "",
            short_name=data.get("short_name", "") or "",
            color=data.get("color", "") or "",
            agencies=[TransitAgency.from_dict(a) for a in data.get("agencies") or []],
            url=data.get("url", "") or "",
            icon=data.get("icon", "") or "",
            text_color=data.get("text_color", "") or "",
            vehicle=TransitLineVehicle.from_dict(data.get("vehicle")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "short_name": self.short_name,
            "color": self.color,
            "agencies": [a.to_dict() for a in self.agencies],
            "url": self.url,
            "icon": self.icon,
            "text_color": self.text_color,
            "vehicle": self.vehicle.to_dict(),
        }


@dataclass
class TransitStop:
    """A transit stop or station."""

    location: LatLng = field(default_factory=LatLng)
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TransitStop:
        data = data or {}
        return cls(location=LatLng.from_dict(data.get("location")), name=data.get("name", "") or "")

    def to_dict(self) -> dict[str, Any]:
        return {"location": self.location.to_dict(), "name": self.name}


@dataclass
class TransitDetails:
    """Transit-specific information for a step."""

    arrival_stop: TransitStop = field(default_factory=TransitStop)
    departure_stop: TransitStop = field(default_factory=TransitStop)
    arrival_time: datetime | None = None
    departure_time: datetime | None = None
    headsign: str = ""
    headway: timedelta = field(default_factory=timedelta)
    num_stops: int = 0
    line: TransitLine = field(default_factory=TransitLine)
    trip_short_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TransitDetails:
        data = data or {}
        return cls(
            arrival_stop=TransitStop.from_dict(data.get("arrival_stop")),
            departure_stop=TransitStop.from_dict(data.get("departure_stop")),
            arrival_time=_datetime_from(data.get("arrival_time")),
            departure_time=_datetime_from(data.get("departure_time")),
            headsign=data.get("headsign", "") or "",
            headway=timedelta(seconds=int(data.get("headway", 0) or 0)),
            num_stops=int(data.get("num_stops", 0) or 0),
            line=TransitLine.from_dict(data.get("line")),
            trip_short_name=data.get("trip_short_name", "") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "arrival_stop": self.arrival_stop.to_dict(),
            "departure_stop": self.departure_stop.to_dict(),
            "arrival_time": _datetime_to(self.arrival_time),
            "departure_time": _datetime_to(self.departure_time),
            "headsign": self.headsign,
            "headway": int(self.headway.total_seconds()),
            "num_stops": self.num_stops,
            "line": self.line.to_dict(),
            "trip_short_name": self.trip_short_name,
        }


@dataclass
class Step:
    """A single step of a leg."""

    html_instructions: str = ""
    distance: Distance = field(default_factory=Distance)
    duration: timedelta = field(default_factory=timedelta)
    start_location: LatLng = field(default_factory=LatLng)
    end_location: LatLng = field(default_factory=LatLng)
    polyline: Polyline = field(default_factory=Polyline)
    steps: list[Step] = field(default_factory=list)
    transit_details: TransitDetails | None = None
    travel_mode: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Step:
        data = data or {}
        details = data.get("transit_details")
        return cls(
            html_instructions=data.get("html_instructions", "") or "",
            distance=Distance.from_dict(data.get("distance")),
            duration=_duration_from(data.get("duration")),
            start_location=LatLng.from_dict(data.get("start_location")),
            end_location=LatLng.from_dict(data.get("end_location")),
            polyline=Polyline.from_dict(data.get("polyline")),
            steps=[Step.from_dict(s) for s in data.get("steps") or []],
            transit_details=TransitDetails.from_dict(details) if details is not None else None,
            travel_mode=data.get("travel_mode", "") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "html_instructions": self.html_instructions,
            "distance": self.distance.to_dict(),
            "duration": _duration_to(self.duration),
            "start_location": self.start_location.to_dict(),
            "end_location": self.end_location.to_dict(),
            "polyline": self.polyline.to_dict(),
            "steps": [s.to_dict() for s in self.steps],
            "transit_details": (
                self.transit_details.to_dict() if self.transit_details is not None else None
            ),
            "travel_mode": self.travel_mode,
        }


@dataclass
class ViaWaypoint:
    """A point through which a leg was routed."""

    location: LatLng = field(default_factory=LatLng)
    step_index: int = 0
    step_interpolation: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ViaWaypoint:
        data = data or {}
        return cls(
            location=LatLng.from_dict(data.get("location")),
            step_index=int(data.get("step_index", 0) or 0),
            step_interpolation=float(data.get("step_interpolation", 0.0) or 0.0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location.to_dict(),
            "step_index": self.step_index,
            "step_interpolation": self.step_interpolation,
        }


@dataclass
class Leg:
    """A single leg of a route."""

    steps: list[Step] = field(default_factory=list)
    distance: Distance = field(default_factory=Distance)
    duration: timedelta = field(default_factory=timedelta)
    duration_in_traffic: timedelta = field(default_factory=timedelta)
    arrival_time: datetime | None = None
    departure_time: datetime | None = None
    start_location: LatLng = field(default_factory=LatLng)
    end_location: LatLng = field(default_factory=LatLng)
    start_address: str = ""
    end_address: str = ""
    via_waypoint: list[ViaWaypoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Leg:
        data = data or {}
        return cls(
            steps=[Step.from_dict(s) for s in data.get("steps") or []],
            distance=Distance.from_dict(data.get("distance")),
            duration=_duration_from(data.get("duration")),
            duration_in_traffic=_duration_from(data.get("duration_in_traffic")),
            arrival_time=_datetime_from(data.get("arrival_time")),
            departure_time=_datetime_from(data.get("departure_time")),
            start_location=LatLng.from_dict(data.get("start_location")),
            end_location=LatLng.from_dict(data.get("end_location")),
            start_address=data.get("start_address", "") or "",
            end_address=data.get("end_address", "") or "",
            via_waypoint=[ViaWaypoint.from_dict(v) for v in data.get("via_waypoint") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "steps": [s.to_dict() for s in self.steps],
            "distance": self.distance.to_dict(),
            "duration": _duration_to(self.duration),
            "duration_in_traffic": _duration_to(self.duration_in_traffic),
            "arrival_time": _datetime_to(self.arrival_time),
            "departure_time": _datetime_to(self.departure_time),
            "start_location": self.start_location.to_dict(),
            "end_location": self.end_location.to_dict(),
            "start_address": self.start_address,
            "end_address": self.end_address,
            "via_waypoint": [v.to_dict() for v in self.via_waypoint],
        }


@dataclass
class Route:
    """A single route between an origin and a destination."""

    summary: str = ""
    legs: list[Leg] = field(default_factory=list)
    waypoint_order: list[int] = field(default_factory=list)
    overview_polyline: Polyline = field(default_factory=Polyline)
    bounds: LatLngBounds = field(default_factory=LatLngBounds)
    copyrights: str = ""
    warnings: list[str] = field(default_factory=list)
    fare: Fare | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Route:
        data = data or {}
        fare = data.get("fare")
        return cls(
            summary=data.get("summary", "") or "",
            legs=[Leg.from_dict(leg) for leg in data.get("legs") or []],
            waypoint_order=[int(i) for i in data.get("waypoint_order") or []],
            overview_polyline=Polyline.from_dict(data.get("overview_polyline")),
            bounds=LatLngBounds.from_dict(data.get("bounds")),
            copyrights=data.get("copyrights", "") or "",
            warnings=list(data.get("warnings") or []),
            fare=Fare.from_dict(fare) if fare is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "legs": [leg.to_dict() for leg in self.legs],
            "waypoint_order": list(self.waypoint_order),
            "overview_polyline": self.overview_polyline.to_dict(),
            "bounds": self.bounds.to_dict(),
            "copyrights": self.copyrights,
            "warnings": list(self.warnings),
            "fare": self.fare.to_dict() if self.fare is not None else None,
        }