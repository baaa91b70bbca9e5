from urllib.parse import parse_qs, urlsplit

import pytest
import responses

from mapsws.client import Client, MapsError
from mapsws.directions import DirectionsRequest, directions
from mapsws.model import (
    Avoid,
    TrafficModel,
    TransitMode,
    TransitRoutingPreference,
    TravelMode,
    Units,
)

BASE_URL = "https://maps.example.com"
ENDPOINT = BASE_URL + "/maps/api/directions/json"

RESPONSE = {
    "geocoded_waypoints": [
        {"geocoder_status": "OK", "place_id": "origin-place", "types": ["locality"]},
        {"geocoder_status": "OK", "place_id": "dest-place", "types": ["locality"]},
    ],
    "routes": [
        {
            "summary": "A route",
            "legs": [
                {
                    "distance": {"text": "23.8 km", "value": 23846},
                    "duration": {"text": "37 mins", "value": 2215},
                    "start_address": "Sydney NSW, Australia",
                    "end_address": "Parramatta NSW, Australia",
                    "steps": [],
                }
            ],
            "overview_polyline": {"points": "_ibE_seK"},
            "copyrights": "Map data",
            "warnings": [],
            "waypoint_order": [],
        }
    ],
    "status": "OK",
}


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def client():
    return Client(api_key="placeholder", base_url=BASE_URL)


def _query(url):
    return {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}


def test_directions_decodes_routes_and_waypoints(mocked, client):
    mocked.add(responses.GET, ENDPOINT, json=RESPONSE, status=200)
    routes, waypoints = directions(
        client, DirectionsRequest(origin="Sydney", destination="Parramatta")
    )
    assert [w.place_id for w in waypoints] == ["origin-place", "dest-place"]
    assert len(routes) == 1
    leg = routes[0].legs[0]
    assert routes[0].summary == "A route"
    assert leg.distance.meters == 23846
    assert leg.duration.total_seconds() == 2215
    assert leg.start_address == "Sydney NSW, Australia"


def test_directions_request_query(mocked, client):
    mocked.add(responses.GET, ENDPOINT, json={"status": "OK"}, status=200)
    request = DirectionsRequest(
        origin="Sydney",
        destination="Parramatta",
        mode=TravelMode.TRANSIT,
        departure_time="now",
        waypoints=["Pyrmont", "Ultimo"],
        optimize=True,
        alternatives=True,
        avoid=[Avoid.TOLLS, Avoid.FERRIES],
        language="en",
        units=Units.IMPERIAL,
        region="au",
        transit_mode=[TransitMode.BUS, TransitMode.RAIL],
        transit_routing_preference=TransitRoutingPreference.LESS_WALKING,
    )
    routes, waypoints = directions(client, request)
    assert routes == [] and waypoints == []
    query = _query(mocked.calls[0].request.url)
    assert query == {
        "origin": "Sydney",
        "destination": "Parramatta",
        "mode": "transit",
        "departure_time": "now",
        "waypoints": "optimize:true|Pyrmont|Ultimo",
        "alternatives": "true",
        "avoid": "tolls|ferries",
        "language": "en",
        "units": "imperial",
        "region": "au",
        "transit_mode": "bus|rail",
        "transit_routing_preference": "less_walking",
        "key": "placeholder",
    }


def test_params_omit_empty_fields():
    params = DirectionsRequest(origin="Sydney", destination="Parramatta").params()
    assert params == {"origin": "Sydney", "destination": "Parramatta"}


def test_params_waypoints_without_optimize():
    request = DirectionsRequest(origin="a", destination="b", waypoints=["x", "y"])
    assert request.params()["waypoints"] == "x|y"


def test_params_traffic_model():
    request = DirectionsRequest(
        origin="a",
        destination="b",
        mode=TravelMode.DRIVING,
        traffic_model=TrafficModel.PESSIMISTIC,
    )
    assert request.params()["traffic_model"] == "pessimistic"


@pytest.mark.parametrize(
    "request_obj",
    [
        DirectionsRequest(destination="Parramatta"),
        DirectionsRequest(origin="Sydney"),
        DirectionsRequest(origin="Sydney", destination="Parramatta", mode="flying"),
        DirectionsRequest(
            origin="Sydney", destination="Parramatta", departure_time="now", arrival_time="4pm"
        ),
        DirectionsRequest(
            origin="Sydney", destination="Parramatta", transit_mode=[TransitMode.BUS]
        ),
        DirectionsRequest(
            origin="Sydney",
            destination="Parramatta",
            mode=TravelMode.DRIVING,
            transit_routing_preference=TransitRoutingPreference.FEWER_TRANSFERS,
        ),
    ],
)
def test_invalid_requests_raise(client, request_obj):
    with pytest.raises(MapsError):
        directions(client, request_obj)


def test_missing_origin_message(client):
    with pytest.raises(MapsError, match="origin missing"):
        directions(client, DirectionsRequest(destination="Parramatta"))


def test_status_error_raises(mocked, client):
    mocked.add(
        responses.GET,
        ENDPOINT,
        json={"status": "NOT_FOUND", "error_message": "nothing"},
        status=200,
    )
    with pytest.raises(MapsError, match="NOT_FOUND - nothing"):
        directions(client, DirectionsRequest(origin="Sydney", destination="Parramatta"))


def test_failing_server_raises(mocked, client):
    mocked.add(responses.GET, ENDPOINT, json={"status": "ERROR"}, status=500)
    with pytest.raises(MapsError):
        directions(client, DirectionsRequest(origin="Sydney", destination="Parramatta"))