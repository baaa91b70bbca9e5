# mapsws

A small Python library for the Maps Web Service APIs. It covers:

- **Directions** (`mapsws.directions`): routes between an origin and a
  destination, with legs, steps and transit details.
- **Distance Matrix** (`mapsws.distancematrix`): travel distance and time for
  every pair of origins and destinations.

The shared HTTP client lives in `mapsws.client`, and the value types used in
requests and responses (travel modes, units, routes, legs, steps and so on)
live in `mapsws.model`.

Requests are rate limited on the client side (50 requests per second by
default), can be authenticated with an API key or with a client ID and URL
signature, and can carry experience IDs in the `X-GOOG-MAPS-EXPERIENCE-ID`
header.

## Installation

```
pip install mapsws
```

For running the test suite:

```
pip install "mapsws[test]"
pytest
```

## Usage

### Creating a client

```python
from mapsws.client import Client

client = Client(api_key="placeholder")
```

A client needs either an API key, or a client ID together with a signature
(URL-safe base64). If neither is given, or the signature cannot be decoded,
`MapsError` is raised. Other keyword arguments:

- `requests_per_second`: client-side rate limit; `0` turns it off.
- `channel`: added to every request as the `channel` parameter.
- `base_url`: sends requests to this host instead of the default one.
- `experience_id`: initial list of experience IDs.
- `metric_reporter`: an object with `new_request(path)` returning an object
  with `end_request(error, response, metro_area)`; `NoOpReporter` by default.
- `session`: a `requests.Session` to send requests with.

### Directions

```python
from mapsws.client import Client
from mapsws.directions import DirectionsRequest, directions
from mapsws.model import TravelMode

client = Client(api_key="placeholder")
request = DirectionsRequest(
    origin="Sydney",
    destination="Parramatta",
    mode=TravelMode.DRIVING,
)
routes, waypoints = directions(client, request)
for route in routes:
    print(route.summary)
    for leg in route.legs:
        print(leg.distance.human_readable, leg.duration)
```

Invalid combinations are rejected before any request is made: a missing origin
or destination, an unknown travel mode, both a departure and an arrival time,
or transit options without the transit travel mode all raise `MapsError`.
`DirectionsRequest.params()` returns the query parameters that would be sent.

### Distance Matrix

```python
from mapsws.client import Client
from mapsws.distancematrix import DistanceMatrixRequest, distance_matrix

client = Client(api_key="placeholder")
request = DistanceMatrixRequest(
    origins=["Sydney", "Pyrmont"],
    destinations=["Parramatta"],
)
response = distance_matrix(client, request)
for origin, row in zip(response.origin_addresses, response.rows):
    for element in row.elements:
        print(origin, element.status, element.distance.meters, element.duration)
```

Empty origins or destinations, both a departure and an arrival time, transit
options without the transit travel mode, and the transit mode combined with a
traffic model all raise `MapsError`.

### JSON conversion

The response types have `from_dict` and `to_dict` methods, so decoded results
can be turned back into their JSON form. Durations become `datetime.timedelta`
values and transit times become time-zone-aware `datetime.datetime` values.

### Errors

Every failure reported by the service (any status other than `OK` or
`ZERO_RESULTS`), every response that is not valid JSON and every invalid
request raises `mapsws.client.MapsError`.

### Experience IDs

```python
from mapsws.client import experience_id_context

client.set_experience_id("first-id", "second-id")
print(client.experience_id_header())  # "first-id,second-id"

with experience_id_context("third-id"):
    print(client.experience_id_header())  # "first-id,second-id,third-id"

client.clear_experience_id()
```

IDs set with `experience_id_context` apply to requests made inside the `with`
block and are appended after the client's own IDs.

## What this package does not do

It is a library only: it installs no command-line tools. It covers the
Directions and Distance Matrix services; other Maps Web Service APIs
(elevation, geocoding, places, roads, time zones, static maps) are not
included.