import json
import uuid

import pytest
import responses

from mapsws.client import (
    EXPERIENCE_ID_HEADER_NAME,
    ApiConfig,
    Client,
    MapsError,
    NoOpReporter,
    check_status,
    experience_id_context,
    experience_ids_from_context,
)

BASE = "http://maps.example.com"
CONFIG = ApiConfig(host="https://unused.example.com", path="/maps/api/test/json")


@pytest.fixture
def mock_http():
    with responses.RequestsMock() as rsps:
        yield rsps


def make_client(**kwargs):
    kwargs.setdefault("api_key", "placeholder")
    return Client(**kwargs)


def test_client_channel_is_configured():
    client = make_client(channel="Test-Channel")
    query = client.auth_query("/p", {}, True, False)
    assert query == "channel=Test-Channel&key=placeholder"


def test_missing_credentials():
    with pytest.raises(MapsError, match="credentials missing"):
        Client()


def test_client_id_without_signature_rejected():
    with pytest.raises(MapsError):
        Client(client_id="my-client")


def test_invalid_signature_rejected():
    with pytest.raises(MapsError):
        Client(client_id="my-client", signature="token")


def test_client_with_experience_id():
    ids = ["foo", "bar"]
    client = make_client(experience_id=ids)
    assert client.experience_id == ids


def test_client_set_experience_id():
    client = make_client()
    client.set_experience_id("foo", "bar")
    assert client.experience_id == ["foo", "bar"]


def test_client_clear_experience_id():
    client = make_client(experience_id=["foo", "bar"])
    client.clear_experience_id()
    assert client.experience_id is None


def test_experience_id_header_cases():
    ids = ["foo", "bar"]
    client = make_client()

    client.experience_id = ids
    assert client.experience_id_header() == "foo,bar"

    client.experience_id = None
    assert client.experience_id_header() is None

    client.experience_id = []
    assert client.experience_id_header() is None

    with experience_id_context("foo"):
        assert client.experience_id_header() == "foo"

    with experience_id_context(*ids):
        assert client.experience_id_header() == "foo,bar"

    client.experience_id = ids
    with experience_id_context(*ids):
        assert client.experience_id_header() == "foo,bar,foo,bar"


def test_experience_id_sample():
    experience_id = str(uuid.uuid4())
    client = make_client(experience_id=["foo"])
    client.clear_experience_id()
    other_experience_id = str(uuid.uuid4())
    client.set_experience_id(experience_id, other_experience_id)
    assert client.experience_id == [experience_id, other_experience_id]


def test_context_ids_reset_after_block():
    assert experience_ids_from_context() is None
    with experience_id_context("a", "b") as ids:
        assert ids == ["a", "b"]
        assert experience_ids_from_context() == ["a", "b"]
    assert experience_ids_from_context() is None


def test_auth_query_sorted_and_escaped():
    client = make_client()
    query = client.auth_query("/p", {"origins": "Sydney|Pyrmont", "mode": "transit"}, True, False)
    assert query == "key=placeholder&mode=transit&origins=Sydney%7CPyrmont"


def test_auth_query_without_key_and_client_id_not_accepted():
    client = Client(client_id="my-client", signature="password")
    with pytest.raises(MapsError, match="API Key missing"):
        client.auth_query("/p", {}, False, False)


def test_auth_query_client_id_is_signed():
    client = Client(client_id="my-client", signature="password")
    query = client.auth_query("/p", {"a": "1"}, True, False)
    assert query.startswith("a=1&client=my-client&signature=")
    assert query == client.auth_query("/p", {"a": "1"}, True, False)
    assert query != client.auth_query("/other", {"a": "1"}, True, False)


def test_auth_query_key_signature_only_when_accepted():
    client = Client(api_key="placeholder", signature="password")
    assert "signature=" in client.auth_query("/p", {}, True, True)
    assert client.auth_query("/p", {}, True, False) == "key=placeholder"


def test_get_json_sends_query_and_headers(mock_http):
    mock_http.add(responses.GET, BASE + CONFIG.path, json={"status": "OK", "x": 1})
    client = make_client(base_url=BASE, experience_id=["foo"])
    payload = client.get_json(CONFIG, {"q": "a b"})
    assert payload == {"status": "OK", "x": 1}
    request = mock_http.calls[0].request
    assert request.url == BASE + CONFIG.path + "?key=placeholder&q=a+b"
    assert request.headers[EXPERIENCE_ID_HEADER_NAME] == "foo"


def test_get_json_ignores_trailing_data(mock_http):
    mock_http.add(responses.GET, BASE + CONFIG.path, body='{"status":"OK"}"')
    client = make_client(base_url=BASE)
    assert client.get_json(CONFIG, {}) == {"status": "OK"}


def test_get_json_invalid_body(mock_http):
    mock_http.add(responses.GET, BASE + CONFIG.path, body="not json")
    client = make_client(base_url=BASE)
    with pytest.raises(MapsError):
        client.get_json(CONFIG, {})


def test_post_json(mock_http):
    mock_http.add(responses.POST, BASE + CONFIG.path, json={"status": "OK"})
    client = make_client(base_url=BASE)
    assert client.post_json(CONFIG, {"path": [1, 2]}) == {"status": "OK"}
    request = mock_http.calls[0].request
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.body) == {"path": [1, 2]}
    assert request.url.endswith("?key=placeholder")


def test_get_binary(mock_http):
    mock_http.add(
        responses.GET, BASE + CONFIG.path, body=b"\x89PNG", content_type="image/png", status=200
    )
    client = make_client(base_url=BASE)
    result = client.get_binary(CONFIG, {})
    assert result.status_code == 200
    assert result.content_type == "image/png"
    assert result.data == b"\x89PNG"


def test_metric_reporter_receives_metro_area(mock_http):
    records = []

    class Metrics:
        def __init__(self, path):
            self.path = path

        def end_request(self, error, response, metro_area):
            records.append((self.path, error, metro_area))

    class Reporter:
        def new_request(self, path):
            return Metrics(path)

    mock_http.add(
        responses.GET,
        BASE + CONFIG.path,
        json={"status": "OK"},
        headers={"x-goog-maps-metro-area": "Sydney"},
    )
    client = make_client(base_url=BASE, metric_reporter=Reporter())
    client.get_json(CONFIG, {})
    assert records == [(CONFIG.path, None, "Sydney")]


def test_no_op_reporter():
    assert NoOpReporter().new_request("/x").end_request(None, None, "") is None


@pytest.mark.parametrize("status", ["OK", "ZERO_RESULTS"])
def test_check_status_ok(status):
    payload = {"status": status}
    assert check_status(payload) is payload


def test_check_status_error():
    with pytest.raises(MapsError) as info:
        check_status({"status": "REQUEST_DENIED", "error_message": "bad key"})
    assert str(info.value) == "maps: REQUEST_DENIED - bad key"


def test_rate_limit_disabled_still_requests(mock_http):
    mock_http.add(responses.GET, BASE + CONFIG.path, json={"status": "OK"})
    mock_http.add(responses.GET, BASE + CONFIG.path, json={"status": "OK"})
    client = make_client(base_url=BASE, requests_per_second=0)
    results = [client.get_json(CONFIG, {}) for _ in range(2)]
    assert results == [{"status": "OK"}, {"status": "OK"}]