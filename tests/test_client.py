import pytest

from yelp_search import client
from yelp_search.config import ConfigError
from yelp_search.nullable import Nullable
from yelp_search.options import (
    CoordinateOptions,
    GeneralOptions,
    LocaleOptions,
    LocationOptions,
    NoLocationStrategyError,
    SearchOptions,
)


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise client.requests.HTTPError("http error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.response = DummyResponse()

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params, headers, timeout))
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(client, "_SESSION", session)
    return session


@pytest.fixture
def options():
    return SearchOptions(
        general_options=GeneralOptions(term="pizza", limit=Nullable.of(2)),
        coordinate_options=CoordinateOptions(latitude=Nullable.of(37.9), longitude=Nullable.of(-122.5)),
    )


def test_search_success(patch_session, options, monkeypatch):
    monkeypatch.setenv("YELP_API_KEY", "secret")
    patch_session.response = DummyResponse(payload={"businesses": [{"name": "Acme Pizza"}], "total": 1})

    payload = client.search(options)

    assert payload["businesses"][0]["name"] == "Acme Pizza"
    url, params, headers, timeout = patch_session.calls[0]
    assert url == "https://api.yelp.com/v3/businesses/search"
    assert params == {"term": "pizza", "limit": "2", "latitude": "37.9", "longitude": "-122.5"}
    assert headers["Authorization"] == "Bearer secret"
    assert timeout == 10


def test_search_explicit_api_key_wins(patch_session, options, monkeypatch):
    monkeypatch.setenv("YELP_API_KEY", "from-env")
    client.search(options, api_key="explicit")
    _, _, headers, _ = patch_session.calls[0]
    assert headers["Authorization"] == "Bearer explicit"


def test_search_invalid_options_never_calls_api(patch_session, monkeypatch):
    monkeypatch.setenv("YELP_API_KEY", "secret")
    with pytest.raises(NoLocationStrategyError):
        client.search(SearchOptions(general_options=GeneralOptions(term="pizza")))
    assert patch_session.calls == []


def test_search_requires_api_key(patch_session, options):
    with pytest.raises(ConfigError):
        client.search(options)
    assert patch_session.calls == []


def test_search_error_payload(patch_session, options, monkeypatch):
    monkeypatch.setenv("YELP_API_KEY", "secret")
    patch_session.response = DummyResponse(
        payload={"error": {"code": "VALIDATION_ERROR", "description": "bad latitude"}}
    )
    with pytest.raises(client.YelpAPIError, match="bad latitude"):
        client.search(options)


def test_search_http_error(patch_session, options, monkeypatch):
    monkeypatch.setenv("YELP_API_KEY", "secret")
    patch_session.response = DummyResponse(status_code=500)
    with pytest.raises(client.requests.HTTPError):
        client.search(options)


def test_build_search_params(options):
    assert client.build_search_params(options) == client.to_fusion_params(options.get_parameters())


def test_to_fusion_params_renames_filters():
    params = {
        "term": "tacos",
        "limit": "5",
        "offset": "10",
        "sort": "2",
        "category_filter": "mexican",
        "radius_filter": "1609.5",
        "deals_filter": "true",
        "cc": "us",
        "lang": "EN",
        "location": "Austin, TX",
    }
    assert client.to_fusion_params(params) == {
        "term": "tacos",
        "limit": "5",
        "offset": "10",
        "sort_by": "rating",
        "categories": "mexican",
        "radius": "1609",
        "attributes": "deals",
        "locale": "en_US",
        "location": "Austin, TX",
    }


def test_to_fusion_params_drops_false_deals_filter():
    assert client.to_fusion_params({"term": "x", "deals_filter": "false"}) == {"term": "x"}


def test_to_fusion_params_caps_radius():
    assert client.to_fusion_params({"radius_filter": "100000.0"}) == {"radius": "40000"}


def test_to_fusion_params_location_hint():
    translated = client.to_fusion_params({"location": "Mission", "cll": "37.76,-122.42"})
    assert translated == {"location": "Mission", "latitude": "37.76", "longitude": "-122.42"}


def test_to_fusion_params_bounds_become_circle():
    translated = client.to_fusion_params({"bounds": "37.75,-122.5|37.77,-122.48"})
    assert set(translated) == {"latitude", "longitude", "radius"}
    assert float(translated["latitude"]) == pytest.approx(37.76)
    assert float(translated["longitude"]) == pytest.approx(-122.49)
    # half diagonal of a roughly 2.2km x 1.8km box
    assert 1300 < int(translated["radius"]) < 1500


def test_to_fusion_params_drops_unsupported_coordinate_fields(caplog):
    with caplog.at_level("WARNING"):
        translated = client.to_fusion_params({"latitude": "37.9", "longitude": "-122.5", "altitude": "15"})
    assert translated == {"latitude": "37.9", "longitude": "-122.5"}
    assert "does not accept altitude" in " ".join(caplog.messages)


def test_search_sends_translated_params(patch_session, monkeypatch):
    monkeypatch.setenv("YELP_API_KEY", "secret")
    options = SearchOptions(
        general_options=GeneralOptions(term="bars", radius_filter=Nullable.of(500.0)),
        locale_options=LocaleOptions(cc="GB", lang="en"),
        location_options=LocationOptions(location="London"),
    )
    client.search(options)
    _, params, _, _ = patch_session.calls[0]
    assert params == {"term": "bars", "radius": "500", "location": "London", "locale": "en_GB"}
