"""Tests for the HTTP provider adapters with a mocked requests session."""

import os
import sys
from unittest.mock import MagicMock

import pytest
import requests

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from trip_planner.adapters.poi.overpass_adapter import OverpassPOIProvider, build_overpass_query
from trip_planner.adapters.routing.osrm_adapter import OSRMRoutingAdapter
from trip_planner.adapters.weather.open_meteo_adapter import OpenMeteoWeatherAdapter
from trip_planner.adapters.wiki.wikivoyage_adapter import WikivoyageAdapter
from trip_planner.config import POIConfig, RoutingConfig
from trip_planner.domain.errors import ProviderError
from trip_planner.domain.models import BoundingBox, GeoLocation

BBOX = BoundingBox(south=26.8, north=27.05, west=75.72, east=76.0)
HAWA = GeoLocation(latitude=26.9239, longitude=75.8267)
AMBER = GeoLocation(latitude=26.9855, longitude=75.8513)


def mock_session(payload=None, method="get", error=None, json_error=None):
    """Build a requests session whose single call returns payload."""
    session = MagicMock()
    response = MagicMock()
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    call = getattr(session, method)
    if error is not None:
        call.side_effect = error
    else:
        call.return_value = response
    return session


class TestOverpassPOIProvider:
    """Test suite for OverpassPOIProvider."""

    def test_query_covers_tourism_and_food(self):
        query = build_overpass_query(BBOX, timeout_seconds=8, max_results=50)
        assert query.startswith("[out:json][timeout:8];")
        assert '"tourism"~"^(attraction|museum|viewpoint)$"' in query
        assert '"amenity"="place_of_worship"' in query
        assert "(26.8,75.72,27.05,76.0)" in query
        assert query.rstrip().endswith("out tags center 50;")

    def test_fetch_returns_dict_elements(self):
        session = mock_session({"elements": [{"id": 1}, "junk", {"id": 2}]}, method="post")
        provider = OverpassPOIProvider(config=POIConfig(), session=session)
        assert provider.fetch_elements(BBOX) == [{"id": 1}, {"id": 2}]
        _, kwargs = session.post.call_args
        assert "data" in kwargs["data"]

    @pytest.mark.parametrize(
        "kwargs,reason",
        [
            ({"error": requests.Timeout("slow")}, "timeout"),
            ({"error": requests.ConnectionError("down")}, "http"),
            ({"json_error": ValueError("not json")}, "payload"),
            ({"payload": {"remark": "runtime error"}}, "payload"),
        ],
    )
    def test_failures_raise_provider_error(self, kwargs, reason):
        provider = OverpassPOIProvider(config=POIConfig(), session=mock_session(method="post", **kwargs))
        with pytest.raises(ProviderError) as exc_info:
            provider.fetch_elements(BBOX)
        assert exc_info.value.reason == reason
        assert exc_info.value.provider == "overpass"


class TestOSRMRoutingAdapter:
    """Test suite for OSRMRoutingAdapter."""

    def test_route_converts_units(self):
        session = mock_session({"routes": [{"duration": 720.0, "distance": 4321.0}]})
        estimate = OSRMRoutingAdapter(config=RoutingConfig(), session=session).route(HAWA, AMBER)
        assert estimate.duration_minutes == 12
        assert estimate.distance_km == 4.32
        url = session.get.call_args[0][0]
        assert url.endswith("/route/v1/car/75.8267,26.9239;75.8513,26.9855")

    def test_no_route_returns_none(self):
        session = mock_session({"code": "NoRoute", "routes": []})
        assert OSRMRoutingAdapter(config=RoutingConfig(), session=session).route(HAWA, AMBER) is None

    def test_http_failure_returns_none(self):
        session = mock_session(error=requests.ConnectionError("down"))
        assert OSRMRoutingAdapter(config=RoutingConfig(), session=session).route(HAWA, AMBER) is None

    def test_disabled_routing_skips_request(self):
        session = mock_session()
        adapter = OSRMRoutingAdapter(config=RoutingConfig(enabled=False), session=session)
        assert adapter.route(HAWA, AMBER) is None
        session.get.assert_not_called()


class TestOpenMeteoWeatherAdapter:
    """Test suite for OpenMeteoWeatherAdapter."""

    def test_forecast_parses_daily_series(self):
        session = mock_session(
            {"daily": {"temperature_2m_max": [31.0, None, 33.0], "precipitation_probability_max": [10, 20, None]}}
        )
        forecast = OpenMeteoWeatherAdapter(session=session).forecast(HAWA, 3)
        assert forecast.max_temperatures == (31.0, 33.0)
        assert forecast.precipitation_probabilities == (10.0, 20.0)
        params = session.get.call_args[1]["params"]
        assert params["forecast_days"] == 3

    def test_forecast_days_are_clamped(self):
        session = mock_session({"daily": {"temperature_2m_max": [20.0]}})
        OpenMeteoWeatherAdapter(session=session).forecast(HAWA, 40)
        assert session.get.call_args[1]["params"]["forecast_days"] == 16

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"error": requests.Timeout("slow")},
            {"payload": {"reason": "bad request"}},
            {"payload": {"daily": {}}},
        ],
    )
    def test_failures_return_none(self, kwargs):
        assert OpenMeteoWeatherAdapter(session=mock_session(**kwargs)).forecast(HAWA, 3) is None


class TestWikivoyageAdapter:
    """Test suite for WikivoyageAdapter."""

    def test_fetch_wikitext(self):
        session = mock_session({"parse": {"title": "Jaipur", "wikitext": "== Eat ==\nThali."}})
        assert WikivoyageAdapter(session=session).fetch_wikitext("Jaipur") == "== Eat ==\nThali."
        assert session.get.call_args[1]["params"]["page"] == "Jaipur"
        assert "User-Agent" in session.get.call_args[1]["headers"]

    def test_legacy_format_nesting(self):
        session = mock_session({"parse": {"wikitext": {"*": "text"}}})
        assert WikivoyageAdapter(session=session).fetch_wikitext("Jaipur") == "text"

    def test_missing_page_returns_none(self):
        session = mock_session({"error": {"code": "missingtitle"}})
        assert WikivoyageAdapter(session=session).fetch_wikitext("Nowhere") is None

    def test_http_failure_returns_none(self):
        session = mock_session(error=requests.ConnectionError("down"))
        assert WikivoyageAdapter(session=session).fetch_wikitext("Jaipur") is None


@pytest.mark.skipif(
    os.environ.get("SKIP_NETWORK_TESTS", "1") == "1",
    reason="Network tests disabled (set SKIP_NETWORK_TESTS=0 to run)",
)
def test_live_wikivoyage_page():
    assert "Jaipur" in (WikivoyageAdapter().fetch_wikitext("Jaipur") or "")
