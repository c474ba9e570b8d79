"""Tests for the dependency injection container and the launcher."""

import os
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fakes import FakeGeocoder
from start import handle, run_line
from trip_planner.adapters.cache import FifoEviction, InMemoryCache, NeverEvict, NullCache
from trip_planner.adapters.llm import DisabledLanguageModel, OpenAICompatibleModel
from trip_planner.config import AppConfig, GeocodingConfig, LLMConfig, RoutingConfig
from trip_planner.container import Container, get_container, reset_container
from trip_planner.ports import CachePort, GeocoderPort, LanguageModelPort, RoutingPort
from trip_planner.services import PlannerService


@pytest.fixture(autouse=True)
def fresh_container():
    reset_container()
    yield
    reset_container()


class TestContainer:
    def test_register_and_resolve_singleton(self):
        container = Container(config=AppConfig())
        container.register(GeocoderPort, FakeGeocoder)
        assert container.resolve(GeocoderPort) is container.resolve(GeocoderPort)

    def test_non_singleton_factory(self):
        container = Container(config=AppConfig())
        container.register(GeocoderPort, FakeGeocoder, singleton=False)
        assert container.resolve(GeocoderPort) is not container.resolve(GeocoderPort)

    def test_unregistered_type_raises(self):
        with pytest.raises(KeyError):
            Container(config=AppConfig()).resolve(GeocoderPort)

    def test_reregister_drops_cached_instance(self):
        container = Container(config=AppConfig())
        container.register(GeocoderPort, FakeGeocoder)
        first = container.resolve(GeocoderPort)
        container.register(GeocoderPort, FakeGeocoder)
        assert container.resolve(GeocoderPort) is not first

    def test_clear_all(self):
        container = Container(config=AppConfig())
        container.register(GeocoderPort, FakeGeocoder)
        container.clear_all()
        assert not container.is_registered(GeocoderPort)


class TestDefaultBindings:
    def test_disabled_model_without_api_key(self):
        container = Container.create_default(AppConfig(llm=LLMConfig(api_key=None)))
        assert isinstance(container.resolve(LanguageModelPort), DisabledLanguageModel)

    def test_openai_model_with_api_key(self):
        container = Container.create_default(AppConfig(llm=LLMConfig(api_key="key")))
        assert isinstance(container.resolve(LanguageModelPort), OpenAICompatibleModel)

    def test_routing_can_be_disabled(self):
        container = Container.create_default(AppConfig(routing=RoutingConfig(enabled=False)))
        assert container.resolve(RoutingPort) is None

    def test_geocode_cache_policy(self):
        default = Container.create_default(AppConfig()).resolve(CachePort)
        bounded = Container.create_default(
            AppConfig(geocoding=GeocodingConfig(cache_max_size=64))
        ).resolve(CachePort)
        assert isinstance(default, InMemoryCache)
        assert isinstance(default.eviction, NeverEvict)
        assert bounded.eviction == FifoEviction(64)

    def test_geocode_cache_can_be_disabled(self):
        container = Container.create_default(AppConfig(geocoding=GeocodingConfig(cache_enabled=False)))
        cache = container.resolve(CachePort)
        assert isinstance(cache, NullCache)
        assert container.resolve(GeocoderPort).cache is cache

    def test_planner_shares_geocode_cache(self):
        container = Container.create_default(AppConfig())
        planner = container.resolve(PlannerService)
        assert planner.resolver.geocoder.cache is container.resolve(CachePort)

    def test_get_container_is_cached(self):
        assert get_container() is get_container()


class TestLauncher:
    def test_plan_then_edit(self, make_planner, capsys):
        planner = make_planner()
        session_id = handle(planner, None, "Plan a relaxed 3 day trip to Jaipur")
        assert planner.sessions.get(session_id).itinerary is not None

        assert handle(planner, session_id, "make day 2 more relaxed") == session_id
        output = capsys.readouterr().out
        assert "MAKE_MORE_RELAXED: changed days [2]" in output

    def test_export_without_session(self, make_planner, capsys):
        assert handle(make_planner(), None, "export") is None
        assert "Nothing to export yet." in capsys.readouterr().out

    def test_input_error_is_reported(self, make_planner, capsys):
        planner = make_planner()
        assert run_line(planner, None, "Plan a trip to Atlantis for 2 days") is None
        assert "CITY_NOT_FOUND" in capsys.readouterr().out

    @pytest.mark.parametrize("include_trace", [True, False])
    def test_unexpected_error_is_internal(self, make_planner, capsys, include_trace):
        planner = make_planner()
        planner.classifier = MagicMock()
        planner.classifier.classify.side_effect = RuntimeError("classifier exploded")

        assert run_line(planner, "session_x", "hello", include_trace=include_trace) == "session_x"
        output = capsys.readouterr().out
        assert "INTERNAL_ERROR: Internal error" in output
        assert ("classifier exploded" in output) is include_trace
