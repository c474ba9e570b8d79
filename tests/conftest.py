"""Shared fixtures: a wired planner over fake ports."""

import os
import sys
from typing import Optional

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from fakes import FakeGeocoder, FakeLanguageModel, FakePOIProvider, FakeRouting, FakeWeather, FakeWiki
from trip_planner.adapters.sessions import InMemorySessionStore
from trip_planner.config import PlannerConfig, WeatherConfig, reset_config
from trip_planner.nlp.llm_json import StructuredLLM
from trip_planner.services import (
    ConstraintExtractor,
    ConstraintResolver,
    EditApplier,
    EditInterpreter,
    ExplanationGenerator,
    IntentClassifier,
    ItineraryBuilder,
    PlannerService,
    POISearchService,
    TipsService,
)


@pytest.fixture(autouse=True)
def fresh_config():
    """Make sure every test sees configuration built from its own env."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def planner_config() -> PlannerConfig:
    return PlannerConfig()


@pytest.fixture
def fake_llm() -> FakeLanguageModel:
    return FakeLanguageModel()


@pytest.fixture
def structured_llm(fake_llm) -> StructuredLLM:
    return StructuredLLM(fake_llm)


@pytest.fixture
def make_planner(planner_config):
    """Build a PlannerService over fakes; keyword arguments override ports."""

    def _make(
        llm: Optional[FakeLanguageModel] = None,
        geocoder: Optional[FakeGeocoder] = None,
        provider: Optional[FakePOIProvider] = None,
        routing: Optional[FakeRouting] = None,
        weather: Optional[FakeWeather] = None,
        wiki: Optional[FakeWiki] = None,
    ) -> PlannerService:
        structured = StructuredLLM(llm or FakeLanguageModel())
        return PlannerService(
            sessions=InMemorySessionStore(),
            classifier=IntentClassifier(structured, planner_config),
            extractor=ConstraintExtractor(structured),
            resolver=ConstraintResolver(geocoder or FakeGeocoder(), planner_config),
            poi_search=POISearchService(provider or FakePOIProvider()),
            builder=ItineraryBuilder(routing, planner_config),
            interpreter=EditInterpreter(structured),
            applier=EditApplier(planner_config),
            explainer=ExplanationGenerator(structured),
            tips=TipsService(wiki or FakeWiki(), weather or FakeWeather(), planner_config, WeatherConfig()),
            config=planner_config,
        )

    return _make
