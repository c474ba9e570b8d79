"""Tests for wikitext cleanup and tip enrichment."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fakes import GUIDE_WIKITEXT, JAIPUR, FakeWeather, FakeWiki
from trip_planner.config import PlannerConfig, WeatherConfig
from trip_planner.domain.models import Constraints, Pace, SourceType, WeatherForecast
from trip_planner.nlp.wikitext import clean_markup, first_sentence, parse_sections
from trip_planner.services.tips import TipsService, guide_tips, weather_claim


def constraints(interests):
    return Constraints(city="Jaipur", num_days=3, pace=Pace.NORMAL, interests=interests, max_daily_hours=6.0)


def test_clean_markup_strips_wiki_syntax():
    raw = "{{see|name=Fort {{nested}}}} '''Bold''' [[Amber Fort|the fort]] <b>x</b> [https://a.b link] &amp; <!-- c -->"
    assert clean_markup(raw) == "Bold the fort x link &"


def test_parse_sections_keeps_level_two_only():
    sections = parse_sections(GUIDE_WIKITEXT + "\n=== Budget ===\nShort.\n== Sleep ==\nToo short.\n")
    assert set(sections) == {"understand", "get around", "eat"}


def test_first_sentence_rules():
    assert first_sentence("ok. Auto-rickshaws are cheap. More.") == "Auto-rickshaws are cheap."
    assert first_sentence("lowercase start only here.") is None
    assert first_sentence("No trailing period") is None


def test_guide_tips_follow_interests():
    tips = guide_tips("Jaipur", GUIDE_WIKITEXT, ["culture", "food"])
    assert [t.citations[0].ref for t in tips] == ["Jaipur#Get around", "Jaipur#Eat", "Jaipur#Understand"]
    assert [t.id for t in tips] == ["tip_wv_1", "tip_wv_2", "tip_wv_3"]
    assert tips[0].claim == "Auto-rickshaws are the easiest way to get around the old city."
    assert all(t.citations[0].source_type is SourceType.WIKIVOYAGE for t in tips)
    assert tips[2].confidence > tips[0].confidence


def test_guide_tips_without_interests_only_get_around():
    tips = guide_tips("Jaipur", GUIDE_WIKITEXT, [])
    assert len(tips) == 1


@pytest.mark.parametrize(
    "temps,precip,expected_start,rain_phrase",
    [
        ((10.0, 12.0), (30.0, 30.0), "Expect cold weather with temperatures around 11°C", "Some rain possible (30%)"),
        ((20.0, 22.0), (0.0, 10.0), "Moderate temperatures around 21°C", None),
        ((30.0, 32.0), (60.0, 70.0), "Hot weather with temperatures reaching 31°C", "High chance of rain (65%)"),
    ],
)
def test_weather_claim(temps, precip, expected_start, rain_phrase):
    claim = weather_claim(WeatherForecast(max_temperatures=temps, precipitation_probabilities=precip))
    assert claim.startswith(expected_start)
    if rain_phrase:
        assert rain_phrase in claim
    else:
        assert "rain" not in claim


def test_weather_claim_without_data():
    assert weather_claim(WeatherForecast(max_temperatures=(), precipitation_probabilities=())) is None


def test_collect_combines_sources():
    forecast = WeatherForecast(max_temperatures=(30.0, 32.0), precipitation_probabilities=(60.0, 70.0))
    wiki = FakeWiki(GUIDE_WIKITEXT)
    service = TipsService(wiki, FakeWeather(forecast), PlannerConfig(), WeatherConfig())
    tips = service.collect(constraints(["food"]), JAIPUR)
    assert wiki.pages == ["Jaipur"]
    assert [t.id for t in tips] == ["tip_wv_1", "tip_wv_2", "tip_weather_1"]
    assert tips[-1].citations[0].source_type is SourceType.WEATHER


def test_collect_falls_back_to_general_advice():
    service = TipsService(FakeWiki(None), FakeWeather(None), PlannerConfig(), WeatherConfig())
    tips = service.collect(constraints(["culture"]), JAIPUR)
    assert len(tips) == 1
    assert tips[0].is_general_advice
    assert tips[0].citations == ()


@pytest.mark.parametrize("num_days,ceiling,expected", [(5, 16, 5), (2, 16, 2), (5, 3, 3)])
def test_forecast_horizon_follows_trip_length(num_days, ceiling, expected):
    weather = FakeWeather(None)
    service = TipsService(FakeWiki(None), weather, PlannerConfig(), WeatherConfig(max_forecast_days=ceiling))
    trip = Constraints(city="Jaipur", num_days=num_days, pace=Pace.NORMAL, interests=["food"], max_daily_hours=6.0)
    service.collect(trip, JAIPUR)
    assert weather.days == [expected]
