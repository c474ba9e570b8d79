"""Tests for POI normalization, ranking and static fallback."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fakes import JAIPUR, FakePOIProvider
from trip_planner.config import POIConfig
from trip_planner.domain.errors import ProviderError
from trip_planner.domain.models import Pace
from trip_planner.services.poi_search import (
    NO_ELEMENTS,
    NO_USABLE_ELEMENTS,
    PROVIDER_ERROR,
    POISearchService,
    derive_type,
    load_seed_pois,
    normalize_element,
    rank_and_dedupe,
    score_confidence,
)

ELEMENTS = [
    {
        "type": "node",
        "id": 101,
        "lat": 26.9239,
        "lon": 75.8267,
        "tags": {"name": "Hawa Mahal", "tourism": "attraction", "wikidata": "Q1", "name:en": "Hawa Mahal"},
    },
    {
        "type": "way",
        "id": 202,
        "center": {"lat": 26.91, "lon": 75.81},
        "tags": {"name": "Albert Hall Museum", "tourism": "museum"},
    },
    {
        "type": "node",
        "id": 303,
        "lat": 26.92,
        "lon": 75.80,
        "tags": {"name": "LMB", "amenity": "restaurant"},
    },
    {"type": "node", "id": 404, "lat": 26.9, "lon": 75.8, "tags": {"amenity": "cafe"}},
    {
        "type": "node",
        "id": 505,
        "lat": 26.9239,
        "lon": 75.8267,
        "tags": {"name": "hawa  mahal", "tourism": "viewpoint"},
    },
]


@pytest.mark.parametrize(
    "tags,expected",
    [
        ({"tourism": "museum"}, "museum"),
        ({"tourism": "viewpoint"}, "viewpoint"),
        ({"tourism": "gallery"}, "attraction"),
        ({"amenity": "cafe"}, "cafe"),
        ({"amenity": "place_of_worship"}, "place_of_worship"),
        ({"historic": "fort"}, "historic"),
        ({"shop": "books"}, "poi"),
    ],
)
def test_derive_type(tags, expected):
    assert derive_type(tags) == expected


def test_score_confidence_is_deterministic():
    tags = {"wikidata": "Q1", "name:en": "X"}
    assert score_confidence(tags, "museum", ["culture"]) == 0.95
    assert score_confidence({}, "restaurant", ["culture"]) == 0.5
    assert score_confidence({}, "restaurant", ["food"]) == 0.65


def test_normalize_element_drops_unnamed():
    assert normalize_element(ELEMENTS[3], ["food"]) is None


def test_normalize_element_uses_center_coordinates():
    poi = normalize_element(ELEMENTS[1], ["culture"])
    assert poi.id == "osm:way:202"
    assert poi.type == "museum"
    assert poi.typical_duration_hours == 1.5
    assert poi.location.latitude == pytest.approx(26.91)
    assert poi.is_provider_sourced


def test_rank_and_dedupe_orders_and_drops_duplicate_names():
    pois = [normalize_element(e, ["culture", "food"]) for e in ELEMENTS]
    ranked = rank_and_dedupe(p for p in pois if p is not None)
    names = [p.name for p in ranked]
    assert names[0] == "Hawa Mahal"
    assert names.count("Hawa Mahal") == 1
    assert "hawa  mahal" not in names
    confidences = [p.confidence for p in ranked]
    assert confidences == sorted(confidences, reverse=True)


def test_search_ranks_provider_results():
    provider = FakePOIProvider(elements=ELEMENTS)
    service = POISearchService(provider, POIConfig())
    result = service.search("Jaipur", ["culture", "food"], Pace.NORMAL, 10, JAIPUR.bounding_box)
    assert not result.fallback_used
    assert provider.bboxes == [JAIPUR.bounding_box]
    assert [p.id for p in result.pois] == ["osm:node:101", "osm:node:303", "osm:way:202"]


def test_search_respects_max_candidates():
    service = POISearchService(FakePOIProvider(elements=ELEMENTS), POIConfig())
    result = service.search("Jaipur", ["culture"], Pace.NORMAL, 1)
    assert len(result.pois) == 1


def test_search_uses_default_region_without_bbox():
    provider = FakePOIProvider(elements=ELEMENTS)
    config = POIConfig()
    POISearchService(provider, config).search("Jaipur", ["culture"], Pace.NORMAL, 10)
    south, north, west, east = config.default_bbox
    bbox = provider.bboxes[0]
    assert (bbox.south, bbox.north, bbox.west, bbox.east) == (south, north, west, east)


@pytest.mark.parametrize(
    "provider,reason",
    [
        (FakePOIProvider(error=ProviderError("boom", provider="overpass", reason="timeout")), PROVIDER_ERROR),
        (FakePOIProvider(elements=[]), NO_ELEMENTS),
        (FakePOIProvider(elements=[ELEMENTS[3]]), NO_USABLE_ELEMENTS),
    ],
)
def test_search_falls_back_to_seeds(provider, reason):
    result = POISearchService(provider, POIConfig()).search("Jaipur", ["culture"], Pace.RELAXED, 10)
    assert result.fallback_used
    assert result.fallback_reason == reason
    assert len(result.pois) == 10
    assert all(p.id.startswith("seed:") for p in result.pois)
    assert result.pois[0].name == "Amber Fort"


def test_seed_file_loads():
    seeds = load_seed_pois(POIConfig().seed_file)
    assert len(seeds) == 10
    assert {p.source for p in seeds} == {"Seed"}
    assert len({p.id for p in seeds}) == 10
