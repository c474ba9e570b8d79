"""POI search: normalization, ranking and static fallback.

Raw provider elements become POI candidates with a tag-derived type and
duration and a deterministic confidence score. Output is deduplicated
and sorted by descending confidence, then ascending id, so identical
inputs always give identical candidate lists.

Whenever the provider fails or yields nothing usable, a curated seed
set is returned instead, flagged with a reason code.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..config import POIConfig, get_config
from ..domain.errors import ProviderError
from ..domain.models import (
    OSM_SOURCE,
    POI,
    SEED_SOURCE,
    BoundingBox,
    GeoLocation,
    Pace,
    POISearchResult,
)
from ..ports.providers import POIProviderPort

CULTURE_TYPES = frozenset({"attraction", "museum", "viewpoint", "historic", "place_of_worship"})
FOOD_TYPES = frozenset({"restaurant", "cafe", "fast_food"})

DURATION_HOURS: Dict[str, float] = {
    "museum": 1.5,
    "viewpoint": 0.75,
    "attraction": 1.5,
    "restaurant": 1.5,
    "cafe": 1.0,
    "fast_food": 0.75,
    "place_of_worship": 1.0,
    "historic": 1.5,
}
DEFAULT_DURATION_HOURS = 1.0

# Fallback reason codes
PROVIDER_ERROR = "PROVIDER_ERROR"
NO_ELEMENTS = "NO_ELEMENTS"
NO_USABLE_ELEMENTS = "NO_USABLE_ELEMENTS"
SANITY_CHECK_FAILED = "SANITY_CHECK_FAILED"

_AMENITY_TYPES = ("restaurant", "cafe", "fast_food", "place_of_worship")


def derive_type(tags: Mapping[str, str]) -> str:
    """Derive a POI type from tags (tourism > amenity > historic)."""
    tourism = tags.get("tourism")
    if tourism:
        if tourism in ("museum", "viewpoint"):
            return tourism
        return "attraction"
    amenity = tags.get("amenity")
    if amenity in _AMENITY_TYPES:
        return amenity
    if tags.get("historic"):
        return "historic"
    return "poi"


def estimate_duration(poi_type: str) -> float:
    """Typical visit duration in hours for a POI type."""
    return DURATION_HOURS.get(poi_type, DEFAULT_DURATION_HOURS)


def poi_category(poi: POI) -> str:
    """Classify a POI as 'culture', 'food' or 'other'.

    The POI's own type is used when it is a known type; otherwise the
    type is re-derived from its tags.
    """
    poi_type = poi.type if poi.type in CULTURE_TYPES | FOOD_TYPES else derive_type(poi.tags)
    if poi_type in CULTURE_TYPES:
        return "culture"
    if poi_type in FOOD_TYPES:
        return "food"
    return "other"


def rank_key(poi: POI) -> Tuple[float, str]:
    """Sort key: descending confidence, then ascending id."""
    return (-poi.confidence, poi.id)


def score_confidence(tags: Mapping[str, str], poi_type: str, interests: Sequence[str]) -> float:
    """Deterministic relevance score in [0, 1]."""
    score = 0.5
    if tags.get("wikidata") or tags.get("wikipedia"):
        score += 0.2
    if tags.get("name:en"):
        score += 0.1
    category = "culture" if poi_type in CULTURE_TYPES else "food" if poi_type in FOOD_TYPES else None
    if category is not None and category in interests:
        score += 0.15
    return round(min(score, 1.0), 2)


def _element_location(element: Mapping[str, Any]) -> Optional[GeoLocation]:
    lat = element.get("lat")
    lon = element.get("lon")
    if lat is None or lon is None:
        center = element.get("center") or {}
        lat, lon = center.get("lat"), center.get("lon")
    if lat is None or lon is None:
        return None
    try:
        return GeoLocation(latitude=float(lat), longitude=float(lon))
    except (TypeError, ValueError):
        return None


def normalize_element(element: Mapping[str, Any], interests: Sequence[str]) -> Optional[POI]:
    """Turn a raw provider element into a POI.

    Args:
        element: Raw element with 'type', 'id', 'tags' and coordinates.
        interests: Interest categories used for scoring.

    Returns:
        The POI, or None for unnamed entries, unnamed fast-food stalls
        and elements without an identity.
    """
    tags: Mapping[str, str] = element.get("tags") or {}
    name = (tags.get("name:en") or tags.get("name") or "").strip()
    if not name:
        return None

    poi_type = derive_type(tags)
    if poi_type == "fast_food" and not (tags.get("name") or "").strip():
        return None

    element_type = element.get("type")
    element_id = element.get("id")
    if not element_type or element_id is None:
        return None

    return POI(
        id=f"osm:{element_type}:{element_id}",
        name=name,
        type=poi_type,
        location=_element_location(element),
        tags=dict(tags),
        typical_duration_hours=estimate_duration(poi_type),
        confidence=score_confidence(tags, poi_type, interests),
        source=OSM_SOURCE,
    )


def rank_and_dedupe(pois: Iterable[POI]) -> List[POI]:
    """Sort by rank and drop repeated ids and repeated names."""
    seen_ids = set()
    seen_names = set()
    ranked: List[POI] = []
    for poi in sorted(pois, key=rank_key):
        name_key = " ".join(poi.name.lower().split())
        if poi.id in seen_ids or name_key in seen_names:
            continue
        seen_ids.add(poi.id)
        seen_names.add(name_key)
        ranked.append(poi)
    return ranked


@lru_cache(maxsize=4)
def load_seed_pois(path: Path) -> Tuple[POI, ...]:
    """Load the curated fallback POI set from CSV.

    Args:
        path: CSV with id, name, type, latitude, longitude,
            typical_duration_hours, confidence and 'k=v;k=v' tags.

    Returns:
        Seed POIs in file order.
    """
    pois: List[POI] = []
    with path.open(encoding="utf-8", newline="") as handle:
        for row in csv.DictReader(handle):
            tags = dict(
                pair.split("=", 1) for pair in (row.get("tags") or "").split(";") if "=" in pair
            )
            pois.append(
                POI(
                    id=row["id"],
                    name=row["name"],
                    type=row["type"],
                    location=GeoLocation(
                        latitude=float(row["latitude"]),
                        longitude=float(row["longitude"]),
                    ),
                    tags=tags,
                    typical_duration_hours=float(row["typical_duration_hours"]),
                    confidence=float(row["confidence"]),
                    source=SEED_SOURCE,
                )
            )
    return tuple(pois)


@dataclass
class POISearchService:
    """Ranked POI candidates for a city, with static fallback.

    Attributes:
        provider: Raw POI provider
        config: POI configuration (default region, seed file)
    """

    provider: POIProviderPort
    config: POIConfig = field(default_factory=lambda: get_config().poi)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _default_bbox(self) -> BoundingBox:
        south, north, west, east = self.config.default_bbox
        return BoundingBox(south=south, north=north, west=west, east=east)

    def _fallback(self, city: str, max_candidates: int, reason: str) -> POISearchResult:
        self._logger.warning(
            "POI search using static fallback",
            extra={"city": city, "reason": reason},
        )
        seeds = rank_and_dedupe(load_seed_pois(self.config.seed_file))
        return POISearchResult(
            city=city,
            pois=tuple(seeds[:max_candidates]),
            fallback_used=True,
            fallback_reason=reason,
        )

    def search(
        self,
        city: str,
        interests: Sequence[str],
        pace: Pace,
        max_candidates: int,
        bbox: Optional[BoundingBox] = None,
    ) -> POISearchResult:
        """Search, normalize and rank POIs.

        Args:
            city: City name (used for logging and the result).
            interests: Interest categories used in scoring.
            pace: Trip pace (recorded; ranking does not depend on it).
            max_candidates: Maximum number of candidates returned.
            bbox: Region to search; the configured default when None.

        Returns:
            POISearchResult, never raises for provider failures.
        """
        region = bbox or self._default_bbox()

        try:
            elements = self.provider.fetch_elements(region)
        except ProviderError as e:
            self._logger.warning(
                "POI provider failed",
                extra={"city": city, "reason": e.reason, "error": str(e)},
            )
            return self._fallback(city, max_candidates, PROVIDER_ERROR)

        if not elements:
            return self._fallback(city, max_candidates, NO_ELEMENTS)

        normalized = [
            poi
            for poi in (normalize_element(element, interests) for element in elements)
            if poi is not None
        ]
        if not normalized:
            return self._fallback(city, max_candidates, NO_USABLE_ELEMENTS)

        if all(not poi.is_provider_sourced for poi in normalized):
            return self._fallback(city, max_candidates, SANITY_CHECK_FAILED)

        ranked = rank_and_dedupe(normalized)[:max_candidates]
        self._logger.info(
            "POI search complete",
            extra={
                "city": city,
                "elements": len(elements),
                "candidates": len(ranked),
                "pace": pace.value,
            },
        )
        return POISearchResult(city=city, pois=tuple(ranked))
