"""Nominatim geocoder adapter.

Validates city names against OpenStreetMap's Nominatim service with:
- Process-scoped caching via CachePort, keyed by normalized city name
- Configuration injection (country restriction, timeouts)
- Rate limiting
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from geopy.exc import GeocoderServiceError, GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeocodingConfig, get_config
from ...domain.models import BoundingBox, City, GeoLocation
from ...ports.cache import CachePort
from ..cache.memory_cache import InMemoryCache


def normalize_city_key(query: str) -> str:
    """Normalize a city name for cache lookups."""
    return " ".join(query.lower().split())


def _parse_bounding_box(raw: Any) -> Optional[BoundingBox]:
    """Parse Nominatim's [south, north, west, east] string list."""
    if not raw or len(raw) != 4:
        return None
    try:
        south, north, west, east = (float(v) for v in raw)
        return BoundingBox(south=south, north=north, west=west, east=east)
    except (TypeError, ValueError):
        return None


@dataclass
class NominatimGeocoderAdapter:
    """Nominatim geocoder adapter with caching and rate limiting.

    This adapter implements GeocoderPort.

    Attributes:
        config: Geocoding configuration
        cache: Cache for resolved cities (misses are not cached)
    """

    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)
    cache: CachePort[City] = field(
        default_factory=lambda: InMemoryCache(name="geocode")
    )

    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_geocoder(self) -> Any:
        """Get or initialize the geocoder with rate limiting."""
        if self._geocode_fn is not None:
            return self._geocode_fn

        self._logger.debug(
            "Initializing Nominatim geocoder",
            extra={
                "user_agent": self.config.user_agent,
                "timeout": self.config.timeout_seconds,
            },
        )

        geolocator = Nominatim(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout_seconds,
        )

        self._geocode_fn = RateLimiter(
            geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,
        )

        return self._geocode_fn

    def geocode(self, query: str) -> Optional[City]:
        """Geocode a city name.

        Args:
            query: The city name to geocode.

        Returns:
            City with coordinates and extent, or None if not found.
        """
        if not query or not query.strip():
            return None

        cache_key = normalize_city_key(query)

        cached = self.cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Geocode cache hit", extra={"query": query})
            return cached

        try:
            geocode_fn = self._get_geocoder()
            location = geocode_fn(
                query,
                exactly_one=True,
                language=self.config.language,
                country_codes=self.config.country_codes,
            )
        except GeocoderServiceError as e:
            self._logger.warning(
                "Geocode service error",
                extra={"query": query, "error": str(e)},
            )
            return None
        except GeopyError as e:
            self._logger.error(
                "Geocode unexpected error",
                extra={"query": query, "error": str(e)},
            )
            return None

        if location is None:
            self._logger.debug("Geocode returned no result", extra={"query": query})
            return None

        raw = location.raw or {}
        display_name = str(raw.get("display_name") or location.address or query)
        city = City(
            name=display_name.split(",")[0].strip() or query.strip(),
            location=GeoLocation(
                latitude=float(location.latitude),
                longitude=float(location.longitude),
            ),
            bounding_box=_parse_bounding_box(raw.get("boundingbox")),
            country=display_name.split(",")[-1].strip(),
            display_name=display_name,
        )

        self._logger.debug(
            "Geocode success",
            extra={"query": query, "city": city.name},
        )

        self.cache.set(cache_key, city)
        return city
