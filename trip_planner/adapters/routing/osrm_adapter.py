"""OSRM routing adapter.

Returns road travel time and distance between two points, or None on
any provider failure so that itinerary construction falls back to its
heuristic buckets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests

from ...config import RoutingConfig, get_config
from ...domain.models import GeoLocation, RouteEstimate


@dataclass
class OSRMRoutingAdapter:
    """RoutingPort implementation backed by an OSRM server.

    Attributes:
        config: Routing configuration
        session: Optional requests session (injected in tests)
    """

    config: RoutingConfig = field(default_factory=lambda: get_config().routing)
    session: Optional[requests.Session] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def route(self, start: GeoLocation, end: GeoLocation) -> Optional[RouteEstimate]:
        """Estimate road travel between two points.

        Args:
            start: Origin coordinates.
            end: Destination coordinates.

        Returns:
            Duration (minutes) and distance (km), or None if unavailable.
        """
        if not self.config.enabled:
            return None

        url = (
            f"{self.config.base_url.rstrip('/')}/route/v1/{self.config.profile}/"
            f"{start.longitude},{start.latitude};{end.longitude},{end.latitude}"
        )
        http = self.session or requests

        try:
            response = http.get(
                url,
                params={"overview": "false"},
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
            route = payload["routes"][0]
            return RouteEstimate(
                duration_minutes=int(round(float(route["duration"]) / 60)),
                distance_km=round(float(route["distance"]) / 1000, 2),
            )
        except (requests.RequestException, ValueError) as e:
            self._logger.warning(
                "OSRM request failed",
                extra={"reason": "provider_error", "error": str(e)},
            )
        except (KeyError, IndexError, TypeError) as e:
            self._logger.warning(
                "OSRM returned no usable route",
                extra={"reason": "no_route", "error": str(e)},
            )
        return None
