"""Overpass API adapter for raw POI listings.

Queries OpenStreetMap for sightseeing and eating places inside a
bounding box. Normalization and ranking happen in services/poi_search.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests

from ...config import POIConfig, get_config
from ...domain.errors import ProviderError
from ...domain.models import BoundingBox

TOURISM_VALUES = ("attraction", "museum", "viewpoint")
AMENITY_VALUES = ("restaurant", "cafe", "fast_food")


def build_overpass_query(bbox: BoundingBox, timeout_seconds: int, max_results: int) -> str:
    """Build the Overpass QL query for a region.

    Args:
        bbox: Region to search.
        timeout_seconds: Server-side query timeout.
        max_results: Maximum number of elements returned.

    Returns:
        Overpass QL source.
    """
    area = bbox.to_overpass()
    tourism = "|".join(TOURISM_VALUES)
    amenity = "|".join(AMENITY_VALUES)
    return (
        f"[out:json][timeout:{timeout_seconds}];\n"
        "(\n"
        f'  nwr["tourism"~"^({tourism})$"]({area});\n'
        f'  nwr["amenity"~"^({amenity})$"]({area});\n'
        f'  nwr["amenity"="place_of_worship"]({area});\n'
        ");\n"
        f"out tags center {max_results};\n"
    )


@dataclass
class OverpassPOIProvider:
    """POIProviderPort implementation backed by the Overpass API.

    Attributes:
        config: POI provider configuration
        session: Optional requests session (injected in tests)
    """

    config: POIConfig = field(default_factory=lambda: get_config().poi)
    session: Optional[requests.Session] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def fetch_elements(self, bbox: BoundingBox) -> Sequence[Mapping[str, Any]]:
        """Fetch raw elements inside a region.

        Args:
            bbox: Region to search.

        Returns:
            Raw Overpass elements.

        Raises:
            ProviderError: On timeout, HTTP failure or malformed payload.
        """
        query = build_overpass_query(
            bbox,
            timeout_seconds=max(1, int(self.config.timeout_seconds)),
            max_results=self.config.max_results,
        )
        http = self.session or requests

        try:
            response = http.post(
                self.config.overpass_url,
                data={"data": query},
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            payload: Dict[str, Any] = response.json()
        except requests.Timeout as e:
            raise ProviderError(
                "Overpass request timed out", cause=e, provider="overpass", reason="timeout"
            )
        except ValueError as e:
            # requests' JSONDecodeError is both a ValueError and a RequestException
            raise ProviderError(
                "Overpass returned invalid JSON", cause=e, provider="overpass", reason="payload"
            )
        except requests.RequestException as e:
            raise ProviderError(
                "Overpass request failed", cause=e, provider="overpass", reason="http"
            )

        elements = payload.get("elements") if isinstance(payload, dict) else None
        if not isinstance(elements, list):
            raise ProviderError(
                "Overpass payload has no element list",
                provider="overpass",
                reason="payload",
            )

        result: List[Mapping[str, Any]] = [e for e in elements if isinstance(e, dict)]
        self._logger.debug(
            "Overpass elements fetched",
            extra={"count": len(result), "bbox": bbox.to_overpass()},
        )
        return result
