"""Upstream data provider ports.

These protocols cover the external travel data sources: POI listings,
road routing, weather forecasts and travel guide content. Adapters
enforce a short timeout on every call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import (
        BoundingBox,
        GeoLocation,
        RouteEstimate,
        WeatherForecast,
    )


class POIProviderPort(Protocol):
    """Port for raw POI listings.

    Implementation: adapters/poi/overpass_adapter.py
    """

    def fetch_elements(self, bbox: BoundingBox) -> Sequence[Mapping[str, Any]]:
        """Fetch raw tagged map elements inside a region.

        Args:
            bbox: Region to search.

        Returns:
            Raw elements with 'type', 'id', 'tags' and either 'lat'/'lon'
            or a 'center' mapping. May be empty.

        Raises:
            ProviderError: On timeout, HTTP failure or malformed payload.
        """
        ...


class RoutingPort(Protocol):
    """Port for point-to-point travel estimates.

    Implementation: adapters/routing/osrm_adapter.py
    """

    def route(self, start: GeoLocation, end: GeoLocation) -> Optional[RouteEstimate]:
        """Estimate travel between two points.

        Args:
            start: Origin coordinates.
            end: Destination coordinates.

        Returns:
            Duration and distance, or None when no route is available.
            Never raises for provider failures.
        """
        ...


class WeatherPort(Protocol):
    """Port for daily weather forecasts.

    Implementation: adapters/weather/open_meteo_adapter.py
    """

    def forecast(self, location: GeoLocation, days: int) -> Optional[WeatherForecast]:
        """Fetch a daily forecast.

        Args:
            location: Where to forecast.
            days: Number of forecast days.

        Returns:
            Forecast series, or None when unavailable.
        """
        ...


class WikiContentPort(Protocol):
    """Port for travel guide page source.

    Implementation: adapters/wiki/wikivoyage_adapter.py
    """

    def fetch_wikitext(self, page: str) -> Optional[str]:
        """Fetch the wikitext of a guide page.

        Args:
            page: Page title, usually the city name.

        Returns:
            Raw wikitext, or None when the page is missing or the
            service is unavailable.
        """
        ...
