"""Geocoding port - City validation and coordinates.

Every plan request resolves its city through this port; a city the
geocoder does not know is rejected rather than defaulted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import City


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementation: adapters/geocoding/nominatim_adapter.py
    """

    def geocode(self, query: str) -> Optional[City]:
        """Geocode a city name.

        Args:
            query: The city name to look up (e.g., "Jaipur").

        Returns:
            City with coordinates and extent, or None if not found or
            the service is unavailable.
        """
        ...
