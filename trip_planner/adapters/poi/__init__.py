"""POI provider adapters - Implementations of the POIProviderPort."""

from .overpass_adapter import OverpassPOIProvider, build_overpass_query

__all__ = ["OverpassPOIProvider", "build_overpass_query"]
