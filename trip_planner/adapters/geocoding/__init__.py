"""Geocoding adapters - Implementations of the GeocoderPort."""

from .nominatim_adapter import NominatimGeocoderAdapter, normalize_city_key

__all__ = ["NominatimGeocoderAdapter", "normalize_city_key"]
