"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the planning core and external
adapters (geocoder, language model, travel data providers, session
storage). They enable dependency injection and make the system testable.
"""

from .cache import CachePort, EvictionPolicy
from .geocoding import GeocoderPort
from .llm import LanguageModelPort
from .providers import POIProviderPort, RoutingPort, WeatherPort, WikiContentPort
from .sessions import SessionStorePort

__all__ = [
    # Cache
    "CachePort",
    "EvictionPolicy",
    # Geocoding
    "GeocoderPort",
    # Language model
    "LanguageModelPort",
    # Travel data
    "POIProviderPort",
    "RoutingPort",
    "WeatherPort",
    "WikiContentPort",
    # Sessions
    "SessionStorePort",
]
