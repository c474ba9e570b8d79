"""Domain layer - Core business models and errors.

This module contains the domain models and typed errors used
throughout the application. No external dependencies.
"""

from .errors import (
    CityResolutionError,
    ConfigurationError,
    InvalidRequestError,
    LLMError,
    LLMOutputError,
    PlannerError,
    ProviderError,
    SessionNotFoundError,
    error_payload,
)
from .models import (
    POI,
    Block,
    BoundingBox,
    City,
    Citation,
    Constraints,
    Day,
    EditAction,
    EditCommand,
    EditOutcome,
    EditParams,
    EditScope,
    GeoLocation,
    Intent,
    IntentResult,
    Itinerary,
    Pace,
    POISearchResult,
    Session,
    SourceType,
    TimeOfDay,
    Tip,
)

__all__ = [
    # Models
    "GeoLocation",
    "BoundingBox",
    "City",
    "Constraints",
    "POI",
    "POISearchResult",
    "Block",
    "Day",
    "Itinerary",
    "Citation",
    "SourceType",
    "Tip",
    "Intent",
    "IntentResult",
    "Pace",
    "TimeOfDay",
    "EditAction",
    "EditCommand",
    "EditScope",
    "EditParams",
    "EditOutcome",
    "Session",
    # Errors
    "PlannerError",
    "InvalidRequestError",
    "CityResolutionError",
    "SessionNotFoundError",
    "ProviderError",
    "LLMError",
    "LLMOutputError",
    "ConfigurationError",
    "error_payload",
]
