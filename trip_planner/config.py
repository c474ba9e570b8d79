"""Centralized configuration using Pydantic Settings.

This module provides a single source of truth for provider endpoints,
timeouts, model settings and planning constants.

Configuration can be overridden via environment variables:
- PLANNER_LLM_API_KEY=...
- PLANNER_LLM_ENABLED=false
- PLANNER_GEO_COUNTRY_CODES=in
- PLANNER_CORE_MAX_DAYS=5
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseSettings):
    """Language model configuration.

    Any OpenAI-compatible chat completions endpoint works; the default
    points at Groq.

    Environment variables prefixed with PLANNER_LLM_.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_LLM_")

    enabled: bool = True
    api_key: Optional[str] = None
    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama-3.1-8b-instant"
    temperature: float = 0.0
    max_tokens: int = 500
    timeout_seconds: float = 8.0

    @property
    def is_available(self) -> bool:
        """Check if the model can be called at all."""
        return self.enabled and bool(self.api_key)


class GeocodingConfig(BaseSettings):
    """Geocoding configuration.

    Environment variables prefixed with PLANNER_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_GEO_")

    user_agent: str = "voice-trip-planner"
    timeout_seconds: int = 5
    rate_limit_delay: float = 1.0
    max_retries: int = 2
    error_wait_seconds: float = 2.0
    country_codes: Optional[str] = "in"
    language: str = "en"
    cache_enabled: bool = True
    cache_max_size: Optional[int] = None
    cache_ttl_seconds: Optional[float] = None


class POIConfig(BaseSettings):
    """POI provider (Overpass) configuration.

    Environment variables prefixed with PLANNER_POI_.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_POI_")

    overpass_url: str = "https://overpass-api.de/api/interpreter"
    timeout_seconds: float = 8.0
    max_results: int = 500
    # south, north, west, east; used when the geocoder returns no extent
    default_bbox: Tuple[float, float, float, float] = (26.80, 27.05, 75.72, 76.00)
    seed_file: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parent / "data" / "fallback_pois.csv"
    )


class RoutingConfig(BaseSettings):
    """Routing (OSRM) configuration.

    Environment variables prefixed with PLANNER_ROUTING_.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_ROUTING_")

    enabled: bool = True
    base_url: str = "https://router.project-osrm.org"
    profile: str = "car"
    timeout_seconds: float = 5.0


class WeatherConfig(BaseSettings):
    """Weather (Open-Meteo) configuration.

    Environment variables prefixed with PLANNER_WEATHER_.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_WEATHER_")

    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    timeout_seconds: float = 5.0
    # Ceiling on the forecast horizon; plans ask for their own day count
    max_forecast_days: int = 16


class WikiConfig(BaseSettings):
    """Travel guide (Wikivoyage) configuration.

    Environment variables prefixed with PLANNER_WIKI_.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_WIKI_")

    api_url: str = "https://en.wikivoyage.org/w/api.php"
    timeout_seconds: float = 5.0
    user_agent: str = "voice-trip-planner/1.0"


class PlannerConfig(BaseSettings):
    """Planning constants.

    Environment variables prefixed with PLANNER_CORE_.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_CORE_")

    min_days: int = 2
    max_days: int = 5
    default_days: int = 3
    default_pace: Literal["relaxed", "normal", "packed"] = "normal"
    default_interests: List[str] = Field(default_factory=lambda: ["culture", "food"])
    default_max_daily_hours: float = 6.0
    max_interests: int = 5
    max_candidates: int = 10
    max_pois_per_day: int = 3
    day_overhead_hours: float = 1.0
    relax_decrement_hours: float = 0.5
    min_block_hours: float = 0.5
    travel_note_threshold_minutes: int = 20
    intent_confidence_threshold: float = 0.5
    coercion_confidence: float = 0.6
    feasibility_tolerance_hours: float = 0.5
    enrichment_workers: int = 2


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with PLANNER_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    Sub-configurations can be accessed via attributes:

        config = get_config()
        print(config.llm.model)
        print(config.planner.max_days)

    Environment variables prefixed with PLANNER_.
    """

    model_config = SettingsConfigDict(env_prefix="PLANNER_")

    llm: LLMConfig = Field(default_factory=LLMConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    poi: POIConfig = Field(default_factory=POIConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    wiki: WikiConfig = Field(default_factory=WikiConfig)
    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    environment: Literal["development", "production", "test"] = "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production (no stack traces in errors)."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
