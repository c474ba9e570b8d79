"""Open-Meteo daily forecast adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests

from ...config import WeatherConfig, get_config
from ...domain.models import GeoLocation, WeatherForecast


@dataclass
class OpenMeteoWeatherAdapter:
    """WeatherPort implementation backed by Open-Meteo.

    Attributes:
        config: Weather configuration
        session: Optional requests session (injected in tests)
    """

    config: WeatherConfig = field(default_factory=lambda: get_config().weather)
    session: Optional[requests.Session] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def forecast(self, location: GeoLocation, days: int) -> Optional[WeatherForecast]:
        """Fetch daily max temperature and precipitation probability.

        Args:
            location: Where to forecast.
            days: Number of forecast days (1-16).

        Returns:
            Forecast series, or None when unavailable.
        """
        http = self.session or requests
        params = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "daily": "temperature_2m_max,precipitation_probability_max",
            "forecast_days": max(1, min(days, 16)),
            "timezone": "auto",
        }

        try:
            response = http.get(
                self.config.forecast_url,
                params=params,
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            daily = response.json()["daily"]
            temps = tuple(float(t) for t in daily.get("temperature_2m_max", []) if t is not None)
            precip = tuple(
                float(p)
                for p in daily.get("precipitation_probability_max", [])
                if p is not None
            )
        except (requests.RequestException, ValueError) as e:
            self._logger.warning(
                "Weather request failed",
                extra={"reason": "provider_error", "error": str(e)},
            )
            return None
        except (KeyError, TypeError, AttributeError) as e:
            self._logger.warning(
                "Weather payload malformed",
                extra={"reason": "payload", "error": str(e)},
            )
            return None

        if not temps and not precip:
            return None
        return WeatherForecast(max_temperatures=temps, precipitation_probabilities=precip)
