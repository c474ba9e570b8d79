"""Weather adapters - Implementations of the WeatherPort."""

from .open_meteo_adapter import OpenMeteoWeatherAdapter

__all__ = ["OpenMeteoWeatherAdapter"]
