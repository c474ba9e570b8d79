"""Practical tips from the travel guide and the weather forecast.

The two sources are independent, so they are fetched concurrently. Each
has its own fallback: a missing guide page yields one general-advice
tip, a missing forecast yields no weather tip.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config import PlannerConfig, WeatherConfig, get_config
from ..domain.models import City, Citation, Constraints, SourceType, Tip, WeatherForecast
from ..nlp.wikitext import first_sentence, parse_sections
from ..ports.providers import WeatherPort, WikiContentPort

MEDIUM_CONFIDENCE = 0.6
HIGH_CONFIDENCE = 0.8
GENERAL_CONFIDENCE = 0.4

CULTURE_SECTIONS = ("see", "do", "understand")


def weather_claim(forecast: WeatherForecast) -> Optional[str]:
    """Build a single advisory sentence from forecast averages.

    Returns:
        The claim, or None without temperature data.
    """
    average_temp = forecast.average_max_temperature
    if average_temp is None:
        return None
    temp = round(average_temp)
    precip = round(forecast.average_precipitation_probability or 0)

    if temp < 15:
        claim = f"Expect cold weather with temperatures around {temp}°C; bring layers and warm clothing."
    elif temp < 25:
        claim = f"Moderate temperatures around {temp}°C; comfortable for outdoor activities."
    else:
        claim = f"Hot weather with temperatures reaching {temp}°C; stay hydrated and use sun protection."

    if precip > 50:
        claim += f" High chance of rain ({precip}%); carry an umbrella or waterproof jacket."
    elif precip > 20:
        claim += f" Some rain possible ({precip}%); consider packing a light rain cover."
    return claim


def general_tip(city: str) -> Tip:
    return Tip(
        id="tip_wv_1",
        claim=f"{city} is best explored at an unhurried pace; check opening hours locally before each visit.",
        citations=(),
        confidence=GENERAL_CONFIDENCE,
        is_general_advice=True,
    )


def guide_tips(city: str, wikitext: str, interests: Sequence[str]) -> List[Tip]:
    """Extract cited tips from a guide page.

    'Get around' is always used; 'Eat' for food interest; the first of
    'See', 'Do', 'Understand' for culture interest.

    Args:
        city: Page / city name used in citation refs.
        wikitext: Raw page source.
        interests: Trip interests.

    Returns:
        Tips in section order; may be empty.
    """
    sections = parse_sections(wikitext)
    wanted = [("get around", MEDIUM_CONFIDENCE)]
    if "food" in interests:
        wanted.append(("eat", MEDIUM_CONFIDENCE))
    if "culture" in interests:
        culture = next((name for name in CULTURE_SECTIONS if name in sections), None)
        if culture:
            wanted.append((culture, HIGH_CONFIDENCE))

    tips: List[Tip] = []
    for heading, confidence in wanted:
        text = sections.get(heading)
        claim = first_sentence(text) if text else None
        if not claim:
            continue
        anchor = heading.capitalize()
        tips.append(
            Tip(
                id=f"tip_wv_{len(tips) + 1}",
                claim=claim,
                citations=(
                    Citation(
                        source_type=SourceType.WIKIVOYAGE,
                        ref=f"{city}#{anchor}",
                        snippet=claim[:120],
                    ),
                ),
                confidence=confidence,
            )
        )
    return tips


@dataclass
class TipsService:
    """Collects guide and weather tips for a plan.

    Attributes:
        wiki: Travel guide content port
        weather: Weather forecast port
        config: Planner constants (worker count)
        weather_config: Forecast horizon ceiling
    """

    wiki: WikiContentPort
    weather: WeatherPort
    config: PlannerConfig = field(default_factory=lambda: get_config().planner)
    weather_config: WeatherConfig = field(default_factory=lambda: get_config().weather)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _guide(self, constraints: Constraints) -> List[Tip]:
        wikitext = self.wiki.fetch_wikitext(constraints.city)
        tips = guide_tips(constraints.city, wikitext, constraints.interests) if wikitext else []
        if not tips:
            self._logger.warning(
                "No guide tips, using general advice",
                extra={"city": constraints.city, "reason": "NO_GUIDE_CONTENT" if not wikitext else "NO_USABLE_SECTIONS"},
            )
            return [general_tip(constraints.city)]
        return tips

    def _weather(self, city: City, num_days: int) -> List[Tip]:
        days = max(1, min(num_days, self.weather_config.max_forecast_days))
        forecast = self.weather.forecast(city.location, days)
        claim = weather_claim(forecast) if forecast else None
        if claim is None:
            self._logger.warning(
                "No weather tip",
                extra={"city": city.name, "reason": "NO_FORECAST"},
            )
            return []
        return [
            Tip(
                id="tip_weather_1",
                claim=claim,
                citations=(
                    Citation(source_type=SourceType.WEATHER, ref=f"Open-Meteo forecast: {city.name}"),
                ),
                confidence=MEDIUM_CONFIDENCE,
            )
        ]

    def collect(self, constraints: Constraints, city: City) -> List[Tip]:
        """Fetch guide and weather tips concurrently.

        Args:
            constraints: Resolved constraints (city, interests, day count).
            city: Geocoded city (forecast location).

        Returns:
            Guide tips followed by the weather tip, if any.
        """
        with ThreadPoolExecutor(
            max_workers=max(1, self.config.enrichment_workers),
            thread_name_prefix="tips",
        ) as pool:
            guide = pool.submit(self._guide, constraints)
            weather = pool.submit(self._weather, city, constraints.num_days)
            tips = guide.result() + weather.result()

        self._logger.info(
            "Tips collected",
            extra={"city": city.name, "count": len(tips)},
        )
        return tips
