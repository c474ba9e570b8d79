"""Constraint extraction and resolution.

The model proposes a partial constraint object; the resolver merges it
with the deterministic extractors and fixed defaults, clamps and
normalizes the result, and validates the city through the geocoder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..config import PlannerConfig, get_config
from ..domain.errors import CityResolutionError, LLMError, LLMOutputError
from ..domain.models import City, Constraints
from ..nlp.extractors import (
    clamp_days,
    extract_city,
    extract_interests,
    extract_num_days,
    extract_pace,
    normalize_pace,
)
from ..nlp.llm_json import StructuredLLM
from ..nlp.schemas import PlanConstraintsPayload
from ..ports.geocoding import GeocoderPort

CONSTRAINTS_PROMPT = """Extract trip constraints from the request.
Return JSON with only the fields you can infer:
{{"city": "<city>", "numDays": <1-7>, "pace": "relaxed|moderate|packed", "interests": ["culture", "food", ...], "maxDailyHours": <1-12>}}
Request: {utterance}"""


@dataclass
class ConstraintExtractor:
    """Model-backed partial constraint extraction.

    Attributes:
        llm: Structured model access
    """

    llm: StructuredLLM

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def extract(self, utterance: str) -> Optional[PlanConstraintsPayload]:
        """Ask the model for constraints.

        Args:
            utterance: The plan request.

        Returns:
            Validated partial constraints, or None when the model is
            unavailable or its output is invalid.
        """
        try:
            return self.llm.generate(
                CONSTRAINTS_PROMPT.format(utterance=utterance.strip()),
                PlanConstraintsPayload,
            )
        except (LLMError, LLMOutputError) as e:
            self._logger.warning(
                "Constraint model unavailable, using extractors",
                extra={"reason": e.code, "error": str(e)},
            )
            return None


def _clean_interests(values: Sequence[str], limit: int) -> List[str]:
    seen: List[str] = []
    for value in values:
        item = str(value).strip().lower()
        if item and item not in seen:
            seen.append(item)
    return seen[:limit]


@dataclass
class ConstraintResolver:
    """Resolves final, validated constraints for a plan request.

    Attributes:
        geocoder: Geocoding port used to validate the city
        config: Planner constants (day range, defaults)
    """

    geocoder: GeocoderPort
    config: PlannerConfig = field(default_factory=lambda: get_config().planner)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _resolve_city(self, utterance: str, model_city: Optional[str]) -> City:
        candidate = extract_city(utterance) or (model_city.strip() if model_city else None)
        if not candidate:
            raise CityResolutionError(
                "Which city would you like to visit?",
                reason="MISSING_CITY",
            )

        city = self.geocoder.geocode(candidate)
        if city is None:
            self._logger.info(
                "City could not be geocoded",
                extra={"city": candidate, "reason": "CITY_NOT_FOUND"},
            )
            raise CityResolutionError(
                f"Could not find a city named '{candidate}'",
                reason="CITY_NOT_FOUND",
                city=candidate,
            )
        return city

    def resolve(
        self,
        utterance: str,
        model_constraints: Optional[PlanConstraintsPayload] = None,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[Constraints, City]:
        """Resolve constraints for a plan request.

        The deterministic city wins over the model's; other fields take
        the model value, then the extractor value, then the default.
        Request defaults override everything except the city.

        Args:
            utterance: The plan request.
            model_constraints: Optional model-extracted partial constraints.
            defaults: Optional request-level overrides (num_days, pace,
                interests, max_daily_hours).

        Returns:
            (constraints, geocoded city).

        Raises:
            CityResolutionError: If no city is mentioned or it cannot be
                geocoded.
        """
        cfg = self.config
        model = model_constraints or PlanConstraintsPayload()
        overrides = dict(defaults or {})

        city = self._resolve_city(utterance, model.city)

        num_days = overrides.get("num_days") or model.num_days
        if num_days is None:
            num_days = extract_num_days(
                utterance, cfg.min_days, cfg.max_days, cfg.default_days
            )
        num_days = clamp_days(
            int(num_days or cfg.default_days),
            cfg.min_days,
            cfg.max_days,
            cfg.default_days,
        )

        raw_pace = overrides.get("pace") or model.pace
        pace = normalize_pace(raw_pace if raw_pace else extract_pace(utterance))

        interests = _clean_interests(
            overrides.get("interests")
            or model.interests
            or extract_interests(utterance)
            or cfg.default_interests,
            cfg.max_interests,
        ) or list(cfg.default_interests)

        max_daily_hours = float(
            overrides.get("max_daily_hours")
            or model.max_daily_hours
            or cfg.default_max_daily_hours
        )

        constraints = Constraints(
            city=city.name,
            num_days=num_days,
            pace=pace,
            interests=interests,
            max_daily_hours=max_daily_hours,
        )
        self._logger.info(
            "Constraints resolved",
            extra={
                "city": constraints.city,
                "num_days": constraints.num_days,
                "pace": constraints.pace.value,
                "interests": constraints.interests,
            },
        )
        return constraints, city
