"""Intent classification with keyword pre-filter, model path and recovery.

Order of decision:
1. Empty input -> UNKNOWN.
2. Pre-filter keyword table (EXPLAIN > EDIT > PLAN, then out-of-scope);
   a hit skips the model call.
3. Model classification (strict JSON, one retry).
4. Recovery keyword table when the model call failed.

Endpoints that already know what they were asked to do call
``resolve_for_endpoint``, which coerces UNKNOWN or low-confidence
results to the endpoint's intent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..config import PlannerConfig, get_config
from ..domain.errors import LLMError, LLMOutputError
from ..domain.models import Intent, IntentResult
from ..nlp.intent_rules import PREFILTER_RULES, RECOVERY_RULES, match_intent
from ..nlp.llm_json import StructuredLLM
from ..nlp.schemas import IntentPayload

INTENT_PROMPT = """Classify the utterance sent to a trip planning assistant.
Intents:
- PLAN: the user wants a new day-by-day trip itinerary
- EDIT: the user wants to change the existing itinerary
- EXPLAIN: the user asks why or how something in the itinerary works
- UNKNOWN: anything else
An itinerary already exists: {has_itinerary}
Return JSON: {{"intent": "PLAN|EDIT|EXPLAIN|UNKNOWN", "confidence": <0..1>, "rationale": "<short reason>"}}
Utterance: {utterance}"""


@dataclass
class IntentClassifier:
    """Classifies utterances into PLAN, EDIT, EXPLAIN or UNKNOWN.

    Attributes:
        llm: Structured model access
        config: Planner constants (thresholds, coercion confidence)
    """

    llm: StructuredLLM
    config: PlannerConfig = field(default_factory=lambda: get_config().planner)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def classify(self, utterance: str, has_existing_itinerary: bool = False) -> IntentResult:
        """Classify an utterance.

        Args:
            utterance: The user utterance.
            has_existing_itinerary: Whether the session already has a plan.

        Returns:
            IntentResult; never raises for model failures.
        """
        if not utterance or not utterance.strip():
            return IntentResult(Intent.UNKNOWN, 0.0, "empty input", source="keyword")

        hit = match_intent(utterance, PREFILTER_RULES, has_existing_itinerary)
        if hit is not None:
            self._logger.debug(
                "Intent pre-filter hit",
                extra={"intent": hit.intent.name, "label": hit.label},
            )
            return IntentResult(
                intent=hit.intent,
                confidence=hit.confidence,
                rationale=f"deterministic keyword match ({hit.label})",
                source="keyword",
            )

        try:
            payload = self.llm.generate(
                INTENT_PROMPT.format(
                    has_itinerary="yes" if has_existing_itinerary else "no",
                    utterance=utterance.strip(),
                ),
                IntentPayload,
            )
            return IntentResult(
                intent=Intent(payload.intent),
                confidence=payload.confidence,
                rationale=payload.rationale,
                source="model",
            )
        except (LLMError, LLMOutputError) as e:
            self._logger.warning(
                "Intent model unavailable, using keyword recovery",
                extra={"reason": e.code, "error": str(e)},
            )

        hit = match_intent(utterance, RECOVERY_RULES, has_existing_itinerary)
        if hit is not None:
            return IntentResult(
                intent=hit.intent,
                confidence=hit.confidence,
                rationale=f"fallback keyword match ({hit.label})",
                source="fallback",
            )
        return IntentResult(Intent.UNKNOWN, 0.4, "no keyword matched", source="fallback")

    def resolve_for_endpoint(
        self,
        utterance: str,
        requested: Intent,
        has_existing_itinerary: bool = False,
    ) -> IntentResult:
        """Classify, then coerce UNKNOWN or weak results to the endpoint intent.

        Args:
            utterance: The user utterance.
            requested: The intent implied by the endpoint being called.
            has_existing_itinerary: Whether the session already has a plan.

        Returns:
            The classification, or a coerced result carrying the
            original intent.
        """
        result = self.classify(utterance, has_existing_itinerary)
        weak = result.confidence < self.config.intent_confidence_threshold
        if result.intent is not Intent.UNKNOWN and not weak:
            return result

        self._logger.info(
            "Intent coerced to endpoint intent",
            extra={
                "detected": result.intent.name,
                "confidence": result.confidence,
                "requested": requested.name,
            },
        )
        return IntentResult(
            intent=requested,
            confidence=self.config.coercion_confidence,
            rationale=(
                f"forced fallback to {requested.name} due to "
                f"{result.intent.name} detection"
            ),
            source="coerced",
            original=result.intent,
        )
