"""Grounded explanations of the plan.

Answers are generated from known facts only (POI type, duration and
placement, or the itinerary POI list). Every model answer goes through a
quality gate that checks it actually names the places it is about; a
failing answer gets one amplified retry, then a deterministic template
that always passes the gate.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from ..domain.errors import LLMError, LLMOutputError
from ..domain.models import (
    POI,
    Citation,
    Constraints,
    ExplainResult,
    Itinerary,
    SourceType,
)
from ..nlp.llm_json import StructuredLLM
from ..nlp.schemas import ExplainPayload

POI_MODE = "poi"
ITINERARY_MODE = "itinerary"
MIN_SHARED_WORDS = 2
MIN_WORD_CHARS = 4
TOP_NAMES = 3
MIN_TOP_MENTIONS = 2

_WORD = re.compile(r"[a-z0-9]+")

EXPLAIN_POI_PROMPT = """Answer the traveller's question about one place using ONLY these facts.
Place: {name}
Type: {type}
Typical visit: {duration:g} hours
Placement: {placement}
Trip: {days} days in {city}, {pace} pace, interests: {interests}
Question: {question}
The answer must mention "{name}" by name.
Return JSON: {{"answer": "<2-3 sentences>", "citations": [{{"sourceType": "OSM", "ref": "{poi_id}", "quote": "<short quote>"}}]}}"""

EXPLAIN_ITINERARY_PROMPT = """Answer the traveller's question about their itinerary using ONLY these facts.
Trip: {days} days in {city}, {pace} pace, interests: {interests}, max {hours:g} hours per day
Scheduled places:
{places}
Question: {question}
Mention the main places by name.
Return JSON: {{"answer": "<2-4 sentences>", "citations": [{{"sourceType": "OSM", "ref": "<place id>", "quote": "<short quote>"}}]}}"""

AMPLIFIED_SUFFIX = "\nIMPORTANT: your previous answer did not name the places. The answer MUST include: {names}."


def _significant_words(text: str) -> set:
    return {word for word in _WORD.findall(text.lower()) if len(word) >= MIN_WORD_CHARS}


def _mentions(answer: str, name: str) -> bool:
    return name.lower() in answer.lower()


def match_poi(question: str, candidates: Sequence[POI]) -> Optional[POI]:
    """Find the single POI a question is about.

    A full-name substring match beats shared-word matches; a tie between
    different POIs at the best score means no match.

    Args:
        question: User question.
        candidates: POIs to match against.

    Returns:
        The uniquely best matching POI, or None.
    """
    text = question.lower()
    words = _significant_words(question)
    scored: List[Tuple[int, POI]] = []
    for poi in candidates:
        name = poi.name.lower().strip()
        if name and name in text:
            scored.append((1000 + len(name), poi))
            continue
        shared = len(words & _significant_words(poi.name))
        if shared >= MIN_SHARED_WORDS:
            scored.append((shared, poi))

    if not scored:
        return None
    scored.sort(key=lambda item: item[0], reverse=True)
    if len(scored) > 1 and scored[0][0] == scored[1][0]:
        return None
    return scored[0][1]


@dataclass
class ExplanationGenerator:
    """Answers plan questions with a name-mention quality gate.

    Attributes:
        llm: Structured model access
    """

    llm: StructuredLLM

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def _scheduled_pois(itinerary: Itinerary, poi_catalog: Mapping[str, POI]) -> List[POI]:
        return [poi_catalog[pid] for pid in itinerary.assigned_poi_ids if pid in poi_catalog]

    def _select_target(
        self,
        question: str,
        itinerary: Itinerary,
        poi_catalog: Mapping[str, POI],
        target_poi_id: Optional[str],
    ) -> Optional[POI]:
        if target_poi_id and target_poi_id in poi_catalog:
            return poi_catalog[target_poi_id]
        scheduled = self._scheduled_pois(itinerary, poi_catalog)
        others = [poi for poi in poi_catalog.values() if poi not in scheduled]
        return match_poi(question, scheduled + others)

    @staticmethod
    def _placement(itinerary: Itinerary, poi: POI) -> Optional[str]:
        found = itinerary.find_placement(poi.id)
        if found is None:
            return None
        day, block = found
        return f"{day.name} {block.time_of_day.value}"

    @staticmethod
    def _passes_gate(answer: str, required_names: Sequence[str], minimum: int) -> bool:
        return sum(1 for name in required_names if _mentions(answer, name)) >= minimum

    def _ask(
        self, prompt: str, required_names: Sequence[str], minimum: int
    ) -> Optional[ExplainPayload]:
        """Model call with one amplified retry; None means use the template."""
        attempts = (prompt, prompt + AMPLIFIED_SUFFIX.format(names=", ".join(required_names)))
        for attempt, attempt_prompt in enumerate(attempts, start=1):
            try:
                payload = self.llm.generate(attempt_prompt, ExplainPayload)
            except (LLMError, LLMOutputError) as e:
                self._logger.warning(
                    "Explanation model unavailable, using template",
                    extra={"reason": e.code, "error": str(e)},
                )
                return None
            if self._passes_gate(payload.answer, required_names, minimum):
                return payload
            self._logger.warning(
                "Explanation failed quality gate",
                extra={"attempt": attempt, "required": list(required_names)},
            )
        return None

    @staticmethod
    def _citations_for(answer: str, pois: Sequence[POI]) -> Tuple[Citation, ...]:
        return tuple(
            Citation(source_type=SourceType.OSM, ref=poi.id, snippet=poi.name)
            for poi in pois
            if _mentions(answer, poi.name)
        )

    def _model_citations(self, payload: ExplainPayload, pois: Sequence[POI]) -> Tuple[Citation, ...]:
        citations = tuple(item.to_citation() for item in payload.citations)
        return citations or self._citations_for(payload.answer, pois)

    def explain(
        self,
        question: str,
        itinerary: Itinerary,
        constraints: Constraints,
        poi_catalog: Mapping[str, POI],
        target_poi_id: Optional[str] = None,
    ) -> ExplainResult:
        """Answer a question about one POI or the whole itinerary.

        Args:
            question: User question.
            itinerary: Current itinerary.
            constraints: Current constraints.
            poi_catalog: Known POIs by id.
            target_poi_id: Optional explicit POI to explain.

        Returns:
            ExplainResult; always non-empty and gate-compliant.
        """
        interests = ", ".join(constraints.interests) or "general sightseeing"
        target = self._select_target(question, itinerary, poi_catalog, target_poi_id)

        if target is not None:
            placement = self._placement(itinerary, target)
            prompt = EXPLAIN_POI_PROMPT.format(
                name=target.name,
                type=target.type,
                duration=target.typical_duration_hours,
                placement=placement or "not scheduled",
                days=len(itinerary.days),
                city=itinerary.city,
                pace=constraints.pace.value,
                interests=interests,
                question=question.strip(),
                poi_id=target.id,
            )
            payload = self._ask(prompt, [target.name], 1)
            if payload is not None:
                return ExplainResult(
                    answer=payload.answer,
                    citations=self._model_citations(payload, [target]),
                    mode=POI_MODE,
                    poi_id=target.id,
                    source="model",
                )
            return self._poi_template(target, placement, constraints, itinerary.city)

        scheduled = self._scheduled_pois(itinerary, poi_catalog)
        top = scheduled[:TOP_NAMES]
        top_names = [poi.name for poi in top]
        places = "\n".join(
            f"- {poi.name} ({poi.type}, id {poi.id}) on {self._placement(itinerary, poi)}"
            for poi in scheduled
        ) or "- (no places scheduled)"
        prompt = EXPLAIN_ITINERARY_PROMPT.format(
            days=len(itinerary.days),
            city=itinerary.city,
            pace=constraints.pace.value,
            interests=interests,
            hours=constraints.max_daily_hours,
            places=places,
            question=question.strip(),
        )
        payload = self._ask(prompt, top_names, min(MIN_TOP_MENTIONS, len(top_names)))
        if payload is not None:
            return ExplainResult(
                answer=payload.answer,
                citations=self._model_citations(payload, scheduled),
                mode=ITINERARY_MODE,
                source="model",
            )
        return self._itinerary_template(itinerary, constraints, top)

    def _poi_template(
        self, poi: POI, placement: Optional[str], constraints: Constraints, city: str
    ) -> ExplainResult:
        interests = " and ".join(constraints.interests) or "sightseeing"
        if placement:
            answer = (
                f"{poi.name} is a {poi.type.replace('_', ' ')} scheduled for {placement}, "
                f"with about {poi.typical_duration_hours:g} hours planned. "
                f"It fits your interest in {interests} at a {constraints.pace.value} pace."
            )
        else:
            answer = (
                f"{poi.name} is a {poi.type.replace('_', ' ')} in {city} that is not in the "
                f"current plan; a visit typically takes about {poi.typical_duration_hours:g} hours."
            )
        return ExplainResult(
            answer=answer,
            citations=(Citation(source_type=SourceType.OSM, ref=poi.id, snippet=poi.name),),
            mode=POI_MODE,
            poi_id=poi.id,
            source="template",
        )

    def _itinerary_template(
        self, itinerary: Itinerary, constraints: Constraints, top: Sequence[POI]
    ) -> ExplainResult:
        interests = " and ".join(constraints.interests) or "sightseeing"
        answer = (
            f"This {len(itinerary.days)}-day plan for {itinerary.city} focuses on {interests} "
            f"at a {constraints.pace.value} pace."
        )
        if top:
            answer += f" Highlights include {', '.join(poi.name for poi in top)}."
        answer += (
            f" Each day is planned within about {constraints.max_daily_hours:g} hours "
            "including travel and rest."
        )
        return ExplainResult(
            answer=answer,
            citations=self._citations_for(answer, top),
            mode=ITINERARY_MODE,
            source="template",
        )
