"""Planner service: the plan / edit / explain / export surface.

Each request runs its pipeline stages strictly in order and records one
trace entry per stage on the session. Collaborator failures are handled
by the owning component; only input errors (missing city, unknown
session, empty request) reach the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from ..config import PlannerConfig, get_config
from ..domain.errors import InvalidRequestError, SessionNotFoundError
from ..domain.models import (
    EditCommand,
    EditOutcome,
    ExplainResult,
    ExportBlock,
    ExportDay,
    ExportItinerary,
    Intent,
    IntentResult,
    Session,
    ToolCallTrace,
)
from ..nlp.schemas import PlanConstraintsPayload
from ..ports.sessions import SessionStorePort
from .constraint_resolver import ConstraintExtractor, ConstraintResolver
from .edit_service import EditApplier, EditInterpreter, day_fingerprint
from .evaluations import evaluate_edit_correctness, evaluate_feasibility, evaluate_grounding
from .explanation import ExplanationGenerator
from .intent_service import IntentClassifier
from .itinerary_builder import ItineraryBuilder
from .poi_search import POISearchService
from .tips import TipsService


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_text(value: Optional[str], field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidRequestError(f"'{field_name}' must not be empty", field_name=field_name)
    return text


@dataclass(frozen=True)
class PlanOutcome:
    """Result of a plan request."""

    session: Session
    intent: IntentResult
    model_constraints: Optional[PlanConstraintsPayload] = None


@dataclass(frozen=True)
class EditResult:
    """Result of an edit request."""

    session: Session
    intent: IntentResult
    command: EditCommand
    outcome: EditOutcome


@dataclass
class PlannerService:
    """Orchestrates the planning pipeline over a session store.

    Attributes:
        sessions: Session store
        classifier: Intent classifier
        extractor: Model-backed constraint extraction
        resolver: Constraint resolution and city validation
        poi_search: POI candidate search
        builder: Itinerary construction
        interpreter: Edit command interpretation
        applier: Edit application
        explainer: Explanation generation
        tips: Guide and weather tips
        config: Planner constants
    """

    sessions: SessionStorePort
    classifier: IntentClassifier
    extractor: ConstraintExtractor
    resolver: ConstraintResolver
    poi_search: POISearchService
    builder: ItineraryBuilder
    interpreter: EditInterpreter
    applier: EditApplier
    explainer: ExplanationGenerator
    tips: TipsService
    config: PlannerConfig = field(default_factory=lambda: get_config().planner)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def _trace(trace: List[ToolCallTrace], tool_name: str, input_summary: str, output_summary: str) -> None:
        trace.append(
            ToolCallTrace(
                tool_name=tool_name,
                input_summary=input_summary[:200],
                output_summary=output_summary[:200],
                timestamp_iso=_now_iso(),
            )
        )

    def _require_session(self, session_id: str) -> Session:
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session '{session_id}' not found", session_id=session_id)
        if session.itinerary is None:
            raise InvalidRequestError(
                f"Session '{session_id}' has no itinerary yet", field_name="session_id"
            )
        return session

    def plan(
        self,
        utterance: str,
        session_id: Optional[str] = None,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> PlanOutcome:
        """Build a new itinerary from a plan request.

        Args:
            utterance: The plan request.
            session_id: Existing session to replan into; a new one is
                created when None.
            defaults: Optional request-level constraint overrides.

        Returns:
            PlanOutcome with the saved session.

        Raises:
            InvalidRequestError: If the utterance is empty.
            CityResolutionError: If the city is missing or unknown.
        """
        text = _require_text(utterance, "utterance")
        existing = self.sessions.get(session_id) if session_id else None
        trace: List[ToolCallTrace] = []

        intent = self.classifier.resolve_for_endpoint(
            text, Intent.PLAN, existing is not None and existing.itinerary is not None
        )
        self._trace(trace, "intent", text, f"{intent.intent.value} ({intent.source}, {intent.confidence:.2f})")

        model_constraints = self.extractor.extract(text)
        self._trace(
            trace,
            "constraint_model",
            text,
            model_constraints.model_dump_json(exclude_none=True) if model_constraints else "unavailable",
        )

        constraints, city = self.resolver.resolve(text, model_constraints, defaults)
        self._trace(
            trace,
            "geocode",
            constraints.city,
            f"{city.location.latitude:.4f},{city.location.longitude:.4f}",
        )

        poi_result = self.poi_search.search(
            city.name,
            constraints.interests,
            constraints.pace,
            self.config.max_candidates,
            city.bounding_box,
        )
        if poi_result.fallback_used:
            constraints.notes.append(f"Using curated fallback places ({poi_result.fallback_reason})")
        self._trace(
            trace,
            "poi_search",
            f"{city.name} {','.join(constraints.interests)}",
            f"{len(poi_result.pois)} candidates, fallback={poi_result.fallback_used}",
        )

        catalog = {poi.id: poi for poi in poi_result.pois}
        build = self.builder.build(
            city.name,
            constraints.num_days,
            constraints.max_daily_hours,
            constraints.pace,
            [poi.id for poi in poi_result.pois],
            catalog,
            self.config.max_pois_per_day,
        )
        itinerary = build.itinerary
        self._trace(
            trace,
            "itinerary_builder",
            f"{constraints.num_days} days, {constraints.pace.value}",
            f"{len(itinerary.assigned_poi_ids)} POIs scheduled",
        )

        tips = self.tips.collect(constraints, city)
        self._trace(trace, "tips", constraints.city, f"{len(tips)} tips")

        now = _now_iso()
        sid = session_id or self.sessions.new_session_id()
        with self.sessions.lock(sid):
            session = Session(
                session_id=sid,
                constraints=constraints,
                city=city,
                poi_result=poi_result,
                poi_catalog=catalog,
                itinerary=itinerary,
                day_hashes={day.name: day_fingerprint(day) for day in itinerary.days},
                tips=tips,
                tool_trace=(existing.tool_trace if existing else []) + trace,
                created_at_iso=existing.created_at_iso if existing else now,
                updated_at_iso=now,
            )
            session.evals.feasibility = evaluate_feasibility(
                itinerary, constraints, self.config.feasibility_tolerance_hours
            )
            session.evals.grounding = evaluate_grounding(itinerary, catalog, tips)
            self.sessions.save(session)

        self._logger.info(
            "Plan created",
            extra={
                "session_id": sid,
                "city": constraints.city,
                "days": constraints.num_days,
                "fallback": poi_result.fallback_used,
            },
        )
        return PlanOutcome(session=session, intent=intent, model_constraints=model_constraints)

    def edit(self, session_id: str, utterance: str) -> EditResult:
        """Apply an edit request to a session's itinerary.

        Raises:
            InvalidRequestError: If the utterance is empty or the session
                has no itinerary.
            SessionNotFoundError: If the session does not exist.
        """
        text = _require_text(utterance, "utterance")
        self._require_session(session_id)

        with self.sessions.lock(session_id):
            session = self._require_session(session_id)
            itinerary = session.itinerary
            intent = self.classifier.resolve_for_endpoint(text, Intent.EDIT, True)
            self._trace(
                session.tool_trace, "intent", text, f"{intent.intent.value} ({intent.source}, {intent.confidence:.2f})"
            )

            command = self.interpreter.interpret(text)
            before = [day_fingerprint(day) for day in itinerary.days]
            outcome = self.applier.apply(session, command)
            self._trace(
                session.tool_trace,
                "edit",
                f"{command.action.value} day={command.scope.day_index} block={command.scope.block.value if command.scope.block else None}",
                f"changed days {list(outcome.changed_days)}",
            )

            session.evals.edit_correctness = evaluate_edit_correctness(before, itinerary, command, outcome)
            session.evals.feasibility = evaluate_feasibility(
                itinerary, session.constraints, self.config.feasibility_tolerance_hours
            )
            session.updated_at_iso = _now_iso()
            self.sessions.save(session)

        self._logger.info(
            "Edit applied to session",
            extra={
                "session_id": session_id,
                "action": command.action.value,
                "source": command.source,
                "noop": outcome.is_noop,
            },
        )
        return EditResult(session=session, intent=intent, command=command, outcome=outcome)

    def explain(self, session_id: str, question: str, poi_id: Optional[str] = None) -> ExplainResult:
        """Answer a question about a session's itinerary.

        Raises:
            InvalidRequestError: If the question is empty or the session
                has no itinerary.
            SessionNotFoundError: If the session does not exist.
        """
        text = _require_text(question, "question")
        self._require_session(session_id)

        with self.sessions.lock(session_id):
            session = self._require_session(session_id)
            intent = self.classifier.resolve_for_endpoint(text, Intent.EXPLAIN, True)
            self._trace(
                session.tool_trace, "intent", text, f"{intent.intent.value} ({intent.source}, {intent.confidence:.2f})"
            )

            result = self.explainer.explain(
                text, session.itinerary, session.constraints, session.poi_catalog, poi_id
            )
            self._trace(
                session.tool_trace,
                "explain",
                text,
                f"{result.mode} via {result.source}, {len(result.citations)} citations",
            )
            session.evals.grounding = evaluate_grounding(
                session.itinerary, session.poi_catalog, session.tips
            )
            session.updated_at_iso = _now_iso()
            self.sessions.save(session)

        return result

    def export(self, session_id: str) -> ExportItinerary:
        """Flatten a session's plan into the export shape.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        session = self._require_session(session_id)
        constraints = session.constraints
        itinerary = session.itinerary

        interests = " & ".join(interest.title() for interest in constraints.interests)
        title = f"{len(itinerary.days)}-Day {itinerary.city}"
        if interests:
            title += f": {interests}"
        title += f" ({constraints.pace.value.title()})"

        days = tuple(
            ExportDay(
                name=day.name,
                total_planned_hours=day.total_planned_hours,
                blocks=tuple(
                    ExportBlock(
                        time_of_day=block.time_of_day.value,
                        title=block.title,
                        duration_hours=block.duration_hours,
                        travel_minutes=block.travel_minutes,
                        notes=tuple(block.notes),
                    )
                    for block in day.blocks
                ),
            )
            for day in itinerary.days
        )
        notes = tuple(tip.claim for tip in session.tips) + tuple(itinerary.assumptions)
        return ExportItinerary(trip_title=title, days=days, notes=notes)
