"""Simple interactive launcher for the trip planner.

Each line typed is routed by the intent classifier to plan, edit or
explain, using the current session when one exists. Commands:
'export' prints the export view, 'new' forgets the session, 'quit' exits.
"""

from __future__ import annotations

import sys
from typing import Optional

from trip_planner.config import get_config
from trip_planner.container import get_container
from trip_planner.domain.errors import error_payload
from trip_planner.domain.models import Intent, Itinerary, Session
from trip_planner.logging_setup import configure_logging
from trip_planner.services import PlannerService


def print_itinerary(itinerary: Itinerary) -> None:
    print(f"\n=== {itinerary.city} ===")
    for day in itinerary.days:
        print(f"{day.name} ({day.total_planned_hours:g}h)")
        for block in day.blocks:
            travel = f", +{block.travel_minutes} min travel" if block.travel_from_prev else ""
            print(f"  {block.time_of_day.value:<9} {block.title} ({block.duration_hours:g}h{travel})")
            for note in block.notes:
                print(f"             - {note}")
    for assumption in itinerary.assumptions:
        print(f"* {assumption}")


def print_session(session: Session) -> None:
    if session.itinerary is not None:
        print_itinerary(session.itinerary)
    for tip in session.tips:
        print(f"Tip: {tip.claim}")


def handle(planner: PlannerService, session_id: Optional[str], line: str) -> Optional[str]:
    """Route one utterance; return the (possibly new) session id."""
    session = planner.sessions.get(session_id) if session_id else None
    has_itinerary = session is not None and session.itinerary is not None

    if line == "export":
        if session_id is None:
            print("Nothing to export yet.")
            return session_id
        export = planner.export(session_id)
        print(f"\n{export.trip_title}")
        for day in export.days:
            print(f"{day.name}: " + ", ".join(block.title for block in day.blocks))
        for note in export.notes:
            print(f"- {note}")
        return session_id

    intent = planner.classifier.classify(line, has_existing_itinerary=has_itinerary)
    print(f"[{intent.intent.value} {intent.confidence:.2f}] {intent.rationale}")

    if intent.intent is Intent.EDIT and has_itinerary:
        result = planner.edit(session_id, line)
        print(f"{result.command.action.value}: changed days {list(result.outcome.changed_days) or 'none'}")
        print_session(result.session)
        return session_id

    if intent.intent is Intent.EXPLAIN and has_itinerary:
        answer = planner.explain(session_id, line)
        print(answer.answer)
        for citation in answer.citations:
            print(f"  [{citation.source_type.value}] {citation.ref}")
        return session_id

    if intent.intent is Intent.UNKNOWN and has_itinerary:
        print("Try asking for a new trip or a change to the current plan.")
        return session_id

    outcome = planner.plan(line, session_id)
    print_session(outcome.session)
    return outcome.session.session_id


def run_line(planner: PlannerService, session_id: Optional[str], line: str, include_trace: bool = False) -> Optional[str]:
    """Handle one line, printing failures as structured error payloads."""
    try:
        return handle(planner, session_id, line)
    except Exception as e:
        payload = error_payload(e, include_trace=include_trace)
    print(f"{payload['code']}: {payload['message']}")
    if "details" in payload:
        print(payload["details"])
    return session_id


def main() -> None:
    config = get_config()
    configure_logging(config.observability)
    planner: PlannerService = get_container().resolve(PlannerService)

    print("=== Trip planner ===")
    print("Describe a trip, e.g. 'Plan a 3-day relaxed trip to Jaipur'.")
    session_id: Optional[str] = None

    while True:
        try:
            line = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not line:
            continue
        if line in {"quit", "exit"}:
            break
        if line == "new":
            session_id = None
            continue
        session_id = run_line(planner, session_id, line, include_trace=not config.is_production)

    sys.exit(0)


if __name__ == "__main__":
    main()
