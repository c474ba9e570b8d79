"""Plan evaluations: feasibility, grounding and edit correctness.

Each check returns an EvalResult listing every failure found; an empty
failure list means the check passed.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence

from ..domain.models import (
    POI,
    Constraints,
    EditAction,
    EditCommand,
    EditOutcome,
    EvalFailure,
    EvalResult,
    Itinerary,
    Tip,
)
from .edit_service import day_fingerprint


def _result(name: str, failures: List[EvalFailure]) -> EvalResult:
    return EvalResult(name=name, passed=not failures, failures=tuple(failures))


def evaluate_feasibility(
    itinerary: Itinerary, constraints: Constraints, tolerance_hours: float = 0.5
) -> EvalResult:
    """Check daily hours against the budget and POI uniqueness."""
    failures: List[EvalFailure] = []
    limit = constraints.max_daily_hours + tolerance_hours

    for day in itinerary.days:
        if day.total_planned_hours > limit:
            failures.append(
                EvalFailure(
                    code="DAY_OVER_BUDGET",
                    message=f"{day.name} plans {day.total_planned_hours:g}h, limit is {constraints.max_daily_hours:g}h",
                )
            )

    seen = set()
    for poi_id in itinerary.assigned_poi_ids:
        if poi_id in seen:
            failures.append(EvalFailure(code="POI_REUSED", message=f"{poi_id} is scheduled more than once"))
        seen.add(poi_id)

    return _result("feasibility", failures)


def evaluate_grounding(
    itinerary: Itinerary, poi_catalog: Mapping[str, POI], tips: Iterable[Tip]
) -> EvalResult:
    """Check every scheduled POI is known and every specific tip is cited."""
    failures: List[EvalFailure] = []
    for poi_id in itinerary.assigned_poi_ids:
        if poi_id not in poi_catalog:
            failures.append(EvalFailure(code="UNKNOWN_POI", message=f"{poi_id} is not in the POI catalog"))
    for tip in tips:
        if not tip.is_general_advice and not tip.citations:
            failures.append(EvalFailure(code="UNCITED_TIP", message=f"{tip.id} has no citation"))
    return _result("grounding", failures)


def evaluate_edit_correctness(
    before_hashes: Sequence[str],
    after: Itinerary,
    command: EditCommand,
    outcome: EditOutcome,
) -> EvalResult:
    """Verify an edit stayed inside its scope.

    Args:
        before_hashes: Day fingerprints taken before the edit, in day order.
        after: The itinerary after the edit.
        command: The applied command.
        outcome: What the applier reported as changed.

    Returns:
        Failures for changes outside the scope, unreported changes and
        blocks changed outside the block filter.
    """
    failures: List[EvalFailure] = []
    after_hashes = [day_fingerprint(day) for day in after.days]
    is_global = command.action is EditAction.SET_PACE
    scope_day = command.scope.day_index

    if len(before_hashes) != len(after_hashes):
        failures.append(EvalFailure(code="DAY_COUNT_CHANGED", message="Edit changed the number of days"))

    for index, (before, current) in enumerate(zip(before_hashes, after_hashes), start=1):
        if before != current and index not in outcome.changed_days:
            failures.append(
                EvalFailure(code="UNREPORTED_CHANGE", message=f"Day {index} changed but was not reported")
            )

    if not is_global and scope_day is not None:
        for index in outcome.changed_days:
            if index != scope_day:
                failures.append(
                    EvalFailure(code="OUT_OF_SCOPE_DAY", message=f"Day {index} changed outside scope day {scope_day}")
                )

    block_filter = command.scope.block
    if block_filter is not None and command.action is not EditAction.ADD_FOOD_PLACE:
        for changed in outcome.changed_blocks:
            if changed.time_of_day is not block_filter:
                failures.append(
                    EvalFailure(
                        code="OUT_OF_SCOPE_BLOCK",
                        message=f"{changed.time_of_day.value} on day {changed.day_index} changed outside {block_filter.value}",
                    )
                )

    return _result("edit_correctness", failures)
