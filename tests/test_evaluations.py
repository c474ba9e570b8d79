"""Tests for the plan evaluations."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from trip_planner.config import PlannerConfig, POIConfig
from trip_planner.domain.models import (
    Block,
    ChangedBlock,
    Citation,
    Constraints,
    Day,
    EditAction,
    EditCommand,
    EditOutcome,
    EditParams,
    EditScope,
    Itinerary,
    Pace,
    SourceType,
    TimeOfDay,
    Tip,
)
from trip_planner.services.edit_service import day_fingerprint
from trip_planner.services.evaluations import (
    evaluate_edit_correctness,
    evaluate_feasibility,
    evaluate_grounding,
)
from trip_planner.services.itinerary_builder import ItineraryBuilder
from trip_planner.services.poi_search import load_seed_pois, rank_and_dedupe


@pytest.fixture
def catalog():
    return {poi.id: poi for poi in rank_and_dedupe(load_seed_pois(POIConfig().seed_file))}


@pytest.fixture
def itinerary(catalog):
    return ItineraryBuilder(None, PlannerConfig()).build(
        "Jaipur", 3, 6.0, Pace.RELAXED, list(catalog), catalog, 3
    ).itinerary


def constraints(limit=6.0):
    return Constraints(city="Jaipur", num_days=3, pace=Pace.RELAXED, interests=["culture"], max_daily_hours=limit)


def codes(result):
    return [f.code for f in result.failures]


class TestFeasibility:
    def test_built_plan_is_feasible(self, itinerary):
        result = evaluate_feasibility(itinerary, constraints())
        assert result.passed
        assert result.name == "feasibility"

    def test_over_budget_day_fails(self, itinerary):
        # days 1 and 2 plan 6.17h and 5.17h
        result = evaluate_feasibility(itinerary, constraints(limit=4.5))
        assert not result.passed
        assert codes(result) == ["DAY_OVER_BUDGET", "DAY_OVER_BUDGET"]

    def test_tolerance_absorbs_small_overrun(self, itinerary):
        assert evaluate_feasibility(itinerary, constraints(limit=5.7)).passed

    def test_reused_poi_fails(self):
        block = Block(time_of_day=TimeOfDay.MORNING, poi_id="seed:1", title="Amber Fort", duration_hours=1.0)
        other = Block(time_of_day=TimeOfDay.MORNING, poi_id="seed:1", title="Amber Fort", duration_hours=1.0)
        itinerary = Itinerary(
            city="Jaipur",
            days=[
                Day(name="Day 1", blocks=[block], total_planned_hours=2.0),
                Day(name="Day 2", blocks=[other], total_planned_hours=2.0),
            ],
        )
        assert codes(evaluate_feasibility(itinerary, constraints())) == ["POI_REUSED"]


class TestGrounding:
    def test_plan_with_cited_tips_passes(self, itinerary, catalog):
        tips = [
            Tip(id="tip_wv_1", claim="x", citations=(Citation(SourceType.WIKIVOYAGE, "Jaipur#Eat"),)),
            Tip(id="tip_wv_2", claim="y", is_general_advice=True),
        ]
        assert evaluate_grounding(itinerary, catalog, tips).passed

    def test_unknown_poi_and_uncited_tip(self, itinerary, catalog):
        del catalog["seed:4"]
        tips = [Tip(id="tip_weather_1", claim="hot")]
        result = evaluate_grounding(itinerary, catalog, tips)
        assert codes(result) == ["UNKNOWN_POI", "UNCITED_TIP"]


def edit(action, day=None, block=None):
    return EditCommand(action=action, scope=EditScope(day_index=day, block=block), params=EditParams())


class TestEditCorrectness:
    def test_unchanged_plan_passes(self, itinerary):
        before = [day_fingerprint(d) for d in itinerary.days]
        result = evaluate_edit_correctness(before, itinerary, edit(EditAction.REDUCE_TRAVEL, day=1), EditOutcome())
        assert result.passed

    def test_unreported_change(self, itinerary):
        before = [day_fingerprint(d) for d in itinerary.days]
        itinerary.days[1].blocks[0].notes.append("sneaky")
        result = evaluate_edit_correctness(before, itinerary, edit(EditAction.SWAP_TO_INDOOR), EditOutcome())
        assert codes(result) == ["UNREPORTED_CHANGE"]

    def test_out_of_scope_day(self, itinerary):
        before = [day_fingerprint(d) for d in itinerary.days]
        itinerary.days[0].blocks[0].notes.append("x")
        outcome = EditOutcome(changed_days=(1,), changed_blocks=(ChangedBlock(1, TimeOfDay.MORNING),))
        result = evaluate_edit_correctness(before, itinerary, edit(EditAction.SWAP_TO_INDOOR, day=2), outcome)
        assert codes(result) == ["OUT_OF_SCOPE_DAY"]

    def test_set_pace_may_touch_every_day(self, itinerary):
        before = [day_fingerprint(d) for d in itinerary.days]
        outcome = EditOutcome(changed_days=(1, 2, 3))
        assert evaluate_edit_correctness(before, itinerary, edit(EditAction.SET_PACE, day=2), outcome).passed

    def test_out_of_scope_block(self, itinerary):
        before = [day_fingerprint(d) for d in itinerary.days]
        outcome = EditOutcome(changed_days=(1,), changed_blocks=(ChangedBlock(1, TimeOfDay.EVENING),))
        command = edit(EditAction.MAKE_MORE_RELAXED, day=1, block=TimeOfDay.MORNING)
        assert codes(evaluate_edit_correctness(before, itinerary, command, outcome)) == ["OUT_OF_SCOPE_BLOCK"]

    def test_add_food_ignores_block_filter(self, itinerary):
        before = [day_fingerprint(d) for d in itinerary.days]
        outcome = EditOutcome(changed_days=(1,), changed_blocks=(ChangedBlock(1, TimeOfDay.EVENING),))
        command = edit(EditAction.ADD_FOOD_PLACE, day=1, block=TimeOfDay.MORNING)
        assert evaluate_edit_correctness(before, itinerary, command, outcome).passed

    def test_day_count_change(self, itinerary):
        before = [day_fingerprint(d) for d in itinerary.days]
        itinerary.days.pop()
        result = evaluate_edit_correctness(before, itinerary, edit(EditAction.SWAP_TO_INDOOR), EditOutcome())
        assert "DAY_COUNT_CHANGED" in codes(result)
