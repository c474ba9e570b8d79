"""Itinerary construction engine.

Fills a pace-dependent slot template day by day from ranked candidates:
culture-like POIs for Morning/Afternoon, food-like POIs for Evening, no
POI used twice across the whole trip. Travel between consecutive POIs
comes from the routing port when it answers, otherwise from fixed
heuristic buckets. No randomness: the same inputs always produce the
same itinerary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from ..config import PlannerConfig, get_config
from ..domain.models import (
    HEURISTIC_METHOD,
    POI,
    ROUTED_METHOD,
    Block,
    BuildResult,
    Day,
    Itinerary,
    Pace,
    TimeOfDay,
    TravelEstimate,
)
from ..ports.providers import RoutingPort
from .poi_search import poi_category, rank_key

SLOT_TEMPLATES: Dict[Pace, Sequence[TimeOfDay]] = {
    Pace.RELAXED: (TimeOfDay.MORNING, TimeOfDay.EVENING),
    Pace.NORMAL: (TimeOfDay.MORNING, TimeOfDay.AFTERNOON, TimeOfDay.EVENING),
    Pace.PACKED: (TimeOfDay.MORNING, TimeOfDay.AFTERNOON, TimeOfDay.EVENING),
}

FIRST_GAP_MINUTES = 15
OTHER_GAP_MINUTES = 25
TRAVEL_MODE = "mixed"
DEFAULT_BLOCK_HOURS = 1.5
FREE_EVENING_HOURS = 2.0
FREE_TIME_TITLE = "Free time / Rest"
FREE_TIME_NOTE = "Rest and relaxation"


def day_total_hours(blocks: Iterable[Block], overhead_hours: float) -> float:
    """Durations plus travel plus the fixed daily overhead, in hours."""
    blocks = list(blocks)
    duration = sum(block.duration_hours for block in blocks)
    travel = sum(block.travel_minutes for block in blocks) / 60
    return round(duration + travel + overhead_hours, 2)


def _next_unused(pool: Sequence[POI], used: Set[str]) -> Optional[POI]:
    for poi in pool:
        if poi.id not in used:
            return poi
    return None


@dataclass
class ItineraryBuilder:
    """Builds day-by-day itineraries from ranked candidates.

    Attributes:
        routing: Optional routing port for travel estimates
        config: Planner constants (overhead)
    """

    routing: Optional[RoutingPort] = None
    config: PlannerConfig = field(default_factory=lambda: get_config().planner)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _travel(self, previous: Optional[POI], current: Optional[POI], first: bool) -> TravelEstimate:
        if (
            self.routing is not None
            and previous is not None
            and current is not None
            and previous.location is not None
            and current.location is not None
        ):
            route = self.routing.route(previous.location, current.location)
            if route is not None:
                return TravelEstimate(
                    mode=TRAVEL_MODE, minutes=route.duration_minutes, method=ROUTED_METHOD
                )
        minutes = FIRST_GAP_MINUTES if first else OTHER_GAP_MINUTES
        return TravelEstimate(mode=TRAVEL_MODE, minutes=minutes, method=HEURISTIC_METHOD)

    def build(
        self,
        city: str,
        days: int,
        daily_hour_limit: float,
        pace: Pace,
        candidate_ids: Sequence[str],
        poi_catalog: Mapping[str, POI],
        max_pois_per_day: int,
    ) -> BuildResult:
        """Build an itinerary.

        Args:
            city: City name.
            days: Number of days.
            daily_hour_limit: Daily hour budget (reported, not enforced).
            pace: Trip pace, selects the slot template.
            candidate_ids: Candidate POI ids; unknown ids are ignored.
            poi_catalog: POIs by id.
            max_pois_per_day: Maximum POIs assigned per day.

        Returns:
            BuildResult with the itinerary, unselected ids (candidate
            order) and assumptions.
        """
        seen: Set[str] = set()
        candidates: List[POI] = []
        for poi_id in candidate_ids:
            poi = poi_catalog.get(poi_id)
            if poi is not None and poi_id not in seen:
                seen.add(poi_id)
                candidates.append(poi)
        candidates.sort(key=rank_key)

        culture = [poi for poi in candidates if poi_category(poi) == "culture"]
        food = [poi for poi in candidates if poi_category(poi) == "food"]
        slots = SLOT_TEMPLATES[pace]
        used: Set[str] = set()

        day_list: List[Day] = []
        for day_number in range(1, days + 1):
            blocks: List[Block] = []
            assigned = 0
            previous: Optional[POI] = None

            for position, time_of_day in enumerate(slots):
                poi: Optional[POI] = None
                if assigned < max_pois_per_day:
                    if time_of_day is TimeOfDay.EVENING:
                        poi = _next_unused(food, used)
                    else:
                        poi = _next_unused(culture, used) or _next_unused(candidates, used)

                travel = self._travel(previous, poi, first=position == 0)

                if poi is not None:
                    used.add(poi.id)
                    assigned += 1
                    previous = poi
                    blocks.append(
                        Block(
                            time_of_day=time_of_day,
                            poi_id=poi.id,
                            title=poi.name,
                            duration_hours=poi.typical_duration_hours,
                            travel_from_prev=travel,
                            notes=[f"{poi.name} - {poi.type}"],
                        )
                    )
                elif time_of_day is TimeOfDay.EVENING:
                    blocks.append(
                        Block(
                            time_of_day=time_of_day,
                            poi_id=None,
                            title=FREE_TIME_TITLE,
                            duration_hours=FREE_EVENING_HOURS,
                            travel_from_prev=travel,
                            notes=[FREE_TIME_NOTE],
                        )
                    )
                else:
                    blocks.append(
                        Block(
                            time_of_day=time_of_day,
                            poi_id=None,
                            title=f"{time_of_day.value} activity",
                            duration_hours=DEFAULT_BLOCK_HOURS,
                            travel_from_prev=travel,
                            notes=[FREE_TIME_NOTE],
                        )
                    )

            day_list.append(
                Day(
                    name=f"Day {day_number}",
                    blocks=blocks,
                    total_planned_hours=day_total_hours(blocks, self.config.day_overhead_hours),
                )
            )

        unselected = tuple(poi.id for poi in candidates if poi.id not in used)
        assumptions = (
            "Travel times use routed estimates where available, otherwise fixed heuristic buckets",
            f"POIs selected based on interests at a {pace.value} pace",
            f"{days} day(s) with max {daily_hour_limit:g} hours per day",
        )

        itinerary = Itinerary(
            city=city,
            days=day_list,
            assumptions=list(assumptions),
            unselected_poi_ids=list(unselected),
        )
        self._logger.info(
            "Itinerary built",
            extra={
                "city": city,
                "days": days,
                "assigned": len(used),
                "unselected": len(unselected),
            },
        )
        return BuildResult(itinerary=itinerary, unselected_poi_ids=unselected, assumptions=assumptions)
