"""Domain models for the trip planner.

Value objects are frozen dataclasses with slots. The itinerary aggregate
(blocks, days, constraints, session) stays mutable because edits are
applied to it in place and then persisted back to the session store.
These models have no external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

OSM_SOURCE = "OpenStreetMap"
SEED_SOURCE = "Seed"

ROUTED_METHOD = "routed"
HEURISTIC_METHOD = "heuristic-bucket"


class Intent(Enum):
    """Top-level intent of a user utterance."""

    PLAN = "PLAN"
    EDIT = "EDIT"
    EXPLAIN = "EXPLAIN"
    UNKNOWN = "UNKNOWN"


class Pace(Enum):
    """Trip pace. Controls the number of slots per day."""

    RELAXED = "relaxed"
    NORMAL = "normal"
    PACKED = "packed"


class TimeOfDay(Enum):
    """Day slots, declared in chronological order."""

    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional[TimeOfDay]:
        """Parse a slot label case-insensitively.

        Args:
            label: A label such as "morning" or "Evening".

        Returns:
            The matching slot, or None if the label is unknown.
        """
        if not label:
            return None
        wanted = label.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


class EditAction(Enum):
    """Closed set of edit operations."""

    SET_PACE = "SET_PACE"
    MAKE_MORE_RELAXED = "MAKE_MORE_RELAXED"
    REDUCE_TRAVEL = "REDUCE_TRAVEL"
    SWAP_TO_INDOOR = "SWAP_TO_INDOOR"
    ADD_FOOD_PLACE = "ADD_FOOD_PLACE"


class SourceType(Enum):
    """Provenance of a citation."""

    OSM = "OSM"
    WIKIVOYAGE = "WIKIVOYAGE"
    WEATHER = "WEATHER"


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Rectangular search region in degrees."""

    south: float
    north: float
    west: float
    east: float

    def __post_init__(self) -> None:
        if self.south > self.north:
            raise ValueError(f"south {self.south} is above north {self.north}")
        if self.west > self.east:
            raise ValueError(f"west {self.west} is east of east {self.east}")

    def to_overpass(self) -> str:
        """Render as an Overpass QL bbox filter (south,west,north,east)."""
        return f"{self.south},{self.west},{self.north},{self.east}"


@dataclass(frozen=True, slots=True)
class City:
    """A city validated through geocoding.

    Attributes:
        name: Canonical city name (first segment of the display name)
        location: GPS coordinates of the city centre
        bounding_box: Geocoder-provided extent, used to scope POI search
        country: Country name or code
        display_name: Full display name returned by the geocoder
    """

    name: str
    location: GeoLocation
    bounding_box: Optional[BoundingBox] = None
    country: str = ""
    display_name: str = ""


@dataclass(slots=True)
class Constraints:
    """Resolved trip constraints held on the session.

    Attributes:
        city: Geocode-validated city name
        num_days: Number of days, always within the configured range
        pace: Trip pace, always present
        interests: Lowercased, deduplicated interest categories
        max_daily_hours: Daily hour budget
        notes: Free-form notes gathered during resolution
    """

    city: str
    num_days: int
    pace: Pace
    interests: List[str]
    max_daily_hours: float
    notes: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class POI:
    """A point of interest candidate.

    Attributes:
        id: Source-prefixed stable identifier (e.g. 'osm:node:123')
        name: Display name
        type: Derived category (museum, restaurant, ...)
        location: Coordinates, if known
        tags: Raw provider tags
        typical_duration_hours: Expected visit duration
        confidence: Ranking confidence in [0, 1]
        source: Provider tag ('OpenStreetMap' or 'Seed')
    """

    id: str
    name: str
    type: str
    location: Optional[GeoLocation] = None
    tags: Mapping[str, str] = field(default_factory=dict)
    typical_duration_hours: float = 1.0
    confidence: float = 0.5
    source: str = OSM_SOURCE

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Confidence must be between 0 and 1, got {self.confidence}"
            )

    @property
    def is_provider_sourced(self) -> bool:
        """Check if the POI came from the live provider."""
        return self.source == OSM_SOURCE


@dataclass(frozen=True, slots=True)
class TravelEstimate:
    """Estimated travel from the previous block."""

    mode: str
    minutes: int
    method: str


@dataclass(slots=True)
class Block:
    """One slot of a day.

    Attributes:
        time_of_day: Slot label
        poi_id: Assigned POI, or None for free time / synthesised blocks
        title: Display title
        duration_hours: Planned duration
        travel_from_prev: Travel estimate from the previous block
        notes: Ordered annotations
    """

    time_of_day: TimeOfDay
    poi_id: Optional[str]
    title: str
    duration_hours: float
    travel_from_prev: Optional[TravelEstimate] = None
    notes: List[str] = field(default_factory=list)

    @property
    def travel_minutes(self) -> int:
        """Return travel minutes, zero when no estimate is attached."""
        return self.travel_from_prev.minutes if self.travel_from_prev else 0


@dataclass(slots=True)
class Day:
    """A named day made of ordered blocks."""

    name: str
    blocks: List[Block]
    total_planned_hours: float = 0.0

    def block_for(self, time_of_day: TimeOfDay) -> Optional[Block]:
        """Return the block for a slot, if the day has one."""
        for block in self.blocks:
            if block.time_of_day is time_of_day:
                return block
        return None


@dataclass(slots=True)
class Itinerary:
    """Day-by-day plan for a city."""

    city: str
    days: List[Day]
    assumptions: List[str] = field(default_factory=list)
    unselected_poi_ids: List[str] = field(default_factory=list)

    @property
    def assigned_poi_ids(self) -> List[str]:
        """POI ids in day and slot order."""
        return [
            block.poi_id
            for day in self.days
            for block in day.blocks
            if block.poi_id is not None
        ]

    def find_placement(self, poi_id: str) -> Optional[Tuple[Day, Block]]:
        """Locate the day and block a POI is scheduled in."""
        for day in self.days:
            for block in day.blocks:
                if block.poi_id == poi_id:
                    return day, block
        return None


@dataclass(frozen=True, slots=True)
class Citation:
    """Source reference backing a claim."""

    source_type: SourceType
    ref: str
    snippet: str = ""


@dataclass(frozen=True, slots=True)
class Tip:
    """Practical tip attached to a plan.

    Attributes:
        id: Stable tip identifier
        claim: The advice sentence
        citations: Sources, non-empty unless is_general_advice
        confidence: Confidence in [0, 1]
        is_general_advice: True when the tip is not grounded in a source
    """

    id: str
    claim: str
    citations: Tuple[Citation, ...] = field(default_factory=tuple)
    confidence: float = 0.5
    is_general_advice: bool = False


@dataclass(frozen=True, slots=True)
class EvalFailure:
    """A single failed check."""

    code: str
    message: str


@dataclass(frozen=True, slots=True)
class EvalResult:
    """Outcome of an evaluation."""

    name: str
    passed: bool
    failures: Tuple[EvalFailure, ...] = field(default_factory=tuple)


@dataclass(slots=True)
class EvalBundle:
    """Latest evaluation results for a session."""

    feasibility: Optional[EvalResult] = None
    edit_correctness: Optional[EvalResult] = None
    grounding: Optional[EvalResult] = None


@dataclass(frozen=True, slots=True)
class ToolCallTrace:
    """Audit record of one component call."""

    tool_name: str
    input_summary: str
    output_summary: str
    timestamp_iso: str


@dataclass(frozen=True, slots=True)
class POISearchResult:
    """Ranked POI candidates for a city.

    Attributes:
        city: City the search ran for
        pois: Ranked, deduplicated candidates
        fallback_used: True when the static seed set was returned
        fallback_reason: Reason code when fallback_used
    """

    city: str
    pois: Tuple[POI, ...]
    fallback_used: bool = False
    fallback_reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Output of itinerary construction."""

    itinerary: Itinerary
    unselected_poi_ids: Tuple[str, ...] = field(default_factory=tuple)
    assumptions: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class IntentResult:
    """Classified intent with provenance.

    Attributes:
        intent: Final intent
        confidence: Confidence in [0, 1]
        rationale: Short human-readable reason
        source: 'keyword', 'model', 'fallback' or 'coerced'
        original: Intent before coercion, when coerced
    """

    intent: Intent
    confidence: float
    rationale: str
    source: str = "keyword"
    original: Optional[Intent] = None


@dataclass(frozen=True, slots=True)
class EditScope:
    """Target of an edit. None means 'all'."""

    day_index: Optional[int] = None
    block: Optional[TimeOfDay] = None


@dataclass(frozen=True, slots=True)
class EditParams:
    """Optional edit parameters."""

    pace: Optional[Pace] = None
    note: Optional[str] = None


@dataclass(frozen=True, slots=True)
class EditCommand:
    """Typed edit command."""

    action: EditAction
    scope: EditScope = field(default_factory=EditScope)
    params: EditParams = field(default_factory=EditParams)
    source: str = "fallback"


@dataclass(frozen=True, slots=True)
class ChangedBlock:
    """Reference to a mutated block (1-based day index)."""

    day_index: int
    time_of_day: TimeOfDay


@dataclass(frozen=True, slots=True)
class EditOutcome:
    """Days and blocks touched by an edit."""

    changed_days: Tuple[int, ...] = field(default_factory=tuple)
    changed_blocks: Tuple[ChangedBlock, ...] = field(default_factory=tuple)

    @property
    def is_noop(self) -> bool:
        """Check if nothing changed."""
        return not self.changed_days and not self.changed_blocks


@dataclass(frozen=True, slots=True)
class ExplainResult:
    """Grounded answer to a question about the plan.

    Attributes:
        answer: Answer text
        citations: Supporting citations
        mode: 'poi' or 'itinerary'
        poi_id: Target POI in poi mode
        source: 'model' or 'template'
    """

    answer: str
    citations: Tuple[Citation, ...] = field(default_factory=tuple)
    mode: str = "itinerary"
    poi_id: Optional[str] = None
    source: str = "template"


@dataclass(frozen=True, slots=True)
class RouteEstimate:
    """Routed travel between two points."""

    duration_minutes: int
    distance_km: float


@dataclass(frozen=True, slots=True)
class WeatherForecast:
    """Daily forecast series."""

    max_temperatures: Tuple[float, ...]
    precipitation_probabilities: Tuple[float, ...]

    @property
    def average_max_temperature(self) -> Optional[float]:
        if not self.max_temperatures:
            return None
        return sum(self.max_temperatures) / len(self.max_temperatures)

    @property
    def average_precipitation_probability(self) -> Optional[float]:
        if not self.precipitation_probabilities:
            return None
        return sum(self.precipitation_probabilities) / len(
            self.precipitation_probabilities
        )


@dataclass(slots=True)
class Session:
    """Aggregate root for one planning conversation.

    Attributes:
        session_id: Opaque identifier
        constraints: Resolved constraints
        city: Geocoded city
        poi_result: Latest POI search result
        poi_catalog: All known POIs by id
        itinerary: Current itinerary
        day_hashes: Fingerprint of each day, keyed by day name
        tips: Enrichment tips
        evals: Latest evaluation results
        tool_trace: Ordered audit trail
        created_at_iso: Creation timestamp
        updated_at_iso: Last update timestamp
    """

    session_id: str
    constraints: Constraints
    city: Optional[City] = None
    poi_result: Optional[POISearchResult] = None
    poi_catalog: Dict[str, POI] = field(default_factory=dict)
    itinerary: Optional[Itinerary] = None
    day_hashes: Dict[str, str] = field(default_factory=dict)
    tips: List[Tip] = field(default_factory=list)
    evals: EvalBundle = field(default_factory=EvalBundle)
    tool_trace: List[ToolCallTrace] = field(default_factory=list)
    created_at_iso: str = ""
    updated_at_iso: str = ""


@dataclass(frozen=True, slots=True)
class ExportBlock:
    """Flattened block for export."""

    time_of_day: str
    title: str
    duration_hours: float
    travel_minutes: int
    notes: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ExportDay:
    """Flattened day for export."""

    name: str
    total_planned_hours: float
    blocks: Tuple[ExportBlock, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ExportItinerary:
    """Stable export shape of a session's plan."""

    trip_title: str
    days: Tuple[ExportDay, ...]
    notes: Tuple[str, ...] = field(default_factory=tuple)
