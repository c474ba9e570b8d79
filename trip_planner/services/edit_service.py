"""Edit command interpretation and application.

An edit utterance becomes a typed EditCommand (model first, keyword rules
as fallback), which is then applied in place to the session itinerary.
Only blocks inside the command scope are ever touched; the outcome lists
exactly which days and blocks changed.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set, Tuple

from ..config import PlannerConfig, get_config
from ..domain.errors import LLMError, LLMOutputError
from ..domain.models import (
    HEURISTIC_METHOD,
    POI,
    Block,
    ChangedBlock,
    Day,
    EditAction,
    EditCommand,
    EditOutcome,
    Session,
    TimeOfDay,
    TravelEstimate,
)
from ..nlp.edit_rules import interpret_edit_deterministic
from ..nlp.llm_json import StructuredLLM
from ..nlp.schemas import EditCommandPayload
from .itinerary_builder import OTHER_GAP_MINUTES, TRAVEL_MODE, day_total_hours
from .poi_search import poi_category, rank_key

EDIT_PROMPT = """Convert the edit request into a command.
Allowed actions: SET_PACE, MAKE_MORE_RELAXED, REDUCE_TRAVEL, SWAP_TO_INDOOR, ADD_FOOD_PLACE.
Return JSON:
{{"action": "<ACTION>", "scope": {{"dayIndex": <1-based day or null>, "block": "morning|afternoon|evening|null"}}, "params": {{"pace": "relaxed|moderate|packed|null", "note": "<short note>"}}}}
Request: {utterance}"""

RELAX_NOTE = "More relaxed: visit shortened to leave extra rest time"
INDOOR_NOTE = "Indoor alternative: consider a museum or covered market if the weather turns"
FOOD_BLOCK_TITLE = "Local food stop"
FOOD_BLOCK_HOURS = 1.5
GENERIC_FOOD_NOTE = "Food suggestion: try a well-reviewed local restaurant nearby"


def day_fingerprint(day: Day) -> str:
    """Stable content hash of a day (names, blocks, durations, notes)."""
    payload = {
        "name": day.name,
        "total": day.total_planned_hours,
        "blocks": [
            {
                "time_of_day": block.time_of_day.value,
                "poi_id": block.poi_id,
                "title": block.title,
                "duration": block.duration_hours,
                "travel": (
                    [block.travel_from_prev.mode, block.travel_from_prev.minutes, block.travel_from_prev.method]
                    if block.travel_from_prev
                    else None
                ),
                "notes": list(block.notes),
            }
            for block in day.blocks
        ],
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


@dataclass
class EditInterpreter:
    """Turns an edit utterance into an EditCommand.

    Attributes:
        llm: Structured model access
    """

    llm: StructuredLLM

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def interpret(self, utterance: str) -> EditCommand:
        """Interpret an edit request.

        Args:
            utterance: The edit request.

        Returns:
            The model's command when valid, otherwise the keyword-rule
            command.
        """
        try:
            payload = self.llm.generate(
                EDIT_PROMPT.format(utterance=utterance.strip()),
                EditCommandPayload,
            )
            command = payload.to_command()
        except (LLMError, LLMOutputError) as e:
            self._logger.warning(
                "Edit model unavailable, using keyword rules",
                extra={"reason": e.code, "error": str(e)},
            )
            return interpret_edit_deterministic(utterance)

        self._logger.debug("Edit interpreted by model", extra={"action": command.action.value})
        return command


@dataclass
class EditApplier:
    """Applies edit commands to a session itinerary in place.

    Attributes:
        config: Planner constants (decrement, floor, travel threshold)
    """

    config: PlannerConfig = field(default_factory=lambda: get_config().planner)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _days_in_scope(self, days: List[Day], command: EditCommand) -> List[Tuple[int, Day]]:
        index = command.scope.day_index
        if index is None:
            return list(enumerate(days, start=1))
        if 1 <= index <= len(days):
            return [(index, days[index - 1])]
        return []

    @staticmethod
    def _blocks_in_scope(day: Day, command: EditCommand) -> Iterator[Block]:
        wanted = command.scope.block
        for block in day.blocks:
            if wanted is None or block.time_of_day is wanted:
                yield block

    def _food_suggestions(self, session: Session) -> Iterator[Optional[POI]]:
        itinerary = session.itinerary
        assigned = set(itinerary.assigned_poi_ids) if itinerary else set()
        food = sorted(
            (
                poi
                for poi in session.poi_catalog.values()
                if poi.id not in assigned and poi_category(poi) == "food"
            ),
            key=rank_key,
        )
        yield from food
        while True:
            yield None

    def apply(self, session: Session, command: EditCommand) -> EditOutcome:
        """Apply a command to the session's itinerary.

        Args:
            session: Session holding the itinerary (mutated in place).
            command: Command to apply.

        Returns:
            Changed day indexes (1-based) and changed blocks. An
            out-of-range day scope or a pace change without a target
            pace is a no-op.
        """
        itinerary = session.itinerary
        if itinerary is None:
            return EditOutcome()

        action = command.action

        if action is EditAction.SET_PACE:
            if command.params.pace is None:
                self._logger.info("Pace change without target pace ignored")
                return EditOutcome()
            session.constraints.pace = command.params.pace
            outcome = EditOutcome(changed_days=tuple(range(1, len(itinerary.days) + 1)))
            self._logger.info(
                "Pace updated",
                extra={"pace": command.params.pace.value, "changed_days": list(outcome.changed_days)},
            )
            return outcome

        targets = self._days_in_scope(itinerary.days, command)
        if not targets:
            self._logger.info(
                "Edit scope outside itinerary",
                extra={"day_index": command.scope.day_index, "days": len(itinerary.days)},
            )
            return EditOutcome()

        changed_days: List[int] = []
        changed_blocks: List[ChangedBlock] = []
        seen: Set[Tuple[int, TimeOfDay]] = set()

        def mark(day_index: int, block: Block) -> None:
            if day_index not in changed_days:
                changed_days.append(day_index)
            key = (day_index, block.time_of_day)
            if key not in seen:
                seen.add(key)
                changed_blocks.append(ChangedBlock(day_index=day_index, time_of_day=block.time_of_day))

        cfg = self.config
        food_pool = self._food_suggestions(session) if action is EditAction.ADD_FOOD_PLACE else None

        for day_index, day in targets:
            if action is EditAction.MAKE_MORE_RELAXED:
                for block in self._blocks_in_scope(day, command):
                    block.duration_hours = max(
                        cfg.min_block_hours,
                        round(block.duration_hours - cfg.relax_decrement_hours, 2),
                    )
                    block.notes.append(RELAX_NOTE)
                    mark(day_index, block)

            elif action is EditAction.REDUCE_TRAVEL:
                for block in self._blocks_in_scope(day, command):
                    minutes = block.travel_minutes
                    if minutes > cfg.travel_note_threshold_minutes:
                        block.notes.append(
                            f"Travel advisory: about {minutes} min from the previous stop; "
                            "consider a closer alternative or a taxi"
                        )
                        mark(day_index, block)

            elif action is EditAction.SWAP_TO_INDOOR:
                for block in self._blocks_in_scope(day, command):
                    block.notes.append(INDOOR_NOTE)
                    mark(day_index, block)

            elif action is EditAction.ADD_FOOD_PLACE:
                suggestion = next(food_pool)
                note = f"Food suggestion: {suggestion.name}" if suggestion else GENERIC_FOOD_NOTE
                evening = day.block_for(TimeOfDay.EVENING)
                if evening is None:
                    evening = Block(
                        time_of_day=TimeOfDay.EVENING,
                        poi_id=None,
                        title=FOOD_BLOCK_TITLE,
                        duration_hours=FOOD_BLOCK_HOURS,
                        travel_from_prev=TravelEstimate(
                            mode=TRAVEL_MODE, minutes=OTHER_GAP_MINUTES, method=HEURISTIC_METHOD
                        ),
                    )
                    day.blocks.append(evening)
                evening.notes.append(note)
                mark(day_index, evening)

            if day_index in changed_days:
                day.total_planned_hours = day_total_hours(day.blocks, cfg.day_overhead_hours)

        for day_index in changed_days:
            day = itinerary.days[day_index - 1]
            session.day_hashes[day.name] = day_fingerprint(day)

        outcome = EditOutcome(changed_days=tuple(changed_days), changed_blocks=tuple(changed_blocks))
        self._logger.info(
            "Edit applied",
            extra={
                "action": action.value,
                "changed_days": list(outcome.changed_days),
                "changed_blocks": len(outcome.changed_blocks),
            },
        )
        return outcome
