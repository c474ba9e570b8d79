"""Deterministic edit command interpretation.

Used whenever the model-backed interpreter is unavailable or returns an
invalid command.
"""

from __future__ import annotations

from typing import List, Optional

from ..domain.models import EditAction, EditCommand, EditParams, EditScope, Pace
from .extractors import extract_day_reference, extract_time_of_day
from .rules import Rule, first_match, rule

EDIT_ACTION_RULES: List[Rule[EditAction]] = [
    rule(r"\b(?:pace|speed)\b", EditAction.SET_PACE, "pace"),
    rule(r"\b(?:relax(?:ed|ing)?|slow(?:er)?|calm(?:er)?|lighter|less rushed)\b", EditAction.MAKE_MORE_RELAXED, "relax"),
    rule(r"\b(?:reduce|shorten|minimi[sz]e)\b|\bless\b.*\btravel", EditAction.REDUCE_TRAVEL, "travel"),
    rule(r"\b(?:indoors?|rain(?:y|ing)?|weather|inside)\b", EditAction.SWAP_TO_INDOOR, "indoor"),
    rule(r"\b(?:food|eat|restaurants?|dinner|lunch|snack)\b", EditAction.ADD_FOOD_PLACE, "food"),
    rule(r"\b(?:fast(?:er)?|packed|busy)\b", EditAction.SET_PACE, "faster"),
]

_PACE_WORD_RULES: List[Rule[Pace]] = [
    rule(r"\b(?:relax(?:ed|ing)?|slow|easy|calm)\b", Pace.RELAXED),
    rule(r"\b(?:packed|busy|fast(?:er)?|intense)\b", Pace.PACKED),
    rule(r"\b(?:normal|moderate|regular|balanced)\b", Pace.NORMAL),
]


def _extract_pace_param(text: str) -> Optional[Pace]:
    hit = first_match(_PACE_WORD_RULES, text)
    return hit[0].result if hit else None


def interpret_edit_deterministic(utterance: str) -> EditCommand:
    """Interpret an edit utterance with keyword rules.

    Action defaults to SET_PACE when no rule matches; scope is taken from
    day references ('day 2', 'day two') and slot keywords.

    Args:
        utterance: The edit request.

    Returns:
        A typed edit command.
    """
    text = utterance or ""
    hit = first_match(EDIT_ACTION_RULES, text)
    action = hit[0].result if hit else EditAction.SET_PACE

    scope = EditScope(
        day_index=extract_day_reference(text),
        block=extract_time_of_day(text),
    )
    pace = _extract_pace_param(text) if action is EditAction.SET_PACE else None
    note = text.strip()[:200] or None

    return EditCommand(
        action=action,
        scope=scope,
        params=EditParams(pace=pace, note=note),
        source="fallback",
    )
