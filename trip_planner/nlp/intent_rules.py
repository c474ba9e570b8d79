"""Keyword tables for intent detection.

Two tables, both ordered EXPLAIN > EDIT > PLAN:

- ``PREFILTER_RULES``: narrow vocabulary; a hit is trusted enough to
  skip the model call.
- ``RECOVERY_RULES``: broader vocabulary used only when the model call
  failed.

EDIT rules are ignored when there is no itinerary to edit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..domain.models import Intent
from .rules import Rule, first_match, rule


@dataclass(frozen=True)
class IntentHit:
    """A keyword-table decision."""

    intent: Intent
    confidence: float
    label: str


PREFILTER_RULES: List[Rule[IntentHit]] = [
    rule(
        r"\b(?:why|explain|reason|doable|feasible|what if)\b",
        IntentHit(Intent.EXPLAIN, 0.9, "explain"),
    ),
    rule(
        r"\b(?:change|swap|make|add|remove|move|replace|more relaxed|reduce travel|stay in (?:the )?hotel)\b",
        IntentHit(Intent.EDIT, 0.9, "edit"),
    ),
    rule(
        r"\b(?:plan|itinerary|trip|days?|travel|vacation|explore)\b",
        IntentHit(Intent.PLAN, 0.9, "plan"),
    ),
    rule(
        r"\b(?:stocks?|sports?|news|politics|recipe|bitcoin|crypto|weather today)\b",
        IntentHit(Intent.UNKNOWN, 0.85, "out of scope"),
    ),
]

RECOVERY_RULES: List[Rule[IntentHit]] = [
    rule(
        r"\b(?:why|explain|how|feasible|doable|possible|rain)\b",
        IntentHit(Intent.EXPLAIN, 0.6, "explain"),
    ),
    rule(
        r"\b(?:change|swap|add|remove|edit|modify|replace|shorten|slower|faster|indoor)\b",
        IntentHit(Intent.EDIT, 0.75, "edit"),
    ),
    rule(
        r"\b(?:plan|create|build|show|itinerary|suggest|trip|travel|days?|vacation|explore|visit)\b",
        IntentHit(Intent.PLAN, 0.8, "plan"),
    ),
]


def match_intent(
    text: str, rules: List[Rule[IntentHit]], has_existing_itinerary: bool
) -> Optional[IntentHit]:
    """Run an intent table against an utterance.

    Args:
        text: The utterance.
        rules: PREFILTER_RULES or RECOVERY_RULES.
        has_existing_itinerary: Whether EDIT rules are eligible.

    Returns:
        The first matching decision, or None.
    """
    eligible = [
        r for r in rules if has_existing_itinerary or r.result.intent is not Intent.EDIT
    ]
    hit = first_match(eligible, text)
    return hit[0].result if hit else None
