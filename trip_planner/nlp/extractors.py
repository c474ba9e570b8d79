"""Deterministic extractors for travel utterances.

Pure functions: no I/O, no hidden state, never raise. Absence is
reported as None (or an empty list) so callers can fall back to their
own defaults.

Example
-------
    >>> extract_city("Plan a 3-day trip to Jaipur next week focused on food")
    'Jaipur'
    >>> extract_num_days("two days in Udaipur")
    2
    >>> extract_interests("culture and food please")
    ['culture', 'food']
"""

from __future__ import annotations

import re
from typing import List, Optional, Union

from ..domain.models import Pace, TimeOfDay
from .rules import Rule, all_results, first_match, rule

MIN_DAYS = 2
MAX_DAYS = 5
DEFAULT_DAYS = 3

NUMBER_WORDS = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
}

ORDINAL_WORDS = {"first": 1, "second": 2, "third": 3, "fourth": 4, "fifth": 5}

# Words that follow a city name and end it
_CITY_END = (
    r"(?=\s+(?:for|next|this|focused|focusing|with|on|and|in|during|over|from)\b"
    r"|\s*[,;!?]|\s*\.(?:\s|$)|\s*$)"
)
# Words after to/in/at that are never a city
_NOT_A_CITY = (
    r"(?!(?:visit|explore|see|go|travel|plan|make|do|relax|eat|the|a|an|my|our"
    r"|culture|food|history|museums?|restaurants?|focus(?:ed|ing)?|for|with"
    r"|january|february|march|april|may|june|july|august|september|october"
    r"|november|december|summer|winter|spring|autumn)\b)"
)

CITY_RULES: List[Rule[str]] = [
    rule(rf"\b(?:to|in|at)\s+{_NOT_A_CITY}([A-Za-z][A-Za-z\s.'-]*?){_CITY_END}", "to/in/at"),
    rule(rf"\btrip\s+(?:to\s+)?{_NOT_A_CITY}([A-Za-z][A-Za-z\s.'-]*?){_CITY_END}", "trip"),
    rule(rf"\b(?:visit|explore|see)\s+{_NOT_A_CITY}([A-Za-z][A-Za-z\s.'-]*?){_CITY_END}", "visit"),
    rule(r"\bto\s+([A-Za-z]{2,40})\b", "bare-to"),
]

PACE_RULES: List[Rule[str]] = [
    rule(r"\b(?:relax(?:ed|ing)?|easy|leisurely|laid[- ]back)\b", "relaxed"),
    rule(r"\b(?:packed|busy|intense|action[- ]packed)\b", "packed"),
]

INTEREST_RULES: List[Rule[str]] = [
    rule(r"\b(?:culture|cultural|history|historic(?:al)?|monuments?|museums?|heritage|forts?|palaces?)\b", "culture"),
    rule(r"\b(?:food|foodie|eat|eating|restaurants?|cuisine|street food)\b", "food"),
]

TIME_OF_DAY_RULES: List[Rule[TimeOfDay]] = [
    rule(r"\bmornings?\b", TimeOfDay.MORNING),
    rule(r"\bafternoons?\b", TimeOfDay.AFTERNOON),
    rule(r"\b(?:evenings?|night|tonight)\b", TimeOfDay.EVENING),
]

_NUMBER = r"\b(\d+|" + "|".join(NUMBER_WORDS) + r")"
_DAYS_PATTERN = re.compile(_NUMBER + r"\s*-?\s*days?\b", re.IGNORECASE)
_DAY_REF_PATTERN = re.compile(
    r"\bday\s*-?\s*(\d{1,2}|one|two|three|four|five)\b", re.IGNORECASE
)
_ORDINAL_DAY_PATTERN = re.compile(
    r"\b(" + "|".join(ORDINAL_WORDS) + r")\s+day\b", re.IGNORECASE
)

_MAX_CITY_WORDS = 4


def _parse_number(token: str) -> Optional[int]:
    token = token.lower()
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS.get(token)


def _clean_city(raw: str) -> str:
    cleaned = re.sub(r"[\"'`]", "", raw)
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned.strip(" .-")


def extract_city(text: str) -> Optional[str]:
    """Extract a destination city mention.

    Rules are tried in order (to/in/at, trip [to], visit/explore, bare
    'to <Word>'); the first plausible capture wins.

    Args:
        text: The utterance.

    Returns:
        The cleaned city string, or None.
    """
    if not text or not text.strip():
        return None
    for city_rule in CITY_RULES:
        for match in city_rule.pattern.finditer(text):
            candidate = _clean_city(match.group(1))
            if 2 <= len(candidate) <= 40 and len(candidate.split()) <= _MAX_CITY_WORDS:
                return candidate
    return None


def extract_pace(text: str) -> str:
    """Extract a raw pace word.

    Returns 'relaxed' or 'packed' on a keyword hit and 'moderate'
    otherwise; 'moderate' is a default, not an absence.
    """
    hit = first_match(PACE_RULES, text or "")
    return hit[0].result if hit else "moderate"


def normalize_pace(value: Union[str, Pace, None]) -> Pace:
    """Map a raw pace value onto the canonical enumeration.

    'moderate' and 'normal' both map to NORMAL; unknown values too.
    """
    if isinstance(value, Pace):
        return value
    if not value:
        return Pace.NORMAL
    lowered = value.strip().lower()
    if lowered in ("relaxed", "relax", "easy", "slow"):
        return Pace.RELAXED
    if lowered in ("packed", "busy", "fast"):
        return Pace.PACKED
    return Pace.NORMAL


def clamp_days(
    value: int,
    min_days: int = MIN_DAYS,
    max_days: int = MAX_DAYS,
    default_days: int = DEFAULT_DAYS,
) -> int:
    """Clamp a day count: below the minimum -> default, above -> maximum."""
    if value < min_days:
        return default_days
    if value > max_days:
        return max_days
    return value


def extract_num_days(
    text: str,
    min_days: int = MIN_DAYS,
    max_days: int = MAX_DAYS,
    default_days: int = DEFAULT_DAYS,
) -> Optional[int]:
    """Extract and clamp a day count.

    Args:
        text: The utterance.
        min_days: Smallest accepted count.
        max_days: Largest accepted count.
        default_days: Used when the mention is below the minimum.

    Returns:
        Clamped day count, or None if no day count is mentioned.
    """
    match = _DAYS_PATTERN.search(text or "")
    if match is None:
        return None
    value = _parse_number(match.group(1))
    if value is None:
        return None
    return clamp_days(value, min_days, max_days, default_days)


def extract_interests(text: str) -> List[str]:
    """Extract interest categories ('culture', 'food') in fixed order."""
    return all_results(INTEREST_RULES, text or "")


def extract_day_reference(text: str) -> Optional[int]:
    """Extract a 1-based day reference ('day 2', 'day two', 'second day')."""
    if not text:
        return None
    match = _DAY_REF_PATTERN.search(text)
    if match is not None:
        return _parse_number(match.group(1))
    match = _ORDINAL_DAY_PATTERN.search(text)
    if match is not None:
        return ORDINAL_WORDS[match.group(1).lower()]
    return None


def extract_time_of_day(text: str) -> Optional[TimeOfDay]:
    """Extract a slot keyword (morning, afternoon, evening)."""
    hit = first_match(TIME_OF_DAY_RULES, text or "")
    return hit[0].result if hit else None
