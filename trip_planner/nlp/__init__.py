"""Text processing: deterministic extractors, keyword rule tables,
structured model output handling and wikitext cleanup."""

from .extractors import (
    extract_city,
    extract_day_reference,
    extract_interests,
    extract_num_days,
    extract_pace,
    extract_time_of_day,
    normalize_pace,
)
from .llm_json import StructuredLLM, extract_json_object

__all__ = [
    "extract_city",
    "extract_day_reference",
    "extract_interests",
    "extract_num_days",
    "extract_pace",
    "extract_time_of_day",
    "normalize_pace",
    "StructuredLLM",
    "extract_json_object",
]
