"""Ordered keyword rule tables.

Vocabulary-driven decisions (intent keywords, pace words, edit actions)
are expressed as ordered ``Rule`` lists: the first rule whose pattern
matches decides the result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Generic, Iterable, List, Match, Optional, Pattern, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Rule(Generic[T]):
    """A compiled pattern paired with the result it stands for.

    Attributes:
        pattern: Compiled regular expression
        result: Value produced when the pattern matches
        label: Short name used in rationales and logs
    """

    pattern: Pattern[str]
    result: T
    label: str = ""

    def search(self, text: str) -> Optional[Match[str]]:
        return self.pattern.search(text)


def rule(regex: str, result: T, label: str = "") -> Rule[T]:
    """Compile a case-insensitive rule."""
    return Rule(pattern=re.compile(regex, re.IGNORECASE), result=result, label=label)


def first_match(rules: Iterable[Rule[T]], text: str) -> Optional[Tuple[Rule[T], Match[str]]]:
    """Return the first rule matching the text, with its match object.

    Args:
        rules: Rules in priority order.
        text: Text to test.

    Returns:
        (rule, match) for the first hit, or None.
    """
    for candidate in rules:
        match = candidate.search(text)
        if match is not None:
            return candidate, match
    return None


def all_results(rules: Iterable[Rule[T]], text: str) -> List[T]:
    """Return the results of every matching rule, in rule order, deduplicated."""
    results: List[T] = []
    for candidate in rules:
        if candidate.search(text) is not None and candidate.result not in results:
            results.append(candidate.result)
    return results
