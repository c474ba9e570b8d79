"""Schemas for structured model output.

Model replies are validated against these pydantic models right at the
call boundary; anything outside an allowed enumeration or range is a
validation failure and sends the caller to its deterministic path.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.models import (
    Citation,
    EditAction,
    EditCommand,
    EditParams,
    EditScope,
    SourceType,
    TimeOfDay,
)
from .extractors import normalize_pace

PaceLiteral = Literal["relaxed", "moderate", "normal", "packed"]


def _lower(value: object) -> object:
    return value.strip().lower() if isinstance(value, str) else value


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class IntentPayload(_Payload):
    """{"intent", "confidence", "rationale"}"""

    intent: Literal["PLAN", "EDIT", "EXPLAIN", "UNKNOWN"]
    confidence: float = Field(ge=0.0, le=1.0)
    rationale: str = Field(min_length=1, max_length=500)

    @field_validator("intent", mode="before")
    @classmethod
    def upper_intent(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("rationale", mode="before")
    @classmethod
    def truncate_rationale(cls, value: object) -> object:
        return value[:500] if isinstance(value, str) else value


class PlanConstraintsPayload(_Payload):
    """Partial constraints extracted by the model."""

    city: Optional[str] = None
    num_days: Optional[int] = Field(default=None, alias="numDays", ge=1, le=7)
    pace: Optional[PaceLiteral] = None
    interests: Optional[List[str]] = Field(default=None, max_length=5)
    max_daily_hours: Optional[float] = Field(
        default=None, alias="maxDailyHours", ge=1, le=12
    )

    @field_validator("pace", mode="before")
    @classmethod
    def lower_pace(cls, value: object) -> object:
        return _lower(value)

    @field_validator("city", mode="before")
    @classmethod
    def blank_city(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class EditScopePayload(_Payload):
    day_index: Optional[int] = Field(default=None, alias="dayIndex", ge=1)
    block: Optional[Literal["morning", "afternoon", "evening"]] = None

    @field_validator("block", mode="before")
    @classmethod
    def lower_block(cls, value: object) -> object:
        return _lower(value)


class EditParamsPayload(_Payload):
    pace: Optional[PaceLiteral] = None
    note: Optional[str] = None

    @field_validator("pace", mode="before")
    @classmethod
    def lower_pace(cls, value: object) -> object:
        return _lower(value)

    @field_validator("note", mode="before")
    @classmethod
    def short_note(cls, value: object) -> object:
        return value[:200] if isinstance(value, str) else value


class EditCommandPayload(_Payload):
    """{"action", "scope": {"dayIndex", "block"}, "params": {"pace", "note"}}"""

    action: Literal[
        "SET_PACE",
        "MAKE_MORE_RELAXED",
        "REDUCE_TRAVEL",
        "SWAP_TO_INDOOR",
        "ADD_FOOD_PLACE",
    ]
    scope: Optional[EditScopePayload] = None
    params: Optional[EditParamsPayload] = None

    def to_command(self) -> EditCommand:
        """Convert to the domain command."""
        scope = self.scope or EditScopePayload()
        params = self.params or EditParamsPayload()
        return EditCommand(
            action=EditAction(self.action),
            scope=EditScope(
                day_index=scope.day_index,
                block=TimeOfDay.from_label(scope.block),
            ),
            params=EditParams(
                pace=normalize_pace(params.pace) if params.pace else None,
                note=params.note,
            ),
            source="model",
        )


class CitationPayload(_Payload):
    source_type: Literal["OSM", "WIKIVOYAGE", "WEATHER"] = Field(alias="sourceType")
    ref: str = Field(min_length=1)
    quote: str = ""

    @field_validator("source_type", mode="before")
    @classmethod
    def upper_source(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("quote", mode="before")
    @classmethod
    def short_quote(cls, value: object) -> object:
        return value[:120] if isinstance(value, str) else value

    def to_citation(self) -> Citation:
        return Citation(
            source_type=SourceType(self.source_type),
            ref=self.ref,
            snippet=self.quote,
        )


class ExplainPayload(_Payload):
    """{"answer", "citations": [...]}"""

    answer: str = Field(min_length=1)
    citations: List[CitationPayload] = Field(default_factory=list)
