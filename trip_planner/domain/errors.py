"""Typed domain errors for the trip planner.

Input errors (missing or unknown city, unknown session) surface to the
caller with a structured code. Upstream and model errors are recovered
by the component that owns the call and only show up in logs.

All errors inherit from PlannerError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class PlannerError(Exception):
    """Base error for the trip planner domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    code = "INTERNAL_ERROR"

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class InvalidRequestError(PlannerError):
    """Request is structurally invalid (e.g. empty utterance).

    Attributes:
        field_name: Offending request field
    """

    field_name: str = ""

    code = "INVALID_REQUEST"


@dataclass
class CityResolutionError(PlannerError):
    """City is missing from the utterance or cannot be geocoded.

    Attributes:
        reason: 'MISSING_CITY' or 'CITY_NOT_FOUND'
        city: The city candidate that failed, if any
    """

    reason: str = "MISSING_CITY"
    city: Optional[str] = None

    @property
    def code(self) -> str:  # type: ignore[override]
        return self.reason


@dataclass
class SessionNotFoundError(PlannerError):
    """No session exists for the given identifier.

    Attributes:
        session_id: The identifier that was looked up
    """

    session_id: str = ""

    code = "SESSION_NOT_FOUND"


@dataclass
class ProviderError(PlannerError):
    """An upstream data provider failed (timeout, HTTP error, bad payload).

    Attributes:
        provider: Provider name (overpass, osrm, open-meteo, ...)
        reason: Short reason code
    """

    provider: str = ""
    reason: str = ""

    code = "PROVIDER_ERROR"


@dataclass
class LLMError(PlannerError):
    """The language model is unavailable or the call failed.

    Attributes:
        model: Model identifier
    """

    model: str = ""

    code = "LLM_UNAVAILABLE"


@dataclass
class LLMOutputError(PlannerError):
    """Model output could not be parsed or validated, even after retry.

    Attributes:
        raw_output: Last raw model output (truncated)
        attempts: Number of attempts made
    """

    raw_output: str = field(default="", repr=False)
    attempts: int = 0

    code = "LLM_MALFORMED_OUTPUT"


@dataclass
class ConfigurationError(PlannerError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None

    code = "CONFIGURATION_ERROR"


def is_input_error(exc: BaseException) -> bool:
    """Check if an error should be reported as a client-side input error."""
    return isinstance(
        exc, (InvalidRequestError, CityResolutionError, SessionNotFoundError)
    )


def error_payload(exc: BaseException, include_trace: bool = False) -> Dict[str, Any]:
    """Render an exception as a structured error payload.

    Input errors keep their own code and message. Anything else is an
    internal error; the stack trace is attached only when requested
    (non-production environments).

    Args:
        exc: The exception to render.
        include_trace: Whether to attach the formatted stack trace.

    Returns:
        Dictionary with 'code', 'message' and optional 'details'.
    """
    if isinstance(exc, PlannerError):
        payload: Dict[str, Any] = {"code": exc.code, "message": exc.message}
    else:
        payload = {"code": PlannerError.code, "message": "Internal error"}

    if not is_input_error(exc) and include_trace:
        payload["details"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return payload
