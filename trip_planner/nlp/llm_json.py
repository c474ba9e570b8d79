"""Strict JSON generation on top of LanguageModelPort.

The model is asked for JSON only; the reply is sliced from the first
'{' to the last '}', parsed and validated against a pydantic schema.
A parse or validation failure is retried once with a corrective
instruction prepended; a second failure raises LLMOutputError.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..domain.errors import LLMOutputError
from ..ports.llm import LanguageModelPort

M = TypeVar("M", bound=BaseModel)

STRICT_JSON_SYSTEM_PROMPT = (
    "You are a strict JSON generator. Output ONLY valid JSON. No markdown. No prose."
)
RETRY_PREFIX = "Your previous output was invalid JSON. Output ONLY valid JSON now.\n"


def extract_json_object(text: str) -> Dict[str, Any]:
    """Locate and parse the outermost JSON object in model text.

    Args:
        text: Raw model output, possibly wrapped in prose or fences.

    Returns:
        The parsed object.

    Raises:
        ValueError: If no JSON object can be found or parsed.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise ValueError("No JSON object in model output")
    parsed = json.loads(text[start : end + 1])
    if not isinstance(parsed, dict):
        raise ValueError("Model output is not a JSON object")
    return parsed


@dataclass
class StructuredLLM:
    """Schema-validated JSON calls with a single retry.

    Attributes:
        model: Underlying text completion port
        system_prompt: System instruction sent with every call
    """

    model: LanguageModelPort
    system_prompt: str = STRICT_JSON_SYSTEM_PROMPT

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def generate(self, prompt: str, schema: Type[M]) -> M:
        """Call the model and validate its reply.

        Args:
            prompt: Task prompt describing the expected JSON.
            schema: Pydantic model the reply must satisfy.

        Returns:
            The validated payload.

        Raises:
            LLMError: If the model is unavailable (not retried).
            LLMOutputError: If both attempts produce invalid output.
        """
        raw = ""
        last_error: Optional[Exception] = None
        prompts = (prompt, RETRY_PREFIX + prompt)

        for attempt, attempt_prompt in enumerate(prompts, start=1):
            raw = self.model.complete(self.system_prompt, attempt_prompt)
            try:
                return schema.model_validate(extract_json_object(raw))
            except (ValidationError, ValueError) as e:
                last_error = e
                self._logger.warning(
                    "Model output rejected",
                    extra={
                        "schema": schema.__name__,
                        "attempt": attempt,
                        "reason": "validation" if isinstance(e, ValidationError) else "parse",
                    },
                )

        raise LLMOutputError(
            f"Model output failed {schema.__name__} validation",
            cause=last_error,
            raw_output=raw[:500],
            attempts=len(prompts),
        )
