"""Language model stand-in used when no model is configured.

Every call fails with LLMError, which routes each component straight to
its deterministic path.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...domain.errors import LLMError


@dataclass
class DisabledLanguageModel:
    """LanguageModelPort implementation that is always unavailable."""

    reason: str = "Language model disabled"

    @property
    def model_name(self) -> str:
        return "disabled"

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        raise LLMError(self.reason, model=self.model_name)
