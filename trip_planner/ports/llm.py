"""Language model port - Raw text completion.

Structured output handling (JSON location, schema validation, retry)
lives in nlp/llm_json.py, on top of this port, so adapters only deal
with transport.
"""

from __future__ import annotations

from typing import Protocol


class LanguageModelPort(Protocol):
    """Port for chat-style text completion.

    Implementations:
    - adapters/llm/openai_adapter.py (OpenAICompatibleModel) - Production
    - adapters/llm/disabled.py (DisabledLanguageModel) - No API key configured
    """

    @property
    def model_name(self) -> str:
        """Identifier of the underlying model."""
        ...

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run one completion.

        Args:
            system_prompt: Instruction framing the output format.
            user_prompt: The task prompt.

        Returns:
            Raw model text.

        Raises:
            LLMError: If the model is unavailable or the call fails.
        """
        ...
