"""OpenAI-compatible chat completion adapter.

Talks to any endpoint implementing the OpenAI chat completions API
(Groq by default) with temperature 0 and a bounded timeout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from ...config import LLMConfig, get_config
from ...domain.errors import LLMError


@dataclass
class OpenAICompatibleModel:
    """Language model adapter implementing LanguageModelPort.

    The client is created lazily on first use.

    Attributes:
        config: Language model configuration
    """

    config: LLMConfig = field(default_factory=lambda: get_config().llm)

    _client: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def model_name(self) -> str:
        return self.config.model

    def _get_client(self) -> Any:
        if self._client is None:
            self._logger.debug(
                "Initializing chat completion client",
                extra={"base_url": self.config.base_url, "model": self.config.model},
            )
            self._client = OpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
                max_retries=0,
            )
        return self._client

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run one chat completion.

        Args:
            system_prompt: System instruction.
            user_prompt: User prompt.

        Returns:
            The assistant message text.

        Raises:
            LLMError: If the model is not configured or the call fails.
        """
        if not self.config.is_available:
            raise LLMError("Language model is not configured", model=self.model_name)

        try:
            response = self._get_client().chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except OpenAIError as e:
            self._logger.warning(
                "Chat completion failed",
                extra={"model": self.model_name, "error": str(e)},
            )
            raise LLMError("Chat completion failed", cause=e, model=self.model_name)

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError("Chat completion returned no content", model=self.model_name)
        return content
