"""Language model adapters - Implementations of the LanguageModelPort."""

from .disabled import DisabledLanguageModel
from .openai_adapter import OpenAICompatibleModel

__all__ = ["OpenAICompatibleModel", "DisabledLanguageModel"]
