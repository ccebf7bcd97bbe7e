"""
Text-generation providers and the fallback dispatcher.
"""

from .dispatcher import FallbackDispatcher
from .providers import (
    TextProvider,
    TextGenerationProvider,
    OpenAICompatibleProvider,
    LiteLLMProvider,
    build_text_providers,
)

__all__ = [
    "FallbackDispatcher",
    "TextProvider",
    "TextGenerationProvider",
    "OpenAICompatibleProvider",
    "LiteLLMProvider",
    "build_text_providers",
]
