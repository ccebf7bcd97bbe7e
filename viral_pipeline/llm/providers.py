"""
Text-generation provider clients.

Every provider exposes the same async ``generate`` call and reports failures
as ProviderCallFailed (transport or provider error) or
MalformedProviderResponse (empty or unusable output).
"""

import asyncio
from enum import Enum
from typing import Dict, Optional

import litellm
from loguru import logger
from openai import AsyncOpenAI

from ..clients import PipelineClients
from ..config import ProviderConfig
from ..errors import MalformedProviderResponse, ProviderCallFailed


class TextProvider(str, Enum):
    """Text providers the fallback chain can route to."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    OPENROUTER = "openrouter"

    @property
    def display_name(self) -> str:
        return {
            TextProvider.ANTHROPIC: "Claude",
            TextProvider.OPENAI: "OpenAI",
            TextProvider.OPENROUTER: "OpenRouter",
        }[self]

    @property
    def key_name(self) -> str:
        """Attribute of ApiKeys holding this provider's key."""
        return self.value


class TextGenerationProvider:
    """Base class: applies the timeout and normalizes errors around `_complete`."""

    def __init__(self, name: str, model: str, timeout: float = 60.0):
        self.name = name
        self.model = model
        self.timeout = timeout

    async def generate(
        self,
        prompt: str,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system: Optional[str] = None,
    ) -> str:
        """
        Send a prompt and return the stripped response text.

        Args:
            prompt: The user prompt
            model: Model override (defaults to the provider's model)
            max_tokens: Optional maximum tokens in response
            temperature: Optional temperature for generation
            system: Optional system message

        Returns:
            The response content as a string

        Raises:
            ProviderCallFailed: On transport, timeout or provider errors
            MalformedProviderResponse: If the response carries no text
        """
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs = {
            "model": model or self.model,
            "messages": messages,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if temperature is not None:
            kwargs["temperature"] = temperature

        try:
            response = await asyncio.wait_for(self._complete(kwargs), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderCallFailed(self.name, f"timed out after {self.timeout}s") from exc
        except ProviderCallFailed:
            raise
        except Exception as exc:
            raise ProviderCallFailed(self.name, f"{type(exc).__name__}: {exc}") from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise MalformedProviderResponse(self.name, "response has no message content") from exc
        if not content or not content.strip():
            raise MalformedProviderResponse(self.name, "empty response")
        return content.strip()

    async def _complete(self, kwargs: dict):
        raise NotImplementedError


class OpenAICompatibleProvider(TextGenerationProvider):
    """OpenAI chat completions, also used for OpenRouter's compatible endpoint."""

    def __init__(self, name: str, client: AsyncOpenAI, model: str, timeout: float = 60.0):
        super().__init__(name, model, timeout)
        self.client = client

    async def _complete(self, kwargs: dict):
        return await self.client.chat.completions.create(**kwargs)


class LiteLLMProvider(TextGenerationProvider):
    """Anthropic models through litellm's async completion."""

    def __init__(self, name: str, api_key: str, model: str, timeout: float = 60.0):
        super().__init__(name, model, timeout)
        self.api_key = api_key

    async def _complete(self, kwargs: dict):
        return await litellm.acompletion(api_key=self.api_key, timeout=self.timeout, **kwargs)


def build_text_providers(
    clients: PipelineClients,
    config: Optional[ProviderConfig] = None,
    timeout: float = 60.0,
) -> Dict[str, TextGenerationProvider]:
    """
    Create a provider for every text backend that has an API key.

    Args:
        clients: Client container with loaded keys
        config: Provider models (defaults to ProviderConfig defaults)
        timeout: Per-call timeout in seconds

    Returns:
        Mapping of provider name to provider
    """
    if config is None:
        config = ProviderConfig()

    providers: Dict[str, TextGenerationProvider] = {}
    for provider in TextProvider:
        if not clients.has_key(provider.key_name):
            logger.debug(f"{provider.display_name} key not set, provider disabled")
            continue
        model = config.model_for(provider.value)
        if provider == TextProvider.ANTHROPIC:
            providers[provider.value] = LiteLLMProvider(provider.value, clients.anthropic_api_key, model, timeout)
        elif provider == TextProvider.OPENAI:
            providers[provider.value] = OpenAICompatibleProvider(provider.value, clients.openai, model, timeout)
        else:
            providers[provider.value] = OpenAICompatibleProvider(provider.value, clients.openrouter, model, timeout)
    return providers
