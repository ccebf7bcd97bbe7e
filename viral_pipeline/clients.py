"""
API client factories for the enhancement pipeline.

Provides factory functions for creating and configuring API clients.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from openai import AsyncOpenAI
import replicate


OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


@dataclass
class ApiKeys:
    """API keys read from the environment. Missing keys are None."""
    anthropic: Optional[str] = None
    openai: Optional[str] = None
    openrouter: Optional[str] = None
    leonardo: Optional[str] = None
    replicate: Optional[str] = None


def load_api_keys() -> ApiKeys:
    """
    Load API keys from environment variables or .env file.

    Returns:
        ApiKeys with every key found

    Raises:
        ValueError: If no text-generation key is set
    """
    load_dotenv()

    keys = ApiKeys(
        anthropic=os.getenv("ANTHROPIC_API_KEY") or None,
        openai=os.getenv("OPENAI_API_KEY") or None,
        openrouter=os.getenv("OPENROUTER_API_KEY") or None,
        leonardo=os.getenv("LEONARDO_API_KEY") or None,
        replicate=os.getenv("REPLICATE_API_KEY") or None,
    )
    if not (keys.anthropic or keys.openai or keys.openrouter):
        raise ValueError(
            "None of ANTHROPIC_API_KEY, OPENAI_API_KEY or OPENROUTER_API_KEY is set "
            "in environment variables or .env file"
        )
    return keys


def create_openai_client(api_key: str, timeout: float) -> AsyncOpenAI:
    """
    Create and return the async OpenAI client.

    Args:
        api_key: OpenAI API key
        timeout: Request timeout in seconds

    Returns:
        Configured AsyncOpenAI client
    """
    return AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)


def create_openrouter_client(api_key: str, timeout: float) -> AsyncOpenAI:
    """
    Create and return the async OpenAI client configured for OpenRouter.

    Args:
        api_key: OpenRouter API key
        timeout: Request timeout in seconds

    Returns:
        Configured AsyncOpenAI client
    """
    return AsyncOpenAI(
        base_url=OPENROUTER_BASE_URL,
        api_key=api_key,
        timeout=timeout,
        max_retries=0,
    )


def create_replicate_client(api_key: str) -> replicate.Client:
    """
    Create and return a Replicate client.

    Args:
        api_key: Replicate API key

    Returns:
        Configured Replicate client
    """
    return replicate.Client(api_token=api_key)


class PipelineClients:
    """
    Container for all API clients used by the pipeline.

    Lazy-initializes clients on first access.
    """

    def __init__(self, keys: ApiKeys, timeout: float = 60.0):
        """
        Initialize with API keys.

        Args:
            keys: Loaded API keys
            timeout: Request timeout applied to SDK clients
        """
        self._keys = keys
        self._timeout = timeout
        self._openai_client = None
        self._openrouter_client = None
        self._replicate_client = None

    @classmethod
    def from_env(cls, timeout: float = 60.0) -> "PipelineClients":
        """
        Create clients from environment variables.

        Returns:
            PipelineClients instance with keys from environment
        """
        return cls(load_api_keys(), timeout=timeout)

    @property
    def keys(self) -> ApiKeys:
        return self._keys

    @property
    def openai(self) -> AsyncOpenAI:
        """Get the OpenAI client (lazy-initialized)."""
        if self._openai_client is None:
            self._openai_client = create_openai_client(self._require("openai"), self._timeout)
        return self._openai_client

    @property
    def openrouter(self) -> AsyncOpenAI:
        """Get the OpenRouter client (lazy-initialized)."""
        if self._openrouter_client is None:
            self._openrouter_client = create_openrouter_client(self._require("openrouter"), self._timeout)
        return self._openrouter_client

    @property
    def replicate(self) -> replicate.Client:
        """Get the Replicate client (lazy-initialized)."""
        if self._replicate_client is None:
            self._replicate_client = create_replicate_client(self._require("replicate"))
        return self._replicate_client

    @property
    def anthropic_api_key(self) -> str:
        """Get the Anthropic API key (for litellm calls)."""
        return self._require("anthropic")

    @property
    def leonardo_api_key(self) -> str:
        """Get the Leonardo AI API key."""
        return self._require("leonardo")

    def has_key(self, name: str) -> bool:
        return bool(getattr(self._keys, name))

    def _require(self, name: str) -> str:
        key = getattr(self._keys, name)
        if not key:
            raise ValueError(f"{name.upper()}_API_KEY not set in environment variables or .env file")
        return key
