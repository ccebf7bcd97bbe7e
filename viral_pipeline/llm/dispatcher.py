"""
Provider fallback dispatcher.

Walks a fixed, per-kind priority list of text providers, giving each one a
single attempt, until one returns usable output.
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from ..errors import AllProvidersExhausted, MalformedProviderResponse, ProviderCallFailed
from ..utils.json_parser import decode_structured
from .providers import TextGenerationProvider


class FallbackDispatcher:
    """
    Route generation calls through ordered provider chains.

    The dispatcher never retries a provider within one call and never
    reorders a chain at runtime.
    """

    def __init__(
        self,
        providers: Dict[str, TextGenerationProvider],
        priorities: Dict[str, List[str]],
    ):
        """
        Args:
            providers: Available providers by name
            priorities: Ordered provider names per generation kind

        Raises:
            ValueError: If a chain names the same provider twice
        """
        for kind, chain in priorities.items():
            if len(set(chain)) != len(chain):
                raise ValueError(f"Provider chain for {kind} repeats a provider: {chain}")
        self.providers = providers
        self.priorities = priorities

    def chain_for(self, kind: str) -> List[str]:
        """Ordered provider names for a generation kind."""
        try:
            return self.priorities[kind]
        except KeyError:
            raise ValueError(f"No provider chain configured for {kind}") from None

    async def generate(
        self,
        kind: str,
        prompt: str,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system: Optional[str] = None,
        video_id: Optional[str] = None,
    ) -> str:
        """
        Generate text for `kind`, falling back along its chain.

        Returns:
            Text from the first provider that succeeded

        Raises:
            AllProvidersExhausted: If every provider in the chain failed
        """
        return await self._run(kind, prompt, max_tokens, temperature, system, video_id, expected=None)

    async def generate_structured(
        self,
        kind: str,
        prompt: str,
        expected: type,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system: Optional[str] = None,
        video_id: Optional[str] = None,
    ) -> Any:
        """
        Generate JSON for `kind`; output that does not decode to `expected`
        counts as a failed attempt.

        Returns:
            The decoded object or array

        Raises:
            AllProvidersExhausted: If no provider produced decodable output
        """
        return await self._run(kind, prompt, max_tokens, temperature, system, video_id, expected=expected)

    async def _run(self, kind, prompt, max_tokens, temperature, system, video_id, expected):
        chain = self.chain_for(kind)
        errors: Dict[str, str] = {}
        context = f"[{kind}]" if video_id is None else f"[{kind}] video {video_id}:"

        for position, name in enumerate(chain, start=1):
            provider = self.providers.get(name)
            if provider is None:
                errors[name] = "provider not configured"
                logger.debug(f"{context} skipping {name}, not configured")
                continue

            logger.info(f"{context} attempt {position}/{len(chain)} with {name}")
            try:
                text = await provider.generate(
                    prompt,
                    model=provider.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                )
                if expected is None:
                    result = text
                else:
                    result = decode_structured(text, expected, None)
                    if result is None:
                        raise MalformedProviderResponse(
                            name, f"could not decode {expected.__name__} from response", kind
                        )
            except ProviderCallFailed as exc:
                errors[name] = str(exc)
                logger.warning(f"{context} {name} failed: {exc}")
                continue

            fallback_note = " (fallback)" if position > 1 else ""
            logger.info(f"{context} handled by {name}{fallback_note}")
            return result

        logger.error(f"{context} all providers failed: {errors}")
        raise AllProvidersExhausted(kind, errors)
