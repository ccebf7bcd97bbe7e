"""
Image-generation provider clients.

Handles DALL-E (OpenAI), Leonardo AI (REST) and Stable Diffusion (Replicate).
Each provider returns an ImageGenerationResult and reports failures as
ProviderCallFailed.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import replicate
import requests
from loguru import logger
from openai import AsyncOpenAI

from ..clients import PipelineClients
from ..config import LeonardoConfig, PipelineConfig
from ..errors import MalformedProviderResponse, ProviderCallFailed, UnsupportedConfiguration
from ..image_models import ImageModelSpec, ImageProvider, get_image_model, parse_size, resolve_size


@dataclass
class ImageGenerationResult:
    url: str
    revised_prompt: Optional[str] = None


def _spec_for(model: str, provider: ImageProvider) -> ImageModelSpec:
    spec = get_image_model(model)
    if spec.provider != provider:
        raise UnsupportedConfiguration(f"{model} is not served by {provider.value}")
    return spec


class DalleImageProvider:
    """OpenAI DALL-E 2 / DALL-E 3."""

    name = ImageProvider.OPENAI.value

    def __init__(self, client: AsyncOpenAI, timeout: float = 60.0):
        self.client = client
        self.timeout = timeout

    async def generate(self, prompt: str, *, model: str, size: str, quality: str = "standard") -> ImageGenerationResult:
        """
        Generate one image.

        Unsupported sizes snap to the model's documented fallback size.

        Raises:
            UnsupportedConfiguration: If the model is not a DALL-E model
            ProviderCallFailed: On API errors or timeout
        """
        spec = _spec_for(model, ImageProvider.OPENAI)
        image_size = resolve_size(spec, size)

        params = {
            "model": spec.model,
            "prompt": prompt,
            "n": 1,
            "size": image_size,
            "response_format": "url",
        }
        # dall-e-2 rejects the quality parameter
        if spec.supports_quality:
            params["quality"] = quality

        logger.info(f"Using OpenAI DALL-E for image generation: {spec.model} ({image_size})")
        try:
            response = await asyncio.wait_for(self.client.images.generate(**params), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderCallFailed(self.name, f"image generation timed out after {self.timeout}s") from exc
        except Exception as exc:
            raise ProviderCallFailed(self.name, f"{type(exc).__name__}: {exc}") from exc

        if not response.data or not response.data[0].url:
            raise MalformedProviderResponse(self.name, "no image URL in response")
        image = response.data[0]
        return ImageGenerationResult(url=image.url, revised_prompt=getattr(image, "revised_prompt", None))


class LeonardoImageProvider:
    """
    Leonardo AI REST client.

    Generation is asynchronous on Leonardo's side: a job is created, then
    polled until it completes or fails.
    """

    name = ImageProvider.LEONARDO.value

    def __init__(
        self,
        api_key: str,
        config: Optional[LeonardoConfig] = None,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config or LeonardoConfig()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })
        self._sleep = sleep

    def build_request(self, spec: ImageModelSpec, prompt: str, size: str) -> Dict[str, Any]:
        """Request body for POST /generations."""
        width, height = parse_size(resolve_size(spec, size))
        alchemy = self.config.enable_alchemy and spec.supports_alchemy
        body = {
            "modelId": spec.remote_id,
            "prompt": prompt,
            "width": width,
            "height": height,
            "num_images": 1,
            "guidance_scale": 7,
            "alchemy": alchemy,
            "enhancePrompt": False,
        }
        if alchemy:
            body["contrastRatio"] = 2.5
        if spec.preset_style:
            body["presetStyle"] = spec.preset_style
        return body

    async def generate(self, prompt: str, *, model: str, size: str, quality: str = "standard") -> ImageGenerationResult:
        """
        Generate one image and wait for it.

        Raises:
            UnsupportedConfiguration: If the model is not a Leonardo model
            ProviderCallFailed: On API errors, a failed job or polling timeout
        """
        spec = _spec_for(model, ImageProvider.LEONARDO)
        body = self.build_request(spec, prompt, size)
        logger.info(f"Generating Leonardo AI image: {spec.model} ({body['width']}x{body['height']})")

        created = await self._request("POST", "/generations", json=body)
        try:
            generation_id = created["sdGenerationJob"]["generationId"]
        except (KeyError, TypeError) as exc:
            raise MalformedProviderResponse(self.name, "no generation id in response") from exc
        logger.info(f"Leonardo AI generation started: {generation_id}")

        url = await self.poll_generation(generation_id)
        return ImageGenerationResult(url=url)

    async def poll_generation(self, generation_id: str) -> str:
        """
        Poll a generation until it completes.

        Returns:
            URL of the first generated image

        Raises:
            ProviderCallFailed: If the job fails or never completes
        """
        attempts = self.config.poll_attempts
        for attempt in range(1, attempts + 1):
            try:
                data = await self._request("GET", f"/generations/{generation_id}")
            except ProviderCallFailed as exc:
                if attempt == attempts:
                    raise ProviderCallFailed(
                        self.name, f"polling timeout for generation {generation_id}: {exc}"
                    ) from exc
                logger.warning(f"Poll attempt {attempt} failed: {exc}")
                await self._sleep(self.config.poll_interval_seconds)
                continue

            generation = (data or {}).get("generations_by_pk") or {}
            status = generation.get("status")
            images = generation.get("generated_images") or []
            if status == "COMPLETE" and images:
                url = images[0].get("url") if isinstance(images[0], dict) else None
                if not url:
                    raise MalformedProviderResponse(self.name, f"no image URL in generation {generation_id}")
                logger.info(f"Leonardo AI generation completed: {generation_id}")
                return url
            if status == "FAILED":
                raise ProviderCallFailed(self.name, f"generation failed: {generation_id}")

            logger.debug(f"Polling Leonardo AI generation {generation_id} (attempt {attempt}/{attempts})")
            await self._sleep(self.config.poll_interval_seconds)

        raise ProviderCallFailed(self.name, f"generation timeout after {attempts} attempts")

    async def check_account(self) -> bool:
        """True if the API key is accepted."""
        data = await self._request("GET", "/me")
        return bool(data)

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.config.base_url}{path}"

        def call():
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.json()

        try:
            return await asyncio.to_thread(call)
        except requests.RequestException as exc:
            raise ProviderCallFailed(self.name, f"{method} {path} failed: {exc}") from exc
        except ValueError as exc:
            raise MalformedProviderResponse(self.name, f"{method} {path} returned invalid JSON") from exc


class ReplicateImageProvider:
    """Stable Diffusion 3 on Replicate."""

    name = ImageProvider.REPLICATE.value

    def __init__(self, client: replicate.Client, timeout: float = 60.0):
        self.client = client
        self.timeout = timeout

    async def generate(self, prompt: str, *, model: str, size: str, quality: str = "standard") -> ImageGenerationResult:
        """
        Generate one image.

        Raises:
            UnsupportedConfiguration: If the model is not a Replicate model
            ProviderCallFailed: On API errors or timeout
        """
        spec = _spec_for(model, ImageProvider.REPLICATE)
        width, height = parse_size(resolve_size(spec, size))

        logger.info(f"Generating Replicate image: {spec.model} ({width}x{height})")
        try:
            output = await asyncio.wait_for(
                self.client.async_run(
                    spec.model,
                    input={
                        "prompt": prompt,
                        "width": width,
                        "height": height,
                        "num_outputs": 1,
                        "guidance_scale": 7.5,
                        "num_inference_steps": 50,
                    },
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderCallFailed(self.name, f"image generation timed out after {self.timeout}s") from exc
        except Exception as exc:
            raise ProviderCallFailed(self.name, f"{type(exc).__name__}: {exc}") from exc

        # Output is a list of file outputs (or plain URLs on older clients)
        if not output:
            raise MalformedProviderResponse(self.name, "no output from model")
        first = output[0] if isinstance(output, (list, tuple)) else output
        return ImageGenerationResult(url=str(getattr(first, "url", first)))


def build_image_providers(clients: PipelineClients, config: Optional[PipelineConfig] = None) -> Dict[ImageProvider, Any]:
    """
    Create an image provider for every backend that has an API key.

    Args:
        clients: Client container with loaded keys
        config: Pipeline configuration (defaults to PipelineConfig defaults)

    Returns:
        Mapping of ImageProvider to provider
    """
    if config is None:
        config = PipelineConfig()
    timeout = config.timeouts.request_timeout_seconds

    providers: Dict[ImageProvider, Any] = {}
    if clients.has_key("openai"):
        providers[ImageProvider.OPENAI] = DalleImageProvider(clients.openai, timeout)
    if clients.has_key("leonardo"):
        providers[ImageProvider.LEONARDO] = LeonardoImageProvider(clients.leonardo_api_key, config.leonardo, timeout)
    if clients.has_key("replicate"):
        providers[ImageProvider.REPLICATE] = ReplicateImageProvider(clients.replicate, timeout)
    return providers
