"""Fakes injected into the pipeline under test."""

from typing import Callable, Dict, List, Optional, Union

from viral_pipeline.config import GENERATION_KINDS, PipelineConfig
from viral_pipeline.enhancer import ContentEnhancer
from viral_pipeline.errors import ProviderCallFailed
from viral_pipeline.image_models import ImageProvider
from viral_pipeline.llm.dispatcher import FallbackDispatcher
from viral_pipeline.media.image_providers import ImageGenerationResult
from viral_pipeline.media.storage import UploadResult


class FakeTextProvider:
    """Text provider returning a canned answer (or a per-prompt one) and recording calls."""

    def __init__(self, name: str, response: Union[str, Callable[[str], str], None] = "ok", error: Optional[str] = None):
        self.name = name
        self.model = f"{name}-model"
        self.response = response
        self.error = error
        self.calls: List[dict] = []

    async def generate(self, prompt, *, model=None, max_tokens=None, temperature=None, system=None):
        self.calls.append({
            "prompt": prompt,
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system,
        })
        if self.error:
            raise ProviderCallFailed(self.name, self.error)
        if callable(self.response):
            return self.response(prompt)
        return self.response


class FakeImageProvider:
    """Image provider that fails on chosen (1-based) call numbers."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls: List[dict] = []

    async def generate(self, prompt, *, model, size, quality="standard"):
        self.calls.append({"prompt": prompt, "model": model, "size": size, "quality": quality})
        number = len(self.calls)
        if number in self.fail_on:
            raise ProviderCallFailed("fake-images", f"generation {number} failed")
        return ImageGenerationResult(url=f"https://images.example.com/{number}.png")


class FakeUploader:
    name = "fake"

    def __init__(self):
        self.uploads: List[tuple] = []

    async def upload(self, data, destination):
        self.uploads.append((destination, data))
        return UploadResult(public_url=f"https://cdn.example.com/{destination}", provider=self.name)


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


async def fake_download(url, timeout=30.0):
    return f"bytes of {url}".encode()


def make_dispatcher(responses: Dict[str, Union[str, Callable[[str], str]]]):
    """
    Dispatcher with one fake provider per generation kind.

    Kinds without a response have an unconfigured chain, so they fail with
    AllProvidersExhausted.
    """
    providers = {f"{kind}-fake": FakeTextProvider(f"{kind}-fake", response) for kind, response in responses.items()}
    priorities = {kind: [f"{kind}-fake"] for kind in GENERATION_KINDS}
    return FallbackDispatcher(providers, priorities)


def make_enhancer(responses=None, config=None, image_provider=None, fail_on=()):
    """ContentEnhancer wired to fakes; images default to DALL-E 3 without prompt enhancement."""
    if config is None:
        config = PipelineConfig()
        config.images.model = "dall-e-3"
        config.images.enhance_prompts = False
    image_provider = image_provider or FakeImageProvider(fail_on)
    return ContentEnhancer(
        config,
        make_dispatcher(responses or {}),
        image_providers={
            ImageProvider.OPENAI: image_provider,
            ImageProvider.LEONARDO: image_provider,
            ImageProvider.REPLICATE: image_provider,
        },
        uploader=FakeUploader(),
        sleep=RecordingSleep(),
        downloader=fake_download,
    )
