import asyncio
from types import SimpleNamespace

import pytest
import requests

from viral_pipeline.clients import ApiKeys, PipelineClients
from viral_pipeline.config import LeonardoConfig, PipelineConfig
from viral_pipeline.errors import MalformedProviderResponse, ProviderCallFailed, UnsupportedConfiguration
from viral_pipeline.image_models import ImageProvider, get_image_model
from viral_pipeline.llm import providers as text_providers
from viral_pipeline.llm.providers import LiteLLMProvider, OpenAICompatibleProvider, build_text_providers
from viral_pipeline.media.image_providers import (
    DalleImageProvider,
    LeonardoImageProvider,
    ReplicateImageProvider,
    build_image_providers,
)

from fakes import RecordingSleep


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeChatClient:
    def __init__(self, content="  generated text \n", error=None, delay=0.0):
        self.content = content
        self.error = error
        self.delay = delay
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self.create))

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return _completion(self.content)


# ----------------------------------------------------------------------
# Text providers
# ----------------------------------------------------------------------

def test_openai_compatible_provider_builds_messages():
    client = FakeChatClient()
    provider = OpenAICompatibleProvider("openai", client, "gpt-4o-mini")

    text = asyncio.run(provider.generate("Write a hook", max_tokens=100, temperature=0.3, system="Be brief"))

    assert text == "generated text"
    assert client.requests == [{
        "model": "gpt-4o-mini",
        "messages": [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Write a hook"},
        ],
        "max_tokens": 100,
        "temperature": 0.3,
    }]


def test_sdk_errors_are_wrapped():
    provider = OpenAICompatibleProvider("openrouter", FakeChatClient(error=RuntimeError("502 Bad Gateway")), "m")

    with pytest.raises(ProviderCallFailed) as excinfo:
        asyncio.run(provider.generate("p"))

    assert excinfo.value.provider == "openrouter"
    assert "502 Bad Gateway" in str(excinfo.value)


def test_timeout_is_a_provider_failure():
    provider = OpenAICompatibleProvider("openai", FakeChatClient(delay=1.0), "m", timeout=0.01)

    with pytest.raises(ProviderCallFailed, match="timed out"):
        asyncio.run(provider.generate("p"))


@pytest.mark.parametrize("content", ["", "   ", None])
def test_empty_output_is_malformed(content):
    provider = OpenAICompatibleProvider("openai", FakeChatClient(content=content), "m")

    with pytest.raises(MalformedProviderResponse):
        asyncio.run(provider.generate("p"))


def test_litellm_provider_passes_key_and_timeout(monkeypatch):
    captured = {}

    async def fake_acompletion(**kwargs):
        captured.update(kwargs)
        return _completion("from claude")

    monkeypatch.setattr(text_providers.litellm, "acompletion", fake_acompletion)
    provider = LiteLLMProvider("anthropic", "sk-ant", "anthropic/claude-3-5-sonnet-20241022", timeout=30.0)

    assert asyncio.run(provider.generate("p")) == "from claude"
    assert captured["api_key"] == "sk-ant"
    assert captured["timeout"] == 30.0
    assert captured["model"] == "anthropic/claude-3-5-sonnet-20241022"


def test_build_text_providers_only_for_configured_keys():
    clients = PipelineClients(ApiKeys(anthropic="sk-ant", openrouter="sk-or"))

    providers = build_text_providers(clients)

    assert set(providers) == {"anthropic", "openrouter"}
    assert isinstance(providers["anthropic"], LiteLLMProvider)
    assert providers["openrouter"].model == "google/gemini-2.0-flash-001"


# ----------------------------------------------------------------------
# Image providers
# ----------------------------------------------------------------------

class FakeImagesClient:
    def __init__(self, data):
        self.data = data
        self.requests = []
        self.images = SimpleNamespace(generate=self.generate)

    async def generate(self, **kwargs):
        self.requests.append(kwargs)
        return SimpleNamespace(data=self.data)


def test_dalle3_snaps_size_and_sends_quality():
    client = FakeImagesClient([SimpleNamespace(url="https://oai.example.com/1.png", revised_prompt="revised")])

    result = asyncio.run(DalleImageProvider(client).generate("a lighthouse", model="dall-e-3", size="1920x1080", quality="hd"))

    assert result.url == "https://oai.example.com/1.png"
    assert result.revised_prompt == "revised"
    assert client.requests[0]["size"] == "1792x1024"
    assert client.requests[0]["quality"] == "hd"


def test_dalle2_never_sends_quality():
    client = FakeImagesClient([SimpleNamespace(url="https://oai.example.com/2.png")])

    asyncio.run(DalleImageProvider(client).generate("a lighthouse", model="dall-e-2", size="1920x1080"))

    assert client.requests[0]["size"] == "1024x1024"
    assert "quality" not in client.requests[0]


def test_dalle_without_url_is_malformed():
    client = FakeImagesClient([])

    with pytest.raises(MalformedProviderResponse):
        asyncio.run(DalleImageProvider(client).generate("p", model="dall-e-3", size="1024x1024"))


def test_image_provider_rejects_foreign_model():
    with pytest.raises(UnsupportedConfiguration):
        asyncio.run(DalleImageProvider(FakeImagesClient([])).generate("p", model="leonardo-phoenix", size="1024x1024"))


def test_replicate_provider_reads_file_output():
    class FakeReplicate:
        def __init__(self):
            self.calls = []

        async def async_run(self, model, input):
            self.calls.append((model, input))
            return [SimpleNamespace(url="https://replicate.example.com/out.png")]

    client = FakeReplicate()
    result = asyncio.run(ReplicateImageProvider(client).generate(
        "p", model="stability-ai/stable-diffusion-3", size="2048x1024"
    ))

    assert result.url == "https://replicate.example.com/out.png"
    model, params = client.calls[0]
    assert model == "stability-ai/stable-diffusion-3"
    assert (params["width"], params["height"]) == (1536, 1024)


class FakeResponse:
    def __init__(self, payload, status_error=None):
        self.payload = payload
        self.status_error = status_error

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error

    def json(self):
        return self.payload


class FakeLeonardoSession:
    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, timeout, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _leonardo(responses, **config):
    session = FakeLeonardoSession(responses)
    sleep = RecordingSleep()
    provider = LeonardoImageProvider("leo-key", LeonardoConfig(**config), session=session, sleep=sleep)
    return provider, session, sleep


def _generation(status, images=()):
    return FakeResponse({"generations_by_pk": {"status": status, "generated_images": [{"url": url} for url in images]}})


def test_leonardo_request_body_for_phoenix():
    provider, session, _ = _leonardo([])

    body = provider.build_request(get_image_model("leonardo-phoenix"), "a forest", "1920x1080")

    assert session.headers["Authorization"] == "Bearer leo-key"
    assert (body["width"], body["height"]) == (1024, 832)
    assert body["modelId"] == "b24e16ff-06e3-43eb-8d33-4416c2d75876"
    assert body["alchemy"] is True
    assert body["contrastRatio"] == 2.5
    assert body["presetStyle"] == "CINEMATIC"


def test_leonardo_dreamshaper_has_no_alchemy():
    provider, _, _ = _leonardo([])

    body = provider.build_request(get_image_model("dreamshaper-v7"), "a forest", "512x512")

    assert body["alchemy"] is False
    assert "contrastRatio" not in body
    assert "presetStyle" not in body


def test_leonardo_generation_polls_until_complete():
    provider, session, sleep = _leonardo([
        FakeResponse({"sdGenerationJob": {"generationId": "gen-1"}}),
        _generation("PENDING"),
        requests.ConnectionError("blip"),
        _generation("COMPLETE", ["https://leonardo.example.com/gen-1.jpg"]),
    ], poll_interval_seconds=0.5)

    result = asyncio.run(provider.generate("a forest", model="leonardo-kino-xl", size="1024x576"))

    assert result.url == "https://leonardo.example.com/gen-1.jpg"
    assert [request[0] for request in session.requests] == ["POST", "GET", "GET", "GET"]
    assert session.requests[1][1].endswith("/generations/gen-1")
    assert sleep.delays == [0.5, 0.5]


def test_leonardo_failed_generation_stops_polling():
    provider, session, _ = _leonardo([
        FakeResponse({"sdGenerationJob": {"generationId": "gen-2"}}),
        _generation("FAILED"),
        _generation("COMPLETE", ["never-reached"]),
    ])

    with pytest.raises(ProviderCallFailed, match="generation failed"):
        asyncio.run(provider.generate("p", model="leonardo-phoenix", size="1024x576"))
    assert len(session.requests) == 2


def test_leonardo_polling_gives_up():
    provider, _, _ = _leonardo(
        [FakeResponse({"sdGenerationJob": {"generationId": "gen-3"}})] + [_generation("PENDING")] * 3,
        poll_attempts=3,
    )

    with pytest.raises(ProviderCallFailed, match="timeout"):
        asyncio.run(provider.generate("p", model="leonardo-phoenix", size="1024x576"))


def test_leonardo_missing_generation_id_is_malformed():
    provider, _, _ = _leonardo([FakeResponse({"error": "bad request"})])

    with pytest.raises(MalformedProviderResponse):
        asyncio.run(provider.generate("p", model="leonardo-phoenix", size="1024x576"))


def test_leonardo_completed_image_without_url_is_malformed():
    provider, _, _ = _leonardo([
        FakeResponse({"sdGenerationJob": {"generationId": "gen-4"}}),
        FakeResponse({"generations_by_pk": {"status": "COMPLETE", "generated_images": [{"id": "img-1"}]}}),
    ])

    with pytest.raises(MalformedProviderResponse, match="gen-4"):
        asyncio.run(provider.generate("p", model="leonardo-phoenix", size="1024x576"))


def test_build_image_providers_only_for_configured_keys():
    clients = PipelineClients(ApiKeys(openrouter="sk-or", leonardo="leo-key"))

    providers = build_image_providers(clients, PipelineConfig())

    assert set(providers) == {ImageProvider.LEONARDO}
