import asyncio

import pytest
import requests

from viral_pipeline.errors import ProviderCallFailed
from viral_pipeline.media.storage import (
    FallbackUploader,
    LocalFolderUploader,
    download_image,
    storage_path,
)

from fakes import FakeUploader


class BrokenUploader:
    name = "bucket"

    async def upload(self, data, destination):
        raise ConnectionError("bucket unavailable")


class FakeResponse:
    def __init__(self, content=b"", status_error=None):
        self.content = content
        self.status_error = status_error

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def get(self, url, timeout):
        self.requests.append((url, timeout))
        return self.response


def test_storage_path():
    assert storage_path("abc", "thumbnails", "abc_thumbnail.jpg") == "videos/abc/thumbnails/abc_thumbnail.jpg"


def test_local_uploader_writes_file(tmp_path):
    uploader = LocalFolderUploader(tmp_path)

    result = asyncio.run(uploader.upload(b"png-bytes", "videos/v1/images/v1_image_001.jpg"))

    target = tmp_path / "videos" / "v1" / "images" / "v1_image_001.jpg"
    assert target.read_bytes() == b"png-bytes"
    assert result.provider == "local"
    assert result.public_url == target.resolve().as_uri()


def test_local_uploader_with_base_url(tmp_path):
    uploader = LocalFolderUploader(tmp_path, base_url="https://cdn.example.com/")

    result = asyncio.run(uploader.upload(b"x", "videos/v1/images/a.jpg"))

    assert result.public_url == "https://cdn.example.com/videos/v1/images/a.jpg"


def test_fallback_uploader_uses_secondary_on_failure(log_messages):
    secondary = FakeUploader()

    result = asyncio.run(FallbackUploader(BrokenUploader(), secondary).upload(b"x", "videos/v1/images/a.jpg"))

    assert result.provider == "fake"
    assert secondary.uploads == [("videos/v1/images/a.jpg", b"x")]
    assert any("bucket upload failed" in message for message in log_messages)


def test_fallback_uploader_prefers_primary():
    primary, secondary = FakeUploader(), FakeUploader()

    asyncio.run(FallbackUploader(primary, secondary).upload(b"x", "dest"))

    assert len(primary.uploads) == 1
    assert secondary.uploads == []


def test_download_image_returns_bytes():
    session = FakeSession(FakeResponse(b"jpeg"))

    data = asyncio.run(download_image("https://img.example.com/1.jpg", timeout=5.0, session=session))

    assert data == b"jpeg"
    assert session.requests == [("https://img.example.com/1.jpg", 5.0)]


def test_download_image_wraps_http_errors():
    session = FakeSession(FakeResponse(status_error=requests.HTTPError("404 Not Found")))

    with pytest.raises(ProviderCallFailed):
        asyncio.run(download_image("https://img.example.com/missing.jpg", session=session))
