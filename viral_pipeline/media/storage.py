"""
Image download and storage upload.

Uploaders share one async call, ``upload(data, destination)``, returning an
UploadResult with a permanent public URL.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import requests
from loguru import logger

from ..errors import ProviderCallFailed


@dataclass
class UploadResult:
    public_url: str
    provider: str


def storage_path(video_id: str, folder_type: str, file_name: str) -> str:
    """Destination path of an artifact: videos/<id>/<images|thumbnails>/<file>."""
    return f"videos/{video_id}/{folder_type}/{file_name}"


class LocalFolderUploader:
    """
    Writes artifacts under a local root folder.

    Public URLs are built from `base_url` when given, otherwise file:// URIs.
    """

    name = "local"

    def __init__(self, root: Union[str, Path], base_url: Optional[str] = None):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/") if base_url else None

    async def upload(self, data: bytes, destination: str) -> UploadResult:
        target = self.root / destination
        await asyncio.to_thread(self._write, target, data)
        if self.base_url:
            public_url = f"{self.base_url}/{destination}"
        else:
            public_url = target.resolve().as_uri()
        logger.info(f"Saved {destination} to {target}")
        return UploadResult(public_url=public_url, provider=self.name)

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)


class FallbackUploader:
    """Try the primary uploader, then the secondary if the primary fails."""

    def __init__(self, primary, secondary):
        self.primary = primary
        self.secondary = secondary

    async def upload(self, data: bytes, destination: str) -> UploadResult:
        try:
            return await self.primary.upload(data, destination)
        except Exception as exc:
            primary_name = getattr(self.primary, "name", type(self.primary).__name__)
            logger.warning(f"{primary_name} upload failed for {destination}, falling back: {exc}")
        return await self.secondary.upload(data, destination)


async def download_image(url: str, timeout: float = 30.0, session: Optional[requests.Session] = None) -> bytes:
    """
    Download image bytes from a provider-hosted URL.

    Args:
        url: Image URL
        timeout: Request timeout in seconds
        session: Optional requests session

    Returns:
        Raw image bytes

    Raises:
        ProviderCallFailed: If the download fails
    """
    http = session or requests

    def fetch() -> bytes:
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
        return response.content

    try:
        return await asyncio.to_thread(fetch)
    except requests.RequestException as exc:
        raise ProviderCallFailed("download", f"could not download {url}: {exc}") from exc
