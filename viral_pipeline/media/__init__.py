"""
Image generation and storage modules for the enhancement pipeline.
"""

from .image_providers import (
    ImageGenerationResult,
    DalleImageProvider,
    LeonardoImageProvider,
    ReplicateImageProvider,
    build_image_providers,
)
from .storage import UploadResult, LocalFolderUploader, FallbackUploader, download_image, storage_path

__all__ = [
    "ImageGenerationResult",
    "DalleImageProvider",
    "LeonardoImageProvider",
    "ReplicateImageProvider",
    "build_image_providers",
    "UploadResult",
    "LocalFolderUploader",
    "FallbackUploader",
    "download_image",
    "storage_path",
]
