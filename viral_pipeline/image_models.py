"""
Image model catalog.

Each supported image model carries its own capability descriptor so the
generation code never branches on raw model-name prefixes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from loguru import logger

from .errors import UnsupportedConfiguration


class ImageProvider(str, Enum):
    """Image generation backends."""
    LEONARDO = "leonardo"
    OPENAI = "openai"
    REPLICATE = "replicate"


@dataclass(frozen=True)
class ImageModelSpec:
    """Capabilities and pricing of one image model."""
    model: str
    provider: ImageProvider
    unit_price: float
    max_width: int = 1024
    max_height: int = 1024
    # Empty means any size up to max_width x max_height
    supported_sizes: Tuple[str, ...] = ()
    fallback_size: Optional[str] = None
    supports_quality: bool = False
    hd_price: Optional[float] = None
    supports_alchemy: bool = False
    preset_style: Optional[str] = None
    remote_id: Optional[str] = None
    display_name: str = ""

    def price_key(self, quality: str = "standard") -> str:
        """Key of this model in the ledger's price table."""
        if quality == "hd" and self.supports_quality and self.hd_price is not None:
            return f"{self.model}-hd"
        return self.model


# Leonardo prices: ~7 credits per image at $9 / 3500 credits
IMAGE_MODELS: Dict[str, ImageModelSpec] = {
    spec.model: spec
    for spec in (
        ImageModelSpec(
            model="leonardo-phoenix",
            provider=ImageProvider.LEONARDO,
            unit_price=0.0018,
            max_width=1472,
            max_height=832,
            supports_alchemy=True,
            preset_style="CINEMATIC",
            remote_id="b24e16ff-06e3-43eb-8d33-4416c2d75876",
            display_name="Leonardo Phoenix",
        ),
        ImageModelSpec(
            model="leonardo-vision-xl",
            provider=ImageProvider.LEONARDO,
            unit_price=0.0018,
            supports_alchemy=True,
            preset_style="PHOTOGRAPHY",
            remote_id="5c232a9e-9061-4777-980a-ddc8e65647c6",
            display_name="Leonardo Vision XL",
        ),
        ImageModelSpec(
            model="leonardo-diffusion-xl",
            provider=ImageProvider.LEONARDO,
            unit_price=0.0018,
            supports_alchemy=True,
            preset_style="CREATIVE",
            remote_id="1e60896f-3c26-4296-8ecc-53e2afecc132",
            display_name="Leonardo Diffusion XL",
        ),
        ImageModelSpec(
            model="leonardo-kino-xl",
            provider=ImageProvider.LEONARDO,
            unit_price=0.0018,
            supports_alchemy=True,
            preset_style="CINEMATIC",
            remote_id="aa77f04e-3eec-4034-9c07-d0f619684628",
            display_name="Leonardo Kino XL",
        ),
        ImageModelSpec(
            model="dreamshaper-v7",
            provider=ImageProvider.LEONARDO,
            unit_price=0.0018,
            remote_id="ac614f96-1082-45bf-be9d-757f2d31c174",
            display_name="DreamShaper v7",
        ),
        ImageModelSpec(
            model="dall-e-2",
            provider=ImageProvider.OPENAI,
            unit_price=0.02,
            supported_sizes=("256x256", "512x512", "1024x1024"),
            fallback_size="1024x1024",
            display_name="DALL-E 2",
        ),
        ImageModelSpec(
            model="dall-e-3",
            provider=ImageProvider.OPENAI,
            unit_price=0.04,
            max_width=1792,
            max_height=1792,
            supported_sizes=("1024x1024", "1792x1024", "1024x1792"),
            fallback_size="1792x1024",
            supports_quality=True,
            hd_price=0.08,
            display_name="DALL-E 3",
        ),
        ImageModelSpec(
            model="stability-ai/stable-diffusion-3",
            provider=ImageProvider.REPLICATE,
            unit_price=0.035,
            max_width=1536,
            max_height=1536,
            display_name="Stable Diffusion 3",
        ),
    )
}


def get_image_model(model: str) -> ImageModelSpec:
    """
    Look up a model's capability descriptor.

    Raises:
        UnsupportedConfiguration: If the model is not in the catalog
    """
    try:
        return IMAGE_MODELS[model]
    except KeyError:
        raise UnsupportedConfiguration(f"Unsupported image model: {model}") from None


def default_image_prices() -> Dict[str, float]:
    """Per-image prices for every catalog model, including HD variants."""
    prices = {}
    for spec in IMAGE_MODELS.values():
        prices[spec.model] = spec.unit_price
        if spec.hd_price is not None:
            prices[spec.price_key("hd")] = spec.hd_price
    return prices


def parse_size(size: str) -> Tuple[int, int]:
    """Parse a "WIDTHxHEIGHT" string."""
    try:
        width, height = map(int, size.lower().split("x"))
    except ValueError:
        raise UnsupportedConfiguration(f"Invalid image size: {size!r}") from None
    if width <= 0 or height <= 0:
        raise UnsupportedConfiguration(f"Invalid image size: {size!r}")
    return width, height


def resolve_size(spec: ImageModelSpec, size: str) -> str:
    """
    Map a requested size onto one the model can produce.

    Fixed-size models snap to their documented fallback size; free-size
    models are clamped to their maximum and rounded down to multiples of 8
    within [32, 1024]. Every substitution is logged.

    Raises:
        UnsupportedConfiguration: If the size cannot be parsed or snapped
    """
    width, height = parse_size(size)

    if spec.supported_sizes:
        if size in spec.supported_sizes:
            return size
        if spec.fallback_size is None:
            raise UnsupportedConfiguration(f"{spec.model} does not support {size}")
        logger.info(f"{spec.display_name} doesn't support {size}, using {spec.fallback_size}")
        return spec.fallback_size

    final_width = min(width, spec.max_width)
    final_height = min(height, spec.max_height)
    if spec.provider == ImageProvider.LEONARDO:
        final_width = max(32, min(1024, final_width // 8 * 8))
        final_height = max(32, min(1024, final_height // 8 * 8))
    resolved = f"{final_width}x{final_height}"
    if resolved != size:
        logger.info(f"{spec.display_name} size {size} adjusted to {resolved}")
    return resolved
