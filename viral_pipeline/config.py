"""
Configuration dataclasses for the enhancement pipeline.

All tunable parameters are centralized here as dataclass-based configuration,
validated once when the configuration is built.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List

from dotenv import load_dotenv

from .errors import UnsupportedConfiguration
from .image_models import IMAGE_MODELS, default_image_prices, parse_size


# Generation kinds routed through the text-provider fallback chain
GENERATION_KINDS = (
    "script",
    "title",
    "description",
    "keywords",
    "breakdown",
    "style",
    "image_prompt",
    "editor_keywords",
    "thumbnail_prompt",
    "context",
    "prompt_enhancement",
    "thumbnail_suggestions",
)


def _default_prices() -> Dict[str, float]:
    prices = default_image_prices()
    prices.update({
        "claude-sonnet-prompt-enhancement": 0.0015,
        "gpt-4o-mini": 0.005,
    })
    return prices


def _default_priorities() -> Dict[str, List[str]]:
    # Claude leads the creative kinds, OpenAI the structured ones
    creative = ["anthropic", "openai", "openrouter"]
    structured = ["openai", "anthropic", "openrouter"]
    priorities = {kind: list(structured) for kind in GENERATION_KINDS}
    for kind in ("script", "context", "prompt_enhancement", "thumbnail_suggestions"):
        priorities[kind] = list(creative)
    return priorities


@dataclass
class CostConfig:
    """Configuration for cost tracking and the per-video budget."""
    prices: Dict[str, float] = field(default_factory=_default_prices)
    default_model: str = "dall-e-2"  # Price used for models missing from the table
    max_cost_per_video: float = 1.50
    prompt_enhancement_cost: float = 0.0015


@dataclass
class ImageConfig:
    """Configuration for per-sentence image and thumbnail generation."""
    enabled: bool = False
    width: int = 1920
    height: int = 1080
    model: str = "leonardo-phoenix"
    max_images: int = 0  # 0 = unlimited, subject to budget
    quality: str = "standard"  # options: "standard", "hd" (dall-e-3 only)
    enhance_prompts: bool = True
    request_delay_seconds: float = 2.0
    thumbnail_size: str = "1792x1024"

    @property
    def size(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass
class ScriptConfig:
    """Configuration for script generation and breakdown."""
    enable_breakdown: bool = False
    description_excerpt_chars: int = 500
    title_excerpt_chars: int = 800
    keyword_excerpt_chars: int = 1200
    thumbnail_excerpt_chars: int = 300


@dataclass
class ProviderConfig:
    """Text provider models and fallback order per generation kind."""
    priorities: Dict[str, List[str]] = field(default_factory=_default_priorities)
    anthropic_model: str = "anthropic/claude-3-5-sonnet-20241022"
    openai_model: str = "gpt-4o-mini"
    openrouter_model: str = "google/gemini-2.0-flash-001"

    def model_for(self, provider: str) -> str:
        """Get the model id used for a text provider."""
        return {
            "anthropic": self.anthropic_model,
            "openai": self.openai_model,
            "openrouter": self.openrouter_model,
        }[provider]


@dataclass
class LeonardoConfig:
    """Configuration for the Leonardo AI REST API."""
    base_url: str = "https://cloud.leonardo.ai/api/rest/v1"
    enable_alchemy: bool = True
    poll_attempts: int = 30
    poll_interval_seconds: float = 2.0


@dataclass
class TimeoutConfig:
    """Timeouts applied to every outbound call."""
    request_timeout_seconds: float = 60.0
    download_timeout_seconds: float = 30.0


@dataclass
class PipelineConfig:
    """Main configuration for the entire pipeline."""
    costs: CostConfig = field(default_factory=CostConfig)
    images: ImageConfig = field(default_factory=ImageConfig)
    script: ScriptConfig = field(default_factory=ScriptConfig)
    providers: ProviderConfig = field(default_factory=ProviderConfig)
    leonardo: LeonardoConfig = field(default_factory=LeonardoConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)

    def __post_init__(self):
        self.validate()

    @classmethod
    def from_defaults(cls) -> "PipelineConfig":
        """Create configuration with all defaults."""
        return cls()

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """
        Create configuration from environment variables or .env file.

        Unset variables keep their dataclass defaults.

        Returns:
            Validated PipelineConfig

        Raises:
            UnsupportedConfiguration: If a variable holds an invalid value
        """
        load_dotenv()

        images = ImageConfig(
            enabled=_env_bool("ENABLE_IMAGE_GENERATION", ImageConfig.enabled),
            width=_env_int("IMAGE_WIDTH", ImageConfig.width),
            height=_env_int("IMAGE_HEIGHT", ImageConfig.height),
            model=os.getenv("IMAGE_MODEL", ImageConfig.model),
            max_images=_env_int("IMAGE_GENERATION_LIMIT", ImageConfig.max_images),
            enhance_prompts=_env_bool("ENHANCE_PROMPTS", ImageConfig.enhance_prompts),
        )
        script = ScriptConfig(enable_breakdown=_env_bool("ENABLE_SCRIPT_BREAKDOWN", False))
        costs = CostConfig(
            max_cost_per_video=_env_float("MAX_IMAGE_COST_PER_VIDEO", CostConfig.max_cost_per_video),
        )
        providers = ProviderConfig()
        order = os.getenv("TEXT_PROVIDER_ORDER")
        if order:
            chain = [name.strip().lower() for name in order.split(",") if name.strip()]
            providers.priorities = {kind: list(chain) for kind in GENERATION_KINDS}

        return cls(costs=costs, images=images, script=script, providers=providers)

    def validate(self) -> None:
        """
        Check the configuration once, at construction.

        Raises:
            UnsupportedConfiguration: On the first invalid setting found
        """
        if self.costs.max_cost_per_video < 0:
            raise UnsupportedConfiguration("max_cost_per_video must be non-negative")
        if any(price < 0 for price in self.costs.prices.values()):
            raise UnsupportedConfiguration("Unit prices must be non-negative")
        if self.costs.default_model not in self.costs.prices:
            raise UnsupportedConfiguration(
                f"Default price model {self.costs.default_model!r} has no unit price"
            )
        if self.images.model not in IMAGE_MODELS:
            raise UnsupportedConfiguration(f"Unsupported image model: {self.images.model}")
        if self.images.width <= 0 or self.images.height <= 0:
            raise UnsupportedConfiguration("Image dimensions must be positive")
        if self.images.max_images < 0:
            raise UnsupportedConfiguration("max_images must be 0 (unlimited) or positive")
        if self.images.quality not in ("standard", "hd"):
            raise UnsupportedConfiguration(f"Unsupported image quality: {self.images.quality}")
        if self.images.request_delay_seconds < 0:
            raise UnsupportedConfiguration("request_delay_seconds must be non-negative")
        parse_size(self.images.thumbnail_size)

        known = {"anthropic", "openai", "openrouter"}
        for kind in GENERATION_KINDS:
            chain = self.providers.priorities.get(kind)
            if not chain:
                raise UnsupportedConfiguration(f"No text providers configured for {kind}")
            unknown = [name for name in chain if name not in known]
            if unknown:
                raise UnsupportedConfiguration(f"Unknown text providers for {kind}: {unknown}")
            # One attempt per provider per call
            if len(set(chain)) != len(chain):
                raise UnsupportedConfiguration(f"Duplicate text providers for {kind}: {chain}")

        if self.timeouts.request_timeout_seconds <= 0 or self.timeouts.download_timeout_seconds <= 0:
            raise UnsupportedConfiguration("Timeouts must be positive")
        if self.leonardo.poll_attempts <= 0:
            raise UnsupportedConfiguration("Leonardo poll_attempts must be positive")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise UnsupportedConfiguration(f"{name} must be an integer, got {value!r}") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise UnsupportedConfiguration(f"{name} must be a number, got {value!r}") from None
