"""
Viral Pipeline Package

Budget-gated, multi-provider content enhancement for regenerating YouTube videos.
"""

from .config import PipelineConfig
from .costs import CostLedger
from .enhancer import ContentEnhancer
from .errors import (
    PipelineError,
    ProviderCallFailed,
    MalformedProviderResponse,
    AllProvidersExhausted,
    BudgetExceeded,
    UnsupportedConfiguration,
)
from .models import VideoData, EnhancementResult

__all__ = [
    "PipelineConfig",
    "CostLedger",
    "ContentEnhancer",
    "PipelineError",
    "ProviderCallFailed",
    "MalformedProviderResponse",
    "AllProvidersExhausted",
    "BudgetExceeded",
    "UnsupportedConfiguration",
    "VideoData",
    "EnhancementResult",
]
