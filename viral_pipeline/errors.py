"""
Exception hierarchy for the enhancement pipeline.

Every error raised by the pipeline derives from PipelineError so callers of
the top-level entry point can catch a single type.
"""

from typing import Dict, Optional


class PipelineError(Exception):
    """Base exception for all pipeline errors."""


class ProviderCallFailed(PipelineError):
    """A single provider attempt failed (network, timeout, non-2xx, provider error)."""

    def __init__(self, provider: str, message: str, kind: Optional[str] = None):
        self.provider = provider
        self.kind = kind
        super().__init__(f"{provider}: {message}")


class MalformedProviderResponse(ProviderCallFailed):
    """A provider answered but its output could not be used."""


class AllProvidersExhausted(PipelineError):
    """Every provider in a fallback chain failed."""

    def __init__(self, kind: str, errors: Dict[str, str]):
        self.kind = kind
        self.errors = errors
        details = "; ".join(f"{name}: {error}" for name, error in errors.items())
        super().__init__(f"All providers failed for {kind} ({details})")


class BudgetExceeded(PipelineError):
    """The proposed spend would push a video over its budget ceiling."""

    def __init__(self, video_id: str, current_total: float, additional_cost: float, ceiling: float):
        self.video_id = video_id
        self.current_total = current_total
        self.additional_cost = additional_cost
        self.ceiling = ceiling
        super().__init__(
            f"Budget exceeded for video {video_id}: current cost ${current_total:.4f}, "
            f"additional ${additional_cost:.4f} would exceed max ${ceiling:.2f}"
        )


class UnsupportedConfiguration(PipelineError):
    """A model, size or quality combination is not supported."""
