"""
Cost ledger and budget guard.

Tracks spend per video in memory and answers, before any billable call,
whether the proposed cost still fits under the per-video ceiling.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from loguru import logger

from .config import CostConfig
from .errors import BudgetExceeded


@dataclass
class VideoCostRecord:
    """Accumulated spend for one video."""
    video_id: str
    total: float = 0.0
    breakdown: Dict[str, float] = field(default_factory=dict)


class CostLedger:
    """
    Running cost ledger owned by a single orchestrator.

    State lives only in memory. Reads and writes are not locked: a
    check-then-spend sequence that awaits in between may observe a stale
    total when several calls for the same video are in flight.
    """

    def __init__(self, config: Optional[CostConfig] = None):
        self.config = config or CostConfig()
        self.total_cost = 0.0
        self.images_generated = 0
        self.video_costs: Dict[str, VideoCostRecord] = {}

    @property
    def ceiling(self) -> float:
        return self.config.max_cost_per_video

    def unit_price(self, model: str) -> float:
        """Per-unit price for a model, or the default model's price if unknown."""
        prices = self.config.prices
        if model in prices:
            return prices[model]
        return prices[self.config.default_model]

    def estimate_cost(self, model: str, count: int = 1) -> float:
        """Estimated cost of `count` units of `model`."""
        return self.unit_price(model) * count

    def current_total(self, video_id: str) -> float:
        record = self.video_costs.get(video_id)
        return record.total if record else 0.0

    def remaining_budget(self, video_id: str) -> float:
        return max(0.0, round(self.ceiling - self.current_total(video_id), 6))

    def affordable_count(self, video_id: str, unit_cost: float) -> int:
        """How many units at `unit_cost` still fit in the video's budget."""
        if unit_cost <= 0:
            raise ValueError("unit_cost must be positive")
        return math.floor(round(self.remaining_budget(video_id) / unit_cost, 6))

    def is_within_budget(self, video_id: str, additional_cost: float = 0.0) -> bool:
        """True iff the video's current total plus `additional_cost` stays at or under the ceiling."""
        # Compared at sub-cent precision so accumulated float error cannot refuse an exact fit
        return round(self.current_total(video_id) + additional_cost, 6) <= round(self.ceiling, 6)

    def ensure_within_budget(self, video_id: str, additional_cost: float) -> None:
        """
        Refuse a billable call that would break the ceiling.

        Raises:
            BudgetExceeded: If the video cannot afford `additional_cost`
        """
        if not self.is_within_budget(video_id, additional_cost):
            current = self.current_total(video_id)
            logger.warning(
                f"Generation for video {video_id} would exceed budget. "
                f"Current: ${current:.4f}, additional: ${additional_cost:.4f}, max: ${self.ceiling:.2f}"
            )
            raise BudgetExceeded(video_id, current, additional_cost, self.ceiling)

    def track_cost(self, video_id: str, amount: float, category: str = "image") -> None:
        """Record actual spend for a video under a cost category."""
        record = self.video_costs.get(video_id)
        if record is None:
            record = VideoCostRecord(video_id=video_id)
            self.video_costs[video_id] = record

        record.breakdown[category] = record.breakdown.get(category, 0.0) + amount
        record.total += amount
        self.total_cost += amount

        logger.info(f"Video {video_id} cost: ${record.total:.4f} (+${amount:.4f} {category})")

    def record_image(self) -> None:
        self.images_generated += 1

    def video_summary(self, video_id: str) -> Dict[str, Any]:
        """Cost summary for a single video."""
        record = self.video_costs.get(video_id)
        return {
            "total_cost": round(record.total, 4) if record else 0.0,
            "breakdown": dict(record.breakdown) if record else {},
        }

    def get_summary(self) -> Dict[str, Any]:
        """Aggregate view across every tracked video."""
        video_count = len(self.video_costs)
        return {
            "total_cost": round(self.total_cost, 4),
            "images_generated": self.images_generated,
            "video_count": video_count,
            "average_cost_per_video": round(self.total_cost / video_count, 4) if video_count else 0.0,
            "per_video_breakdown": {
                video_id: {"total": round(record.total, 4), "breakdown": dict(record.breakdown)}
                for video_id, record in self.video_costs.items()
            },
            "budget_ceiling": self.ceiling,
        }
