import pytest

from viral_pipeline.config import CostConfig
from viral_pipeline.costs import CostLedger
from viral_pipeline.errors import BudgetExceeded


def test_estimate_cost_uses_price_table_and_default():
    ledger = CostLedger(CostConfig())

    assert ledger.estimate_cost("dall-e-3") == pytest.approx(0.04)
    assert ledger.estimate_cost("dall-e-3-hd", 2) == pytest.approx(0.16)
    assert ledger.estimate_cost("leonardo-phoenix", 10) == pytest.approx(0.018)
    # Unknown models fall back to the default model's price
    assert ledger.estimate_cost("mystery-model") == pytest.approx(0.02)


def test_track_cost_accumulates_per_category():
    ledger = CostLedger(CostConfig())

    ledger.track_cost("v1", 0.04, "image")
    ledger.track_cost("v1", 0.0015, "prompt-enhancement")
    ledger.track_cost("v1", 0.04, "image")

    summary = ledger.video_summary("v1")
    assert summary["total_cost"] == pytest.approx(0.0815)
    assert summary["breakdown"]["image"] == pytest.approx(0.08)
    assert summary["breakdown"]["prompt-enhancement"] == pytest.approx(0.0015)
    assert ledger.total_cost == pytest.approx(0.0815)


def test_untracked_video_counts_as_zero():
    ledger = CostLedger(CostConfig(max_cost_per_video=0.10))

    assert ledger.current_total("never-seen") == 0.0
    assert ledger.is_within_budget("never-seen", 0.10)
    assert not ledger.is_within_budget("never-seen", 0.11)
    assert ledger.video_summary("never-seen") == {"total_cost": 0.0, "breakdown": {}}


def test_is_within_budget_accepts_exact_fit():
    ledger = CostLedger(CostConfig(max_cost_per_video=0.12))
    ledger.track_cost("v1", 0.04)
    ledger.track_cost("v1", 0.04)

    assert ledger.is_within_budget("v1", 0.04)
    assert ledger.affordable_count("v1", 0.04) == 1
    assert ledger.affordable_count("fresh", 0.04) == 3


def test_ensure_within_budget_raises_with_details(log_messages):
    ledger = CostLedger(CostConfig(max_cost_per_video=0.05))
    ledger.track_cost("v1", 0.04)

    with pytest.raises(BudgetExceeded) as excinfo:
        ledger.ensure_within_budget("v1", 0.02)

    error = excinfo.value
    assert error.video_id == "v1"
    assert error.current_total == pytest.approx(0.04)
    assert error.additional_cost == pytest.approx(0.02)
    assert error.ceiling == pytest.approx(0.05)
    assert any("would exceed budget" in message for message in log_messages)


def test_is_within_budget_is_a_pure_read():
    ledger = CostLedger(CostConfig())
    ledger.is_within_budget("v1", 1.0)

    assert ledger.video_costs == {}
    assert ledger.total_cost == 0.0


def test_two_video_summary():
    ledger = CostLedger(CostConfig())
    for video_id, amount in (("v1", 0.04), ("v1", 0.04), ("v2", 0.04)):
        ledger.track_cost(video_id, amount)
        ledger.record_image()

    summary = ledger.get_summary()
    assert summary["total_cost"] == pytest.approx(0.12)
    assert summary["video_count"] == 2
    assert summary["average_cost_per_video"] == pytest.approx(0.06)
    assert summary["images_generated"] == 3
    assert summary["budget_ceiling"] == 1.50
    assert summary["per_video_breakdown"]["v1"]["total"] == pytest.approx(0.08)
    assert summary["per_video_breakdown"]["v2"]["breakdown"] == {"image": pytest.approx(0.04)}


def test_empty_summary():
    summary = CostLedger().get_summary()

    assert summary["total_cost"] == 0.0
    assert summary["video_count"] == 0
    assert summary["average_cost_per_video"] == 0.0
    assert summary["per_video_breakdown"] == {}
