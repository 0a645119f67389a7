"""Tests for run summarizer and formatters."""

import json
from decimal import Decimal

from timeslice.models.duration import DurationSpec, DurationUnit
from timeslice.models.execution import OrderAttempt, OrderConfirmation, Side
from timeslice.models.reporting import RunResult, SchedulerState, StopReason
from timeslice.reporting.formatters import (
    format_plan_text,
    format_summary_json,
    format_summary_text,
)
from timeslice.reporting.run_summarizer import RunSummarizer
from timeslice.schedule.planner import build_plan


def _result() -> RunResult:
    plan = build_plan(Side.BUY, 3, Decimal("30"))
    filled = OrderConfirmation("1", Decimal("0.5"), Decimal("20"), "FILLED")
    return RunResult(
        plan=plan,
        attempts=(
            OrderAttempt(0, Decimal("10"), confirmation=filled),
            OrderAttempt(1, Decimal("10"), error="HTTP 500"),
            OrderAttempt(2, Decimal("10"), confirmation=filled),
        ),
        initial_budget=Decimal("30"),
        remaining_budget=Decimal("10"),
        stop_reason=StopReason.PLAN_EXHAUSTED,
        final_state=SchedulerState.COMPLETED,
    )


class TestRunSummarizer:
    def test_records_result(self):
        s = RunSummarizer("run-123456789", "dry-run", "BTCUSDT", "BUY")
        s.record_duration_spec(DurationSpec(3, DurationUnit.SECOND))
        s.record_result(_result())
        summary = s.finalize()

        assert summary.orders_attempted == 3
        assert summary.orders_succeeded == 2
        assert summary.orders_failed == 1
        assert summary.executed_qty == "1.0"
        assert summary.remaining_budget == "10"
        assert summary.plan_mode == "LINEAR"
        assert summary.total_seconds == 3

    def test_errors(self):
        s = RunSummarizer("r", "live", "BTCUSDT", "SELL")
        s.record_error("boom")
        assert s.finalize().errors == ["boom"]


class TestFormatters:
    def test_text(self):
        s = RunSummarizer("run-123456789", "dry-run", "BTCUSDT", "BUY")
        s.record_result(_result())
        text = format_summary_text(s.finalize())
        assert "Run run-1234" in text
        assert "Orders: 3 attempted, 2 succeeded, 1 failed" in text
        assert "Budget: 30 initial, 10 remaining" in text

    def test_json(self):
        s = RunSummarizer("r", "dry-run", "BTCUSDT", "BUY")
        s.record_result(_result())
        data = json.loads(format_summary_json(s.finalize()))
        assert data["stop_reason"] == "PLAN_EXHAUSTED"
        assert data["orders_failed"] == 1

    def test_plan_text(self):
        plan = build_plan(Side.BUY, 86400, Decimal("100"))
        text = format_plan_text(plan, "BTCUSDT", "USDT")
        assert "QUANTIZED" in text
        assert "1d00h00m00s" in text
        assert "100 x 1.00000000 USDT every 864s" in text

    def test_empty_plan_text(self):
        plan = build_plan(Side.SELL, 60, Decimal("0"))
        assert "nothing to execute" in format_plan_text(plan, "BTCUSDT", "USDT")
