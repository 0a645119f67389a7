"""Tests for event sinks."""

import logging
from decimal import Decimal

from timeslice.models.execution import OrderAttempt, OrderConfirmation, Side, VenueSnapshot
from timeslice.schedule.events import (
    AttemptFailed,
    AttemptSucceeded,
    FanOutEventSink,
    LoggingEventSink,
    PlanBuilt,
    PreflightCompleted,
    RecordingEventSink,
)
from timeslice.schedule.planner import build_plan


def _success(remaining="8"):
    confirmation = OrderConfirmation("42", Decimal("0.001"), Decimal("2000"), "FILLED")
    attempt = OrderAttempt(
        index=0, requested_quote_amount=Decimal("2"), confirmation=confirmation
    )
    return AttemptSucceeded(
        attempt=attempt, confirmation=confirmation, remaining_budget=Decimal(remaining)
    )


class TestLoggingEventSink:
    def test_success_line(self, caplog):
        caplog.set_level(logging.INFO)
        LoggingEventSink().on_event(_success())
        assert "OrderID=42, Status=FILLED, ExecutedQty=0.001, Price=2000" in caplog.text
        assert "Remaining USDT amount to use: 8.00" in caplog.text

    def test_failure_line(self, caplog):
        caplog.set_level(logging.INFO)
        attempt = OrderAttempt(index=2, requested_quote_amount=Decimal("1"), error="HTTP 400")
        LoggingEventSink().on_event(AttemptFailed(attempt=attempt, remaining_budget=Decimal("3")))
        assert "Error placing order #3: HTTP 400" in caplog.text
        assert "Remaining USDT amount to use: 3.00" in caplog.text

    def test_plan_lines(self, caplog):
        caplog.set_level(logging.INFO)
        plan = build_plan(Side.BUY, 3600, Decimal("5"))
        LoggingEventSink(quote_asset="USDC").on_event(PlanBuilt(symbol="BTCUSDC", plan=plan))
        assert "USDC amount per second: 0.00000000" in caplog.text
        assert "QUANTIZED mode: 5 orders" in caplog.text
        assert "every 720s" in caplog.text

    def test_empty_plan_line(self, caplog):
        caplog.set_level(logging.INFO)
        plan = build_plan(Side.BUY, 3600, Decimal("0.5"))
        LoggingEventSink().on_event(PlanBuilt(symbol="BTCUSDT", plan=plan))
        assert "nothing to execute" in caplog.text

    def test_preflight_lines(self, caplog):
        caplog.set_level(logging.INFO)
        event = PreflightCompleted(
            symbol="BTCUSDT",
            side=Side.SELL,
            snapshot=VenueSnapshot(Decimal("50000"), Decimal("500")),
            budget=Decimal("250"),
        )
        LoggingEventSink().on_event(event)
        assert "Initial available USDT (quote) amount: 500.00" in caplog.text
        assert "Starting automated sell for BTCUSDT" in caplog.text


class TestFanOut:
    def test_broadcasts(self):
        a, b = RecordingEventSink(), RecordingEventSink()
        event = _success()
        FanOutEventSink(a, b).on_event(event)
        assert a.events == [event]
        assert b.events == [event]
