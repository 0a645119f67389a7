"""Scheduler events and the sinks that consume them.

The scheduler never logs directly; it emits these events to an injected
sink. LoggingEventSink renders them as the operator-facing log lines.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from timeslice.models.execution import (
    ExecutionPlan,
    OrderAttempt,
    OrderConfirmation,
    Side,
    VenueSnapshot,
)
from timeslice.models.reporting import RunResult


@dataclass(frozen=True)
class PreflightCompleted:
    symbol: str
    side: Side
    snapshot: VenueSnapshot
    budget: Decimal


@dataclass(frozen=True)
class PlanBuilt:
    symbol: str
    plan: ExecutionPlan


@dataclass(frozen=True)
class AttemptDispatched:
    index: int
    quote_amount: Decimal


@dataclass(frozen=True)
class AttemptSucceeded:
    attempt: OrderAttempt
    confirmation: OrderConfirmation
    remaining_budget: Decimal


@dataclass(frozen=True)
class AttemptFailed:
    attempt: OrderAttempt
    remaining_budget: Decimal


@dataclass(frozen=True)
class RunStopped:
    result: RunResult


class EventSink(Protocol):
    def on_event(self, event: Any) -> None:
        """Consume a scheduler event."""


class NullEventSink:
    def on_event(self, event: Any) -> None:
        return None


class RecordingEventSink:
    """Keeps every event in memory."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def on_event(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]


class FanOutEventSink:
    def __init__(self, *sinks: EventSink) -> None:
        self._sinks = sinks

    def on_event(self, event: Any) -> None:
        for sink in self._sinks:
            sink.on_event(event)


class LoggingEventSink:
    """Logs scheduler events using the standard logging module."""

    def __init__(self, logger: logging.Logger | None = None, quote_asset: str = "USDT") -> None:
        self._logger = logger or logging.getLogger("timeslice.schedule")
        self.quote_asset = quote_asset

    def on_event(self, event: Any) -> None:
        q = self.quote_asset
        if isinstance(event, PreflightCompleted):
            self._logger.info(
                "Initial available %s (quote) amount: %.2f", q, event.snapshot.available_quote
            )
            self._logger.info(
                "Starting automated %s for %s at price %.8f (budget %.8f %s)",
                event.side.value.lower(), event.symbol, event.snapshot.current_price,
                event.budget, q,
            )
        elif isinstance(event, PlanBuilt):
            self._log_plan(event)
        elif isinstance(event, AttemptDispatched):
            self._logger.debug(
                "Dispatching order #%d for %.8f %s", event.index + 1, event.quote_amount, q
            )
        elif isinstance(event, AttemptSucceeded):
            c = event.confirmation
            self._logger.info(
                "Order placed successfully: OrderID=%s, Status=%s, ExecutedQty=%s, Price=%s",
                c.order_id, c.status, c.executed_qty, c.fill_price,
            )
            self._logger.info("Remaining %s amount to use: %.2f", q, event.remaining_budget)
        elif isinstance(event, AttemptFailed):
            self._logger.warning(
                "Error placing order #%d: %s", event.attempt.index + 1, event.attempt.error
            )
            self._logger.info("Remaining %s amount to use: %.2f", q, event.remaining_budget)
        elif isinstance(event, RunStopped):
            r = event.result
            self._logger.info(
                "Trading %s (%s): %d dispatched, %d succeeded, %d failed. "
                "Final %s amount remaining to use: %.2f",
                r.final_state.value.lower(),
                r.stop_reason.value,
                r.attempts_dispatched,
                r.attempts_succeeded,
                r.attempts_failed,
                q,
                r.remaining_budget,
            )

    def _log_plan(self, event: PlanBuilt) -> None:
        plan = event.plan
        q = self.quote_asset
        if plan.is_empty:
            self._logger.info(
                "%s plan for %s has nothing to execute (budget %.2f %s over %ds)",
                plan.mode.value, event.symbol, plan.total_budget, q, plan.total_seconds,
            )
            return
        self._logger.info(
            "%s amount per second: %.8f", q, plan.rate_per_second
        )
        self._logger.info(
            "Total %s to %s: %.8f", q, plan.side.value.lower(),
            plan.rate_per_second * plan.total_seconds,
        )
        self._logger.info(
            "%s mode: %d orders of %.8f %s every %ds",
            plan.mode.value, plan.slice_count, plan.slice_size, q, plan.interval_seconds,
        )
