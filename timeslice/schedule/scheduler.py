"""Time-sliced execution scheduler.

Runs an ExecutionPlan one order at a time against a Venue, tracking the
remaining budget and stopping when the plan is exhausted, the budget no
longer covers the next slice, or a stop is requested.
"""

import logging
import threading
from decimal import Decimal
from typing import Protocol

from timeslice.models.execution import ExecutionPlan, OrderAttempt
from timeslice.models.reporting import RunResult, SchedulerState, StopReason
from timeslice.schedule.events import (
    AttemptDispatched,
    AttemptFailed,
    AttemptSucceeded,
    EventSink,
    NullEventSink,
    PlanBuilt,
    PreflightCompleted,
    RunStopped,
)
from timeslice.schedule.planner import (
    DEFAULT_QUANTUM,
    ExecutionRequest,
    build_plan,
    preflight,
)
from timeslice.venue.base import Venue, VenueError

logger = logging.getLogger(__name__)

# IDLE -> EXECUTING runs a plan built elsewhere
ALLOWED_TRANSITIONS: dict[SchedulerState, frozenset[SchedulerState]] = {
    SchedulerState.IDLE: frozenset({SchedulerState.PLANNING, SchedulerState.EXECUTING}),
    SchedulerState.PLANNING: frozenset({SchedulerState.EXECUTING, SchedulerState.ABORTED}),
    SchedulerState.EXECUTING: frozenset({SchedulerState.COMPLETED, SchedulerState.ABORTED}),
}


class SchedulerStateError(RuntimeError):
    pass


class Waiter(Protocol):
    def wait(self, seconds: float, stop_event: threading.Event) -> bool:
        """Suspend for ``seconds``; return True if a stop was requested."""


class EventWaiter:
    """Real-time waiter that wakes immediately when the stop event is set."""

    def wait(self, seconds: float, stop_event: threading.Event) -> bool:
        # Event.wait overflows past TIMEOUT_MAX; long intervals wait in chunks
        while seconds > threading.TIMEOUT_MAX:
            if stop_event.wait(threading.TIMEOUT_MAX):
                return True
            seconds -= threading.TIMEOUT_MAX
        return stop_event.wait(seconds)


class Scheduler:
    def __init__(
        self,
        venue: Venue,
        sink: EventSink | None = None,
        waiter: Waiter | None = None,
        quote_asset: str = "USDT",
        quantum: Decimal = DEFAULT_QUANTUM,
    ):
        self.venue = venue
        self.sink = sink or NullEventSink()
        self.waiter = waiter or EventWaiter()
        self.quote_asset = quote_asset
        self.quantum = quantum
        self._state = SchedulerState.IDLE
        self._stop = threading.Event()

    @property
    def state(self) -> SchedulerState:
        return self._state

    def stop(self) -> None:
        """Request cancellation. Takes effect mid-wait or at the next slice."""
        self._stop.set()

    def _transition(self, next_state: SchedulerState) -> None:
        allowed = ALLOWED_TRANSITIONS.get(self._state, frozenset())
        if next_state not in allowed:
            raise SchedulerStateError(
                f"Illegal scheduler transition {self._state} -> {next_state}"
            )
        logger.debug("Scheduler %s -> %s", self._state, next_state)
        self._state = next_state

    def prepare(self, request: ExecutionRequest) -> ExecutionPlan:
        """Run pre-flight checks against the venue and build the plan.

        Any failure is fatal: the scheduler moves to ABORTED and the error
        propagates.
        """
        self._transition(SchedulerState.PLANNING)
        try:
            snapshot, budget = preflight(self.venue, request, self.quote_asset)
            self.sink.on_event(
                PreflightCompleted(
                    symbol=request.symbol, side=request.side, snapshot=snapshot, budget=budget
                )
            )
            return build_plan(
                request.side, request.duration.total_seconds, budget, self.quantum
            )
        except Exception:
            self._transition(SchedulerState.ABORTED)
            raise

    def execute(self, request: ExecutionRequest) -> RunResult:
        plan = self.prepare(request)
        return self.run(plan, request.symbol)

    def run(self, plan: ExecutionPlan, symbol: str) -> RunResult:
        """Dispatch the plan's slices sequentially.

        A failed dispatch is recorded and the loop moves on to the next
        slot; only confirmed fills reduce the remaining budget. An error
        escaping the loop itself (e.g. from the waiter) aborts the run and
        propagates.
        """
        self._transition(SchedulerState.EXECUTING)
        self.sink.on_event(PlanBuilt(symbol=symbol, plan=plan))

        remaining = plan.total_budget
        attempts: list[OrderAttempt] = []

        if plan.is_empty:
            return self._finish(plan, attempts, remaining, StopReason.EMPTY_PLAN)

        reason = StopReason.PLAN_EXHAUSTED
        last_index = plan.slice_count - 1
        try:
            for index in range(plan.slice_count):
                if self._stop.is_set():
                    reason = StopReason.CANCELLED
                    break
                amount = plan.slice_size
                if remaining < amount:
                    reason = StopReason.INSUFFICIENT_BUDGET
                    break

                self.sink.on_event(AttemptDispatched(index=index, quote_amount=amount))
                attempt, remaining = self._dispatch(index, symbol, plan, amount, remaining)
                attempts.append(attempt)

                if index < last_index and self.waiter.wait(plan.interval_seconds, self._stop):
                    reason = StopReason.CANCELLED
                    break
        except Exception:
            logger.error("Scheduler loop failed after %d attempts", len(attempts))
            self._transition(SchedulerState.ABORTED)
            raise

        return self._finish(plan, attempts, remaining, reason)

    def _dispatch(
        self,
        index: int,
        symbol: str,
        plan: ExecutionPlan,
        amount: Decimal,
        remaining: Decimal,
    ) -> tuple[OrderAttempt, Decimal]:
        try:
            confirmation = self.venue.place_market_order(symbol, plan.side, amount)
        except VenueError as e:
            attempt = OrderAttempt(index=index, requested_quote_amount=amount, error=str(e))
            self.sink.on_event(AttemptFailed(attempt=attempt, remaining_budget=remaining))
            return attempt, remaining
        except Exception as e:
            logger.exception("Order dispatch #%d crashed", index + 1)
            attempt = OrderAttempt(index=index, requested_quote_amount=amount, error=str(e))
            self.sink.on_event(AttemptFailed(attempt=attempt, remaining_budget=remaining))
            return attempt, remaining

        remaining -= amount
        attempt = OrderAttempt(
            index=index, requested_quote_amount=amount, confirmation=confirmation
        )
        self.sink.on_event(
            AttemptSucceeded(
                attempt=attempt, confirmation=confirmation, remaining_budget=remaining
            )
        )
        return attempt, remaining

    def _finish(
        self,
        plan: ExecutionPlan,
        attempts: list[OrderAttempt],
        remaining: Decimal,
        reason: StopReason,
    ) -> RunResult:
        final_state = (
            SchedulerState.ABORTED if reason == StopReason.CANCELLED else SchedulerState.COMPLETED
        )
        self._transition(final_state)
        result = RunResult(
            plan=plan,
            attempts=tuple(attempts),
            initial_budget=plan.total_budget,
            remaining_budget=remaining,
            stop_reason=reason,
            final_state=final_state,
        )
        self.sink.on_event(RunStopped(result=result))
        return result
