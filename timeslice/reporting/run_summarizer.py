"""Run summarizer: aggregates scheduler output into a RunSummary."""

from decimal import Decimal

from timeslice.models.duration import DurationSpec
from timeslice.models.reporting import RunResult, RunSummary


class RunSummarizer:
    def __init__(self, run_id: str, mode: str, symbol: str, side: str):
        self.summary = RunSummary(run_id=run_id, mode=mode, symbol=symbol, side=side)

    def record_duration_spec(self, duration: DurationSpec) -> None:
        self.summary.duration = str(duration)
        self.summary.total_seconds = duration.total_seconds

    def record_result(self, result: RunResult) -> None:
        plan = result.plan
        self.summary.plan_mode = plan.mode.value
        self.summary.slice_count = plan.slice_count
        self.summary.slice_size = str(plan.slice_size)
        self.summary.interval_seconds = plan.interval_seconds
        self.summary.orders_attempted = result.attempts_dispatched
        self.summary.orders_succeeded = result.attempts_succeeded
        self.summary.orders_failed = result.attempts_failed
        self.summary.initial_budget = str(result.initial_budget)
        self.summary.remaining_budget = str(result.remaining_budget)
        executed = sum(
            (a.confirmation.executed_qty for a in result.attempts if a.confirmation),
            Decimal(0),
        )
        self.summary.executed_qty = str(executed)
        self.summary.stop_reason = result.stop_reason.value

    def record_config_hash(self, h: str) -> None:
        self.summary.config_hash = h

    def record_elapsed(self, seconds: float) -> None:
        self.summary.duration_seconds = seconds

    def record_error(self, error: str) -> None:
        self.summary.errors.append(error)

    def finalize(self) -> RunSummary:
        return self.summary
