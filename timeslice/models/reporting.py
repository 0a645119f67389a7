"""Run result and reporting models."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum

from timeslice.models.execution import ExecutionPlan, OrderAttempt


class SchedulerState(StrEnum):
    IDLE = "IDLE"
    PLANNING = "PLANNING"
    EXECUTING = "EXECUTING"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


class StopReason(StrEnum):
    EMPTY_PLAN = "EMPTY_PLAN"
    PLAN_EXHAUSTED = "PLAN_EXHAUSTED"
    INSUFFICIENT_BUDGET = "INSUFFICIENT_BUDGET"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class RunResult:
    plan: ExecutionPlan
    attempts: tuple[OrderAttempt, ...]
    initial_budget: Decimal
    remaining_budget: Decimal
    stop_reason: StopReason
    final_state: SchedulerState

    @property
    def attempts_dispatched(self) -> int:
        return len(self.attempts)

    @property
    def attempts_succeeded(self) -> int:
        return sum(1 for a in self.attempts if a.succeeded)

    @property
    def attempts_failed(self) -> int:
        return self.attempts_dispatched - self.attempts_succeeded

    @property
    def spent(self) -> Decimal:
        return self.initial_budget - self.remaining_budget


@dataclass
class RunSummary:
    run_id: str
    mode: str
    symbol: str
    side: str
    duration: str = ""
    total_seconds: int = 0
    plan_mode: str = ""
    slice_count: int = 0
    slice_size: str = "0"
    interval_seconds: int = 0
    orders_attempted: int = 0
    orders_succeeded: int = 0
    orders_failed: int = 0
    initial_budget: str = "0"
    remaining_budget: str = "0"
    executed_qty: str = "0"
    stop_reason: str = ""
    config_hash: str = ""
    duration_seconds: float = 0.0
    errors: list[str] = field(default_factory=list)
