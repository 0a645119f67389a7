"""Execution plan and order models."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum

from timeslice.models.common import utc_now_iso


class Side(StrEnum):
    BUY = "BUY"
    SELL = "SELL"


class PlanMode(StrEnum):
    LINEAR = "LINEAR"
    QUANTIZED = "QUANTIZED"


@dataclass(frozen=True)
class VenueSnapshot:
    current_price: Decimal
    available_quote: Decimal


@dataclass(frozen=True)
class ExecutionPlan:
    side: Side
    total_budget: Decimal
    total_seconds: int
    mode: PlanMode
    rate_per_second: Decimal | None  # None when the span is zero
    slice_count: int
    slice_size: Decimal
    interval_seconds: int
    quantum: Decimal

    @property
    def is_empty(self) -> bool:
        return self.slice_count == 0

    @property
    def planned_spend(self) -> Decimal:
        return self.slice_size * self.slice_count


@dataclass(frozen=True)
class OrderConfirmation:
    order_id: str
    executed_qty: Decimal
    fill_price: Decimal
    status: str


@dataclass(frozen=True)
class OrderAttempt:
    index: int
    requested_quote_amount: Decimal
    confirmation: OrderConfirmation | None = None
    error: str = ""
    attempted_at: str = field(default_factory=utc_now_iso)

    @property
    def succeeded(self) -> bool:
        return self.confirmation is not None
