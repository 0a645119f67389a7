"""Pre-flight checks and execution plan construction."""

from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_FLOOR, Decimal

from timeslice.models.common import round2
from timeslice.models.duration import DurationSpec
from timeslice.models.execution import ExecutionPlan, PlanMode, Side, VenueSnapshot
from timeslice.venue.base import Venue, VenueError


DEFAULT_QUANTUM = Decimal("1")
# Orders are sent with 8 decimals; truncation keeps slice_count * slice_size <= budget
SLICE_PRECISION = Decimal("0.00000001")


class PreflightError(Exception):
    """Base class for fatal checks performed before a plan is built."""


class InvalidSide(PreflightError):
    pass


class UnsupportedQuoteAsset(PreflightError):
    pass


class VenueReadFailure(PreflightError):
    """A balance or price read failed; no plan can be built without it."""

    def __init__(self, what: str, cause: Exception):
        super().__init__(f"Error getting {what}: {cause}")
        self.what = what
        self.cause = cause


class InsufficientFunds(PreflightError):
    def __init__(self, requested: Decimal, available: Decimal, asset: str):
        super().__init__(
            f"Specified total amount ({requested:.8f}) is greater than "
            f"available {asset} amount ({available:.8f})"
        )
        self.requested = requested
        self.available = available
        self.asset = asset


@dataclass(frozen=True)
class ExecutionRequest:
    symbol: str
    duration: DurationSpec
    side: Side
    total_amount: Decimal | None = None  # None means the full available amount


def normalize_side(text: str) -> Side:
    """Accept BUY/SELL in any case."""
    try:
        return Side(text.upper())
    except (ValueError, AttributeError):
        raise InvalidSide(f"Invalid side: {text}. Use BUY or SELL.") from None


def split_symbol(symbol: str, quote_asset: str) -> tuple[str, str]:
    """Split a pair like BTCUSDT into (base, quote)."""
    if not symbol.endswith(quote_asset) or len(symbol) == len(quote_asset):
        raise UnsupportedQuoteAsset(
            f"Unsupported quote asset. Only {quote_asset} quote pairs supported, got: {symbol}"
        )
    return symbol[: -len(quote_asset)], quote_asset


def read_snapshot(venue: Venue, symbol: str, side: Side, quote_asset: str) -> VenueSnapshot:
    """Read the current price and the quote-denominated available amount.

    SELL converts the base-asset balance to quote at the current price.
    """
    base_asset, _ = split_symbol(symbol, quote_asset)
    try:
        price = venue.get_current_price(symbol)
    except VenueError as e:
        raise VenueReadFailure(f"current price for {symbol}", e) from e
    if price <= 0:
        raise VenueReadFailure(
            f"current price for {symbol}", ValueError(f"non-positive price {price}")
        )

    asset = quote_asset if side == Side.BUY else base_asset
    try:
        balance = venue.get_available_balance(asset)
    except VenueError as e:
        raise VenueReadFailure(f"{asset} balance", e) from e

    available = balance if side == Side.BUY else balance * price
    return VenueSnapshot(current_price=price, available_quote=available)


def resolve_budget(
    snapshot: VenueSnapshot, total_amount: Decimal | None, quote_asset: str
) -> Decimal:
    if total_amount is None:
        return snapshot.available_quote
    if not total_amount.is_finite():
        raise ValueError(f"Total amount must be a finite number, got {total_amount}")
    if total_amount <= 0:
        raise ValueError(f"Total amount must be positive, got {total_amount}")
    if total_amount > snapshot.available_quote:
        raise InsufficientFunds(total_amount, snapshot.available_quote, quote_asset)
    return total_amount


def preflight(
    venue: Venue, request: ExecutionRequest, quote_asset: str
) -> tuple[VenueSnapshot, Decimal]:
    """Run the one-time fatal checks and return (snapshot, budget)."""
    snapshot = read_snapshot(venue, request.symbol, request.side, quote_asset)
    budget = resolve_budget(snapshot, request.total_amount, quote_asset)
    return snapshot, budget


def build_plan(
    side: Side,
    total_seconds: int,
    budget: Decimal,
    quantum: Decimal = DEFAULT_QUANTUM,
) -> ExecutionPlan:
    """Choose the plan shape for spending ``budget`` over ``total_seconds``.

    LINEAR trades every second when the rounded per-second rate reaches one
    quantum; otherwise QUANTIZED trades exactly one quantum per attempt,
    spaced evenly across the span.
    """
    if total_seconds < 0:
        raise ValueError(f"total_seconds must be non-negative, got {total_seconds}")
    if budget < 0:
        raise ValueError(f"budget must be non-negative, got {budget}")
    if quantum <= 0:
        raise ValueError(f"quantum must be positive, got {quantum}")

    if total_seconds == 0:
        # Unbounded rate: LINEAR with nothing to schedule
        return ExecutionPlan(
            side=side,
            total_budget=budget,
            total_seconds=0,
            mode=PlanMode.LINEAR,
            rate_per_second=None,
            slice_count=0,
            slice_size=Decimal(0),
            interval_seconds=1,
            quantum=quantum,
        )

    rate = round2(budget / total_seconds)

    if rate >= quantum:
        slice_count = int(total_seconds)
        return ExecutionPlan(
            side=side,
            total_budget=budget,
            total_seconds=total_seconds,
            mode=PlanMode.LINEAR,
            rate_per_second=rate,
            slice_count=slice_count,
            slice_size=(budget / slice_count).quantize(SLICE_PRECISION, rounding=ROUND_DOWN),
            interval_seconds=1,
            quantum=quantum,
        )

    slice_count = int((budget / quantum).to_integral_value(rounding=ROUND_FLOOR))
    interval = total_seconds // slice_count if slice_count else 0
    return ExecutionPlan(
        side=side,
        total_budget=budget,
        total_seconds=total_seconds,
        mode=PlanMode.QUANTIZED,
        rate_per_second=rate,
        slice_count=slice_count,
        slice_size=quantum,
        interval_seconds=interval,
        quantum=quantum,
    )
