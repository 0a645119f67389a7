"""Common types and helpers shared across models."""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def round2(value: Decimal) -> Decimal:
    """Round half away from zero to quote-currency cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
