"""Venue capability consumed by the scheduler.

Concrete venues adapt a specific exchange (or a simulation) to this
protocol. Calls are synchronous and never retried internally; retry policy
belongs to the caller.
"""

from decimal import Decimal
from typing import Protocol

from timeslice.models.execution import OrderConfirmation, Side


class VenueError(Exception):
    """Raised when a venue call fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class VenueTimeout(VenueError):
    """Raised when a venue call exceeds its request timeout."""


class Venue(Protocol):
    def get_available_balance(self, asset: str) -> Decimal:
        """Return the free balance of an asset."""

    def get_current_price(self, symbol: str) -> Decimal:
        """Return the last traded price of a symbol in its quote asset."""

    def place_market_order(
        self, symbol: str, side: Side, quote_amount: Decimal
    ) -> OrderConfirmation:
        """Submit a market order sized in quote-asset units."""
