"""Dry-run venue: logs orders and returns simulated fills at a fixed price."""

import logging
from decimal import Decimal

from timeslice.models.execution import OrderConfirmation, Side
from timeslice.venue.base import VenueError

logger = logging.getLogger(__name__)


class DryRunVenue:
    """In-memory venue for rehearsals.

    ``fail_every=n`` makes every n-th order dispatch fail, which exercises
    the scheduler's per-attempt fault tolerance.
    """

    def __init__(
        self,
        price: Decimal,
        balances: dict[str, Decimal] | None = None,
        fail_every: int = 0,
    ):
        self.price = Decimal(price)
        self.balances = {k: Decimal(v) for k, v in (balances or {}).items()}
        self.fail_every = fail_every
        self.orders: list[tuple[str, Side, Decimal]] = []
        self._dispatches = 0

    def get_available_balance(self, asset: str) -> Decimal:
        if asset not in self.balances:
            raise VenueError(f"{asset} balance not found")
        return self.balances[asset]

    def get_current_price(self, symbol: str) -> Decimal:
        return self.price

    def place_market_order(
        self, symbol: str, side: Side, quote_amount: Decimal
    ) -> OrderConfirmation:
        self._dispatches += 1
        if self.fail_every and self._dispatches % self.fail_every == 0:
            logger.info("DRY-RUN: simulated failure for %s %s", side, symbol)
            raise VenueError(f"Simulated failure on dispatch #{self._dispatches}")

        self.orders.append((symbol, side, quote_amount))
        qty = quote_amount / self.price
        logger.info(
            "DRY-RUN: %s %s for %.8f quote at %.8f (qty %.8f)",
            side, symbol, quote_amount, self.price, qty,
        )
        return OrderConfirmation(
            order_id=f"dry-{self._dispatches}",
            executed_qty=qty,
            fill_price=self.price,
            status="DRY_RUN",
        )
