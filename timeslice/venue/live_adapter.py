"""Live venue: routes balance, price and order calls through BinanceClient."""

import logging
from decimal import Decimal, InvalidOperation

from timeslice.models.execution import OrderConfirmation, Side
from timeslice.venue.base import VenueError, VenueTimeout
from timeslice.venue.binance_client import BinanceClient, BinanceClientError, BinanceTimeout

logger = logging.getLogger(__name__)


def _translate(e: BinanceClientError) -> VenueError:
    if isinstance(e, BinanceTimeout):
        return VenueTimeout(str(e), e.status_code)
    return VenueError(str(e), e.status_code)


class BinanceVenue:
    """Venue implementation backed by the Binance spot REST API."""

    def __init__(self, client: BinanceClient):
        self.client = client

    def get_available_balance(self, asset: str) -> Decimal:
        try:
            return self.client.get_asset_balance(asset)
        except BinanceClientError as e:
            raise _translate(e) from e

    def get_current_price(self, symbol: str) -> Decimal:
        try:
            return self.client.get_ticker_price(symbol)
        except BinanceClientError as e:
            raise _translate(e) from e

    def place_market_order(
        self, symbol: str, side: Side, quote_amount: Decimal
    ) -> OrderConfirmation:
        """Submit a market order and map the response to an OrderConfirmation."""
        logger.debug("LIVE: %s %s quoteOrderQty=%.8f", side, symbol, quote_amount)
        try:
            result = self.client.place_market_order(symbol, side.value, quote_amount)
        except BinanceClientError as e:
            raise _translate(e) from e

        try:
            executed_qty = Decimal(result.get("executedQty") or "0")
            fill_price = Decimal(result.get("price") or "0")
            quote_qty = Decimal(result.get("cummulativeQuoteQty") or "0")
            # MARKET fills report price 0; the average comes from the quote total
            if fill_price == 0 and executed_qty > 0 and quote_qty > 0:
                fill_price = quote_qty / executed_qty
            return OrderConfirmation(
                order_id=str(result["orderId"]),
                executed_qty=executed_qty,
                fill_price=fill_price,
                status=str(result.get("status", "")),
            )
        except (KeyError, TypeError, AttributeError, InvalidOperation) as e:
            raise VenueError(f"Unexpected order response: {result!r}") from e
